"""Shared fixtures: a small gzip corpus on disk and a fake formatter."""

import gzip
import html
import os
from collections.abc import Callable
from pathlib import Path
from typing import TypeAlias

import pytest

from manhttpd._internal.offload import run_inline
from manhttpd.app import App
from manhttpd.config import GatewayConfig
from manhttpd.manpages.routes import create_app
from manhttpd.manpages.store import ManStore

PAGE_MTIME = 1_700_000_000  # Tue, 14 Nov 2023 22:13:20 GMT

MakePage: TypeAlias = Callable[..., Path]


class FakeFormatter:
    """Stands in for mandoc: wraps the decompressed source in <pre>."""

    def __init__(self) -> None:
        self.calls: list[Path] = []

    def render(self, path: str | Path) -> str:
        self.calls.append(Path(path))
        with gzip.open(path, "rb") as fh:
            source = fh.read().decode("utf-8")
        return f"<html><body><pre>{html.escape(source)}</pre></body></html>\n"


@pytest.fixture
def man_root(tmp_path: Path) -> Path:
    root = tmp_path / "man"
    root.mkdir()
    return root


@pytest.fixture
def make_page(man_root: Path) -> MakePage:
    """Write ``man<section>/<name>.gz`` with *text* and a fixed mtime."""

    def _make(section: str, name: str, text: str, *, mtime: int = PAGE_MTIME) -> Path:
        directory = man_root / f"man{section}"
        directory.mkdir(exist_ok=True)
        path = directory / f"{name}.gz"
        with gzip.open(path, "wb") as fh:
            fh.write(text.encode("utf-8"))
        os.utime(path, (mtime, mtime))
        return path

    return _make


@pytest.fixture
def corpus(make_page: MakePage) -> None:
    make_page("1", "ls.1", ".TH LS 1\n.SH NAME\nls \\- list directory contents\n")
    make_page("1", "dir.1", ".so man1/ls.1\n")
    make_page("8", "mount.8", ".TH MOUNT 8\n.SH NAME\nmount \\- mount a filesystem\n")
    make_page("3p", "printf.3p", ".TH PRINTF 3P\n")
    make_page("n", "tclsh.n", ".TH tclsh n\n")


@pytest.fixture
def store(man_root: Path) -> ManStore:
    return ManStore(man_root)


@pytest.fixture
def formatter() -> FakeFormatter:
    return FakeFormatter()


@pytest.fixture
def config(man_root: Path) -> GatewayConfig:
    return GatewayConfig(man_root=man_root)


@pytest.fixture
def app(corpus: None, config: GatewayConfig, formatter: FakeFormatter) -> App:
    return create_app(config, formatter=formatter, offload=run_inline)
