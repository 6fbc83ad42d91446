"""Tests for manhttpd.manpages.store: the gzip corpus on disk."""

import gzip
from pathlib import Path

import pytest

from conftest import PAGE_MTIME, MakePage
from manhttpd.manpages.pages import PageRef
from manhttpd.manpages.store import ManStore


class TestDocumentPath:
    def test_layout(self, store: ManStore, man_root: Path) -> None:
        assert store.document_path(PageRef("1", "ls.1")) == man_root / "man1" / "ls.1.gz"

    def test_repr(self) -> None:
        assert repr(ManStore("/usr/share/man")) == "ManStore('/usr/share/man')"


class TestExists:
    def test_present_and_absent(self, store: ManStore, make_page: MakePage) -> None:
        make_page("8", "mount.8", ".TH MOUNT 8\n")
        assert store.exists(PageRef("8", "mount.8")) is True
        assert store.exists(PageRef("1", "mount.1")) is False


class TestModified:
    def test_whole_seconds(self, store: ManStore, make_page: MakePage) -> None:
        path = make_page("1", "ls.1", ".TH LS 1\n")
        assert store.modified(path) == PAGE_MTIME

    def test_missing_file(self, store: ManStore, man_root: Path) -> None:
        with pytest.raises(FileNotFoundError):
            store.modified(man_root / "man1" / "nope.1.gz")


class TestFirstLine:
    def test_newline_removed(self, store: ManStore, make_page: MakePage) -> None:
        path = make_page("1", "ls.1", ".TH LS 1\n.SH NAME\n")
        assert store.first_line(path) == ".TH LS 1"

    def test_single_line_without_newline(self, store: ManStore, make_page: MakePage) -> None:
        path = make_page("1", "ls.1", ".TH LS 1")
        assert store.first_line(path) == ".TH LS 1"

    def test_not_utf8(self, store: ManStore, man_root: Path) -> None:
        path = man_root / "bad.gz"
        with gzip.open(path, "wb") as fh:
            fh.write(b"\xff\xfe broken\n")
        with pytest.raises(UnicodeDecodeError):
            store.first_line(path)

    def test_not_gzip(self, store: ManStore, man_root: Path) -> None:
        path = man_root / "plain.gz"
        path.write_bytes(b".TH PLAIN 1\n")
        with pytest.raises(gzip.BadGzipFile):
            store.first_line(path)


class TestReadAlias:
    def test_alias(self, store: ManStore, make_page: MakePage) -> None:
        path = make_page("1", "dir.1", ".so man1/ls.1\n")
        assert store.read_alias(path) == "man1/ls.1"

    def test_regular_page(self, store: ManStore, make_page: MakePage) -> None:
        path = make_page("1", "ls.1", ".TH LS 1\n.so man1/other.1\n")
        assert store.read_alias(path) is None

    def test_marker_needs_the_space(self, store: ManStore, make_page: MakePage) -> None:
        path = make_page("1", "odd.1", ".soman1/ls.1\n")
        assert store.read_alias(path) is None
