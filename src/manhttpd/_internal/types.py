"""Shared type aliases used across manhttpd modules."""

from collections.abc import Callable
from typing import Any, TypeAlias

# Route handler: a sync or async function taking path params and/or the request
Handler: TypeAlias = Callable[..., Any]
