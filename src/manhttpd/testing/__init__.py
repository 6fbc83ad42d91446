"""Test utilities for manhttpd applications.

::

    from manhttpd.testing import TestClient
"""

from manhttpd.testing.client import TestClient

__all__ = ["TestClient"]
