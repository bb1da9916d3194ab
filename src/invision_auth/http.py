"""HTTP client factory for the Invision provider."""

from __future__ import annotations

from typing import Any

import httpx

# Faults raised by httpx before a response is available.
TRANSPORT_ERRORS: tuple[type[Exception], ...] = (httpx.HTTPError, httpx.InvalidURL)


def create_http_client(**kwargs: Any) -> httpx.Client:
    """Create a synchronous httpx client that never follows redirects.

    Keyword arguments (``timeout``, ``transport``, ``verify``...) are passed
    through to :class:`httpx.Client`; timeouts are left at httpx's defaults
    unless given.
    """
    kwargs.setdefault("follow_redirects", False)
    return httpx.Client(**kwargs)
