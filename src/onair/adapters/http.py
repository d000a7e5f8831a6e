"""Shared HTTP session setup for remote collaborators."""

from __future__ import annotations

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from .. import __version__

USER_AGENT = f"OnAir/{__version__}"


def create_session(retries: int = 2, backoff_factor: float = 0.5) -> requests.Session:
    """Create a requests session with retry logic on idempotent server errors."""
    session = requests.Session()

    # POSTs are retried too: every call we make is safe to repeat
    retry_strategy = Retry(
        total=retries,
        backoff_factor=backoff_factor,
        status_forcelist=[429, 500, 502, 503, 504],
        allowed_methods=frozenset({"GET", "POST"}),
        raise_on_status=False,
    )

    adapter = HTTPAdapter(max_retries=retry_strategy)
    session.mount("http://", adapter)
    session.mount("https://", adapter)
    session.headers.update({"User-Agent": USER_AGENT})
    return session
