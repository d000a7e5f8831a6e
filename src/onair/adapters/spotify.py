"""
Spotify track resolver.

Search runs against the Web API with an app-only (client credentials)
bearer token. The token is refreshed ahead of expiry by
:class:`onair.runtime.credentials.TokenRefresher`; the client only fetches
one inline when it has none or the current one has already lapsed.
"""

from __future__ import annotations

import threading
import time
from dataclasses import dataclass
from typing import Any, Callable

import requests

from ..domain.entities import DEFAULT_TRACK_DURATION_MS, Track
from ..infra.exceptions import CatalogUnavailableError, CredentialError
from ..infra.logging import get_logger
from .http import create_session

logger = get_logger(__name__)


@dataclass(frozen=True)
class AccessToken:
    value: str
    lifetime_seconds: float
    issued_at: float

    @property
    def expires_at(self) -> float:
        return self.issued_at + self.lifetime_seconds

    def is_expired(self, now: float) -> bool:
        return now >= self.expires_at


class SpotifyClient:
    """Minimal Spotify Web API client: token grant and track search."""

    def __init__(
        self,
        client_id: str,
        client_secret: str,
        api_url: str = "https://api.spotify.com/v1",
        accounts_url: str = "https://accounts.spotify.com/api/token",
        timeout: float = 30.0,
        session: requests.Session | None = None,
        monotonic_fn: Callable[[], float] = time.monotonic,
    ):
        self.client_id = client_id.strip()
        self.client_secret = client_secret.strip()
        self.api_url = api_url.strip().rstrip("/")
        self.accounts_url = accounts_url.strip()
        self.timeout = timeout
        self.session = session or create_session()
        self._monotonic = monotonic_fn
        self._token: AccessToken | None = None
        self._token_lock = threading.Lock()

    @property
    def token(self) -> AccessToken | None:
        with self._token_lock:
            return self._token

    def refresh_token(self) -> float:
        """
        Obtain a fresh access token via the client credentials grant.

        Returns:
            Token lifetime in seconds

        Raises:
            CredentialError: If the grant fails
        """
        if not self.client_id or not self.client_secret:
            raise CredentialError("Spotify client id/secret are not configured")
        try:
            response = self.session.post(
                self.accounts_url,
                data={"grant_type": "client_credentials"},
                auth=(self.client_id, self.client_secret),
                timeout=self.timeout,
            )
            response.raise_for_status()
            body = response.json()
            value = body["access_token"]
            lifetime = float(body.get("expires_in", 3600))
        except (requests.RequestException, ValueError, KeyError, TypeError) as e:
            raise CredentialError(f"token grant failed: {e}") from e

        with self._token_lock:
            self._token = AccessToken(value=value, lifetime_seconds=lifetime, issued_at=self._monotonic())
        logger.info("spotify_token_refreshed", lifetime_seconds=lifetime)
        return lifetime

    def _bearer(self) -> str:
        token = self.token
        if token is None or token.is_expired(self._monotonic()):
            self.refresh_token()
            token = self.token
        if token is None:
            raise CredentialError("no access token after refresh")
        return token.value

    def search_tracks(self, query: str, limit: int = 1) -> list[dict[str, Any]]:
        """
        Search the catalog for tracks.

        Raises:
            CatalogUnavailableError: On transport or HTTP failure
        """
        bearer = self._bearer()
        try:
            response = self.session.get(
                f"{self.api_url}/search",
                params={"q": query, "type": "track", "limit": limit},
                headers={"Authorization": f"Bearer {bearer}"},
                timeout=self.timeout,
            )
            response.raise_for_status()
            body = response.json()
        except (requests.RequestException, ValueError) as e:
            raise CatalogUnavailableError(f"search failed for {query!r}: {e}") from e

        items = (body.get("tracks") or {}).get("items") or []
        return [item for item in items if isinstance(item, dict)]


def track_from_item(item: dict[str, Any], fallback_duration_ms: int = DEFAULT_TRACK_DURATION_MS) -> Track:
    """Map a Spotify track object onto a Track."""
    artists = [a for a in item.get("artists") or [] if isinstance(a, dict)]
    album = item.get("album") if isinstance(item.get("album"), dict) else {}
    images = [i for i in album.get("images") or [] if isinstance(i, dict)]
    duration = item.get("duration_ms") or fallback_duration_ms
    return Track(
        uri=item.get("uri", ""),
        display_name=item.get("name", ""),
        artist_name=artists[0].get("name", "") if artists else "",
        album_art_url=images[0].get("url") if images else None,
        preview_locator=item.get("preview_url"),
        duration_ms=int(duration),
    )


class SpotifyTrackResolver:
    """Resolve announced songs to Spotify tracks, broadening the query once."""

    def __init__(self, client: SpotifyClient, fallback_duration_ms: int = DEFAULT_TRACK_DURATION_MS):
        self.client = client
        self.fallback_duration_ms = fallback_duration_ms

    def resolve(self, title: str, artist: str) -> Track | None:
        for query in (f"track:{title} artist:{artist}", f"{title} {artist}"):
            items = self.client.search_tracks(query)
            if items:
                try:
                    track = track_from_item(items[0], self.fallback_duration_ms)
                except (TypeError, ValueError) as e:
                    raise CatalogUnavailableError(f"unusable track item for {query!r}: {e}") from e
                logger.info("track_resolved", query=query, uri=track.uri)
                return track
            logger.debug("track_query_empty", query=query)
        logger.info("track_not_found", title=title, artist=artist)
        return None
