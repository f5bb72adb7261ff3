"""Version lookups for the running server and the plex.tv release feed.

Both lookups are single-shot: any failure raises ``RetrievalError`` and the
caller decides whether to abort. Versions are opaque strings and are only
ever compared for equality.
"""

from __future__ import annotations

import xml.etree.ElementTree as ET
from typing import Any

import httpx

from plex_updater import __version__
from plex_updater.config import DEFAULT_RELEASE_FEED_URL
from plex_updater.errors import RetrievalError
from plex_updater.logging import get_logger
from plex_updater.models import Channel, VersionIdentifier

log = get_logger("plex_updater.versions")

TOKEN_PARAM = "X-Plex-Token"

FEED_HEADERS: dict[str, str] = {
    "User-Agent": f"PlexUpdateChecker/{__version__}",
    "X-Plex-Product": "Plex Media Server",
    "X-Plex-Client-Identifier": "update-checker",
}


def parse_media_container(text: str) -> ET.Element:
    """Parse a Plex XML response and return its ``MediaContainer`` root."""
    try:
        root = ET.fromstring(text)
    except ET.ParseError as exc:
        raise RetrievalError(f"Malformed XML from Plex server: {exc}") from exc
    if root.tag != "MediaContainer":
        raise RetrievalError(f"Unexpected root element <{root.tag}>")
    return root


class VersionSource:
    """Reads the current and the latest available Plex version."""

    def __init__(
        self,
        server_url: str,
        token: str = "",
        platform: str = "Linux",
        feed_url: str = DEFAULT_RELEASE_FEED_URL,
        timeout: float = 30,
    ) -> None:
        self._server_url = server_url.rstrip("/")
        self._token = token
        self._platform = platform
        self._feed_url = feed_url
        self._timeout = timeout

    # ------------------------------------------------------------------
    # Running server
    # ------------------------------------------------------------------

    async def get_current_version(self) -> VersionIdentifier:
        """Return the ``version`` attribute of the server's root container."""
        params = {TOKEN_PARAM: self._token} if self._token else {}
        try:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                resp = await client.get(f"{self._server_url}/", params=params)
        except httpx.RequestError as exc:
            log.warning("current_version_request_failed", error=str(exc))
            raise RetrievalError(f"Plex server unreachable: {exc}") from exc

        if resp.status_code != 200:
            raise RetrievalError(f"Plex server returned HTTP {resp.status_code}")

        version = parse_media_container(resp.text).get("version", "").strip()
        if not version:
            raise RetrievalError("Plex server response has no version attribute")
        return version

    # ------------------------------------------------------------------
    # Release feed
    # ------------------------------------------------------------------

    async def get_latest_version(self, channel: Channel) -> VersionIdentifier:
        """Return the latest build for *channel* on the configured platform."""
        headers = dict(FEED_HEADERS)
        if self._token:
            headers[TOKEN_PARAM] = self._token

        try:
            async with httpx.AsyncClient(timeout=self._timeout, follow_redirects=True) as client:
                resp = await client.get(
                    self._feed_url,
                    params={"channel": channel.feed_value},
                    headers=headers,
                )
        except httpx.RequestError as exc:
            log.warning("release_feed_request_failed", error=str(exc))
            raise RetrievalError(f"Release feed unreachable: {exc}") from exc

        if resp.status_code != 200:
            raise RetrievalError(f"Release feed returned HTTP {resp.status_code}")

        try:
            data = resp.json()
        except ValueError as exc:
            raise RetrievalError("Release feed returned malformed JSON") from exc

        version = self._extract_version(data)
        if not version:
            raise RetrievalError(
                f"Release feed has no version for {self._platform} on {channel.value}"
            )
        return version

    def _extract_version(self, data: Any) -> str | None:
        """Pull ``computer.<platform>.version`` out of the feed document."""
        node = data
        for key in ("computer", self._platform, "version"):
            if not isinstance(node, dict):
                return None
            node = node.get(key)
        if node is None:
            return None
        return str(node).strip() or None
