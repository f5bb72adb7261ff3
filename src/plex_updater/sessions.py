"""Active playback session count from the local Plex server."""

from __future__ import annotations

import httpx

from plex_updater.errors import RetrievalError
from plex_updater.logging import get_logger
from plex_updater.versions import TOKEN_PARAM, parse_media_container

log = get_logger("plex_updater.sessions")

# Element that marks one active video playback in /status/sessions
SESSION_ELEMENT = "Video"


class SessionProbe:
    """Counts active video sessions on the server.

    A failed lookup raises ``RetrievalError``; it is never reported as zero.
    """

    def __init__(self, server_url: str, token: str = "", timeout: float = 30) -> None:
        self._server_url = server_url.rstrip("/")
        self._token = token
        self._timeout = timeout

    async def get_active_session_count(self) -> int:
        params = {TOKEN_PARAM: self._token} if self._token else {}
        try:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                resp = await client.get(f"{self._server_url}/status/sessions", params=params)
        except httpx.RequestError as exc:
            log.warning("session_request_failed", error=str(exc))
            raise RetrievalError(f"Plex session endpoint unreachable: {exc}") from exc

        if resp.status_code != 200:
            raise RetrievalError(f"Plex session endpoint returned HTTP {resp.status_code}")

        root = parse_media_container(resp.text)
        return len(root.findall(SESSION_ELEMENT))
