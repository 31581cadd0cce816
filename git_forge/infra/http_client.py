"""Thin authenticated JSON transport shared by the forge adapters.

Maps every failure to the git-forge error taxonomy:

- 401 / 403 → :class:`~git_forge.core.errors.AuthenticationError`
- any other non-2xx → :class:`~git_forge.core.errors.ForgeError` with status
- invalid JSON → ``ForgeError``
- DNS / connection / timeout → ``ForgeError`` chaining the httpx exception
"""

from __future__ import annotations

from typing import Any

import httpx

from git_forge import __version__
from git_forge.core.errors import AuthenticationError, ForgeError
from git_forge.core.logging import get_logger

logger = get_logger("infra.http")

_AUTH_STATUSES = {401, 403}


class ForgeHttpClient:
    """JSON-over-HTTP helper bound to one forge API base URL.

    Args:
        forge_name: Display name used in error messages (``"GitHub"`` …).
        base_url:   API base URL, e.g. ``"https://api.github.com"``.
        headers:    Extra headers sent with every request.
        timeout:    HTTP timeout in seconds (default 30).
    """

    def __init__(
        self,
        forge_name: str,
        base_url: str,
        headers: dict[str, str] | None = None,
        timeout: float = 30.0,
    ) -> None:
        self.forge_name = forge_name
        self.base_url = base_url.rstrip("/")
        base_headers = {"User-Agent": f"git-forge/{__version__}", "Accept": "application/json"}
        base_headers.update(headers or {})
        self._client = httpx.Client(headers=base_headers, timeout=timeout, follow_redirects=True)

    @property
    def authenticated(self) -> bool:
        return "Authorization" in self._client.headers

    # ------------------------------------------------------------------
    # Public helpers
    # ------------------------------------------------------------------

    def get_json(self, path: str, params: dict[str, Any] | None = None) -> Any:
        return self._request("GET", path, params=params)

    def post_json(self, path: str, json: dict[str, Any]) -> Any:
        return self._request("POST", path, json=json)

    def close(self) -> None:
        self._client.close()

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _request(
        self,
        method: str,
        path: str,
        params: dict[str, Any] | None = None,
        json: dict[str, Any] | None = None,
    ) -> Any:
        url = f"{self.base_url}{path}"
        logger.debug(
            "%s %s %s params=%s auth=%s",
            self.forge_name,
            method,
            url,
            params or {},
            "[REDACTED]" if self.authenticated else "none",
        )
        try:
            response = self._client.request(method, url, params=params, json=json)
        except httpx.RequestError as exc:
            raise ForgeError(
                f"{method} {path} network error: {exc}",
                forge_name=self.forge_name,
                url=url,
                cause=exc,
            ) from exc

        logger.debug("%s %s %s -> %s", self.forge_name, method, url, response.status_code)

        if response.status_code in _AUTH_STATUSES:
            raise AuthenticationError(
                f"Authentication failed ({response.status_code}). "
                "You may need to use the --auth flag and set the appropriate token.",
                forge_name=self.forge_name,
                status_code=response.status_code,
            )
        if response.is_error:
            raise ForgeError(
                f"{method} {path} failed: HTTP {response.status_code} {response.text[:200]}",
                forge_name=self.forge_name,
                status_code=response.status_code,
                url=url,
            )

        try:
            return response.json()
        except ValueError as exc:
            raise ForgeError(
                f"Failed to parse JSON response from {self.forge_name} API",
                forge_name=self.forge_name,
                status_code=response.status_code,
                url=url,
                cause=exc,
            ) from exc

    def __repr__(self) -> str:  # pragma: no cover
        return f"ForgeHttpClient(forge_name={self.forge_name!r}, base_url={self.base_url!r})"
