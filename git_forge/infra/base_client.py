"""Construction and lifecycle shared by the forge adapters.

Each adapter subclasses :class:`BaseForgeClient` and supplies its API base
URL, token variable and ``Authorization`` scheme.  Everything that differs in
*behaviour* (query mapping, client-side filtering, response mapping) stays in
the adapter module.
"""

from __future__ import annotations

from types import TracebackType
from typing import ClassVar

from git_forge.core.errors import AuthenticationError
from git_forge.core.logging import get_logger
from git_forge.infra.http_client import ForgeHttpClient

logger = get_logger("infra.client")


class BaseForgeClient:
    """Common state of a forge adapter bound to one repository.

    Args:
        host:     Forge hostname, e.g. ``"github.com"``.
        path:     Repository path, e.g. ``"owner/repo"`` or
                  ``"group/subgroup/project"``.
        use_auth: Send the forge token with every request.  The token must be
                  available; otherwise :class:`AuthenticationError` is raised
                  here, before any request is made.
        token:    Token value, normally read from :class:`Settings` by the
                  factory.
        timeout:  HTTP timeout in seconds.
        port:     Web port of a self-hosted forge; kept in web and API URLs.
        api_url:  Explicit API base URL, used instead of the one derived
                  from the host.
    """

    name: str = ""
    token_env: ClassVar[str] = ""
    auth_scheme: ClassVar[str] = "Bearer"

    def __init__(
        self,
        host: str,
        path: str,
        use_auth: bool = False,
        token: str = "",
        timeout: float = 30.0,
        port: int | None = None,
        api_url: str | None = None,
    ) -> None:
        self.host = host
        self.port = port
        self.path = path.strip("/")
        self.use_auth = use_auth
        self.web_base = f"https://{self.authority}"
        self.api_base = api_url.rstrip("/") if api_url else self._api_base()

        headers = self._default_headers()
        if use_auth:
            if not token:
                raise AuthenticationError(
                    f"Authentication enabled but {self.token_env} not set",
                    forge_name=self.name,
                )
            headers["Authorization"] = f"{self.auth_scheme} {token}"

        self._http = ForgeHttpClient(
            forge_name=self.name,
            base_url=self.api_base,
            headers=headers,
            timeout=timeout,
        )
        logger.debug(
            "%s client for %s/%s via %s (auth=%s)", self.name, self.authority, self.path, self.api_base, use_auth
        )

    # ------------------------------------------------------------------
    # Adapter hooks
    # ------------------------------------------------------------------

    def _api_base(self) -> str:
        raise NotImplementedError

    def _default_headers(self) -> dict[str, str]:
        return {}

    # ------------------------------------------------------------------
    # Shared helpers
    # ------------------------------------------------------------------

    @property
    def authority(self) -> str:
        return f"{self.host}:{self.port}" if self.port else self.host

    @property
    def repo_web_url(self) -> str:
        return f"{self.web_base}/{self.path}"

    def _require_auth(self, action: str) -> None:
        """Creating things needs a token; fail before the request if absent."""
        if not self._http.authenticated:
            raise AuthenticationError(
                f"{action} requires authentication. Use the --auth flag and set {self.token_env}",
                forge_name=self.name,
            )

    def close(self) -> None:
        self._http.close()

    def __enter__(self):
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    def __repr__(self) -> str:  # pragma: no cover
        return f"{type(self).__name__}(host={self.host!r}, path={self.path!r})"
