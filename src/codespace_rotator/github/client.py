"""Thin GitHub REST client with structured response decoding.

Each request carries the account token explicitly, so one client serves the
whole rotation. HTTP failures are mapped onto the rotator's error taxonomy:
rejected credentials become ``AuthError``, everything else ``CommandError``.
"""

from typing import Any, TypeVar

import httpx
from pydantic import BaseModel, ValidationError
from structlog import get_logger

from codespace_rotator import __version__
from codespace_rotator.config.github import GitHubSettings
from codespace_rotator.exceptions import AuthError, CommandError


logger = get_logger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)

AUTH_FAILURE_STATUS_CODES = frozenset({401, 403})


def _is_rate_limited(response: httpx.Response) -> bool:
    """GitHub reports primary rate limits as 403 with an exhausted quota header."""
    return response.headers.get("x-ratelimit-remaining") == "0"


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text[:200]
    if isinstance(body, dict) and isinstance(body.get("message"), str):
        return body["message"]
    return response.text[:200]


class GitHubClient:
    """Synchronous GitHub REST client shared by the provisioner and billing."""

    def __init__(
        self,
        settings: GitHubSettings,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.settings = settings
        self._http = httpx.Client(
            base_url=settings.api_url,
            timeout=settings.request_timeout,
            transport=transport,
            headers={
                "Accept": "application/vnd.github+json",
                "X-GitHub-Api-Version": settings.api_version,
                "User-Agent": f"codespace-rotator/{__version__}",
            },
        )

    def close(self) -> None:
        self._http.close()

    def __enter__(self) -> "GitHubClient":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def request(
        self,
        token: str,
        method: str,
        path: str,
        *,
        json: dict[str, Any] | None = None,
        params: dict[str, Any] | None = None,
    ) -> httpx.Response:
        """Send one request authenticated with ``token``.

        Raises:
            AuthError: The token was rejected (401, or 403 not caused by rate limiting)
            CommandError: Transport failure or any other non-2xx status
        """
        try:
            response = self._http.request(
                method,
                path,
                json=json,
                params=params,
                headers={"Authorization": f"Bearer {token}"},
            )
        except httpx.TimeoutException as e:
            raise CommandError(
                f"{method} {path} timed out", details={"path": path}
            ) from e
        except httpx.RequestError as e:
            raise CommandError(
                f"{method} {path} failed: {e}", details={"path": path}
            ) from e

        if response.is_success:
            return response

        message = _error_message(response)
        details = {"path": path, "status": response.status_code}
        if response.status_code in AUTH_FAILURE_STATUS_CODES and not _is_rate_limited(
            response
        ):
            logger.warning("github_auth_rejected", path=path, status=response.status_code)
            raise AuthError(
                f"Credential rejected: {message}",
                status_code=response.status_code,
                details=details,
            )

        logger.warning(
            "github_api_error",
            method=method,
            path=path,
            status=response.status_code,
            message=message,
        )
        raise CommandError(
            f"{method} {path} returned {response.status_code}: {message}",
            status_code=response.status_code,
            details=details,
        )

    def get_model(
        self,
        token: str,
        path: str,
        model: type[ModelT],
        *,
        params: dict[str, Any] | None = None,
    ) -> ModelT:
        """GET ``path`` and decode the body into ``model``."""
        return self.decode(self.request(token, "GET", path, params=params), model)

    def post_model(
        self,
        token: str,
        path: str,
        model: type[ModelT],
        *,
        json: dict[str, Any] | None = None,
    ) -> ModelT:
        """POST to ``path`` and decode the body into ``model``."""
        return self.decode(self.request(token, "POST", path, json=json), model)

    @staticmethod
    def decode(response: httpx.Response, model: type[ModelT]) -> ModelT:
        """Decode a response body.

        Raises:
            CommandError: Body is not JSON or does not match the schema
        """
        try:
            return model.model_validate(response.json())
        except (ValueError, ValidationError) as e:
            raise CommandError(
                f"Unexpected {model.__name__} payload from {response.request.url.path}: {e}",
                status_code=response.status_code,
            ) from e
