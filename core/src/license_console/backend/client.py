from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Final

import httpx
from pydantic import BaseModel, ValidationError

from license_console.backend.models import Envelope, Pagination
from license_console.config import BackendConfig

logger = logging.getLogger(__name__)

AUTHORIZATION_HEADER: Final[str] = "Authorization"


class BackendError(Exception):
    """A backend call failed; ``message`` is what the screen shows."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        errors: dict[str, list[str]] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.errors = errors or {}


class BackendUnavailable(BackendError):
    """The backend could not be reached (connect error, timeout, ...)."""


class SessionExpired(Exception):
    """The backend answered 401; the operator has to log in again."""


@dataclass(frozen=True)
class Page[T]:
    items: list[T]
    pagination: Pagination | None = None


def build_http_client(
    config: BackendConfig, *, transport: httpx.AsyncBaseTransport | None = None
) -> httpx.AsyncClient:
    """Create the shared ``httpx.AsyncClient`` used for every backend call."""

    headers: dict[str, str] = {"Accept": "application/json"}
    headers.update(config.extra_headers)

    base_url = config.base_url.rstrip("/") + "/"
    return httpx.AsyncClient(
        base_url=base_url,
        timeout=httpx.Timeout(config.timeout_seconds),
        headers=headers,
        verify=config.verify_tls,
        transport=transport,
    )


def normalize_errors(raw: Any) -> dict[str, list[str]]:
    """Coerce a backend ``errors`` value into ``{field: [message, ...]}``."""

    if not isinstance(raw, dict):
        return {}
    out: dict[str, list[str]] = {}
    for key, value in raw.items():
        if isinstance(value, list):
            messages = [str(v) for v in value if v is not None]
        elif value is None:
            messages = []
        else:
            messages = [str(value)]
        if messages:
            out[str(key)] = messages
    return out


def _message_from_body(body: Any) -> str | None:
    if isinstance(body, dict):
        msg = body.get("message")
        if isinstance(msg, str) and msg.strip():
            return msg.strip()
    return None


def _decode_json(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return None


def decode_items[M: BaseModel](model: type[M], raw: Any, *, what: str) -> list[M]:
    """Decode a list of backend records; a wrong shape is a ``BackendError``."""

    if raw is None:
        return []
    if not isinstance(raw, list):
        raise BackendError(f"Unexpected {what} data from the backend")
    try:
        return [model.model_validate(x) for x in raw]
    except ValidationError as exc:
        logger.warning("Malformed %s data from backend: %s", what, exc)
        raise BackendError(f"Unexpected {what} data from the backend") from exc


def decode_record[M: BaseModel](model: type[M], raw: Any, *, what: str) -> M:
    if not isinstance(raw, dict):
        raise BackendError(f"The backend returned no {what}")
    try:
        return model.model_validate(raw)
    except ValidationError as exc:
        logger.warning("Malformed %s data from backend: %s", what, exc)
        raise BackendError(f"Unexpected {what} data from the backend") from exc


def decode_pagination(raw: Any) -> Pagination | None:
    if raw is None:
        return None
    try:
        return Pagination.model_validate(raw)
    except ValidationError:
        logger.warning("Ignoring malformed pagination descriptor from backend")
        return None


class BackendClient:
    """Thin wrapper over the shared httpx client for one operator's session.

    Attaches the operator's bearer token to every request and turns backend
    failures into ``BackendError`` / ``SessionExpired``.
    """

    def __init__(self, http: httpx.AsyncClient, *, token: str | None = None) -> None:
        self._http = http
        self._token = token

    @property
    def token(self) -> str | None:
        return self._token

    def with_token(self, token: str | None) -> BackendClient:
        return BackendClient(self._http, token=token)

    def _headers(self) -> dict[str, str]:
        if not self._token:
            return {}
        return {AUTHORIZATION_HEADER: f"Bearer {self._token}"}

    async def request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        json: Any = None,
        allow_unauthorized: bool = False,
        failure_message: str | None = None,
    ) -> Any:
        """Send one request and return the decoded JSON body.

        A 401 raises ``SessionExpired`` unless ``allow_unauthorized`` is set, in
        which case it is reported like any other failed request.
        """

        url = path.lstrip("/")
        clean_params = {k: v for k, v in (params or {}).items() if v is not None and v != ""}

        try:
            response = await self._http.request(
                method,
                url,
                params=clean_params or None,
                json=json,
                headers=self._headers(),
            )
        except httpx.TimeoutException as exc:
            logger.warning("Backend %s %s timed out: %s", method, path, exc)
            raise BackendUnavailable("The backend did not respond in time") from exc
        except httpx.TransportError as exc:
            logger.warning("Backend %s %s unreachable: %s", method, path, exc)
            raise BackendUnavailable("Could not reach the backend") from exc

        logger.debug("Backend %s %s - %s", method, path, response.status_code)
        body = _decode_json(response)

        if response.status_code == 401 and not allow_unauthorized:
            raise SessionExpired(_message_from_body(body) or "Session expired")

        if response.is_error:
            logger.warning("Backend %s %s failed with %s", method, path, response.status_code)
            message = (
                _message_from_body(body)
                or failure_message
                or f"Backend request failed (status {response.status_code})"
            )
            errors = normalize_errors(body.get("errors")) if isinstance(body, dict) else {}
            raise BackendError(message, status_code=response.status_code, errors=errors)

        if body is None and response.content:
            raise BackendError(
                "The backend returned an unreadable response",
                status_code=response.status_code,
            )
        return body

    async def call(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        json: Any = None,
        failure_message: str = "Backend request failed",
    ) -> Envelope:
        """Send one request and decode the ``{success, message, data, ...}`` envelope."""

        body = await self.request(
            method, path, params=params, json=json, failure_message=failure_message
        )
        try:
            envelope = Envelope.model_validate(body if isinstance(body, dict) else {})
        except ValidationError as exc:
            raise BackendError(failure_message) from exc

        if not envelope.success:
            raise BackendError(
                envelope.message or failure_message,
                errors=normalize_errors(envelope.errors),
            )
        return envelope
