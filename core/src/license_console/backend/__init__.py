from license_console.backend.client import (
    BackendClient,
    BackendError,
    BackendUnavailable,
    Page,
    SessionExpired,
    build_http_client,
)

__all__ = [
    "BackendClient",
    "BackendError",
    "BackendUnavailable",
    "Page",
    "SessionExpired",
    "build_http_client",
]
