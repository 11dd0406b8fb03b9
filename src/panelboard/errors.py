"""Clear exceptions for panelboard: configuration, wire format, network and remote API errors."""

from typing import Any


class PanelboardError(Exception):
    """Base exception for panelboard."""

    pass


class ConfigError(PanelboardError):
    """Raised when required configuration is missing or malformed."""

    pass


class WireFormatError(PanelboardError):
    """Raised when a wire resource does not match the expected panel shape."""

    def __init__(self, message: str, *, field: str | None = None) -> None:
        self.field = field
        super().__init__(message)


class NetworkError(PanelboardError):
    """Raised when the HTTP transport fails (connection refused, timeout, DNS...)."""

    def __init__(self, message: str, *, cause: BaseException | None = None) -> None:
        self.cause = cause
        super().__init__(message)


class RemoteError(PanelboardError):
    """Raised when the API answers with an error status (>= 400)."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int,
        remote_message: str | None = None,
        detail: Any = None,
    ) -> None:
        self.status_code = status_code
        self.remote_message = remote_message
        self.detail = detail
        super().__init__(message)


class ReadOnlyFieldError(PanelboardError):
    """Raised when a locked form field is edited."""

    def __init__(self, field: str, message: str | None = None) -> None:
        self.field = field
        super().__init__(message or f"Field is read-only in edit mode: {field!r}")


class FormNotReadyError(PanelboardError):
    """Raised when the form is used before the panel being edited has loaded."""

    pass
