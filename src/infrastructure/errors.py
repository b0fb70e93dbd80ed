"""Infrastructure-level errors."""


class TransportError(RuntimeError):
    """Request to the server failed or returned an unexpected status."""

    def __init__(self, message: str, status_code: int | None = None):
        self.status_code = status_code
        super().__init__(message)
