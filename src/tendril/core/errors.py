"""Error kinds raised by the editor core and its adapters."""


class EditorError(Exception):
    """Base class for editor errors."""


class UnsupportedEnvironment(EditorError):
    """The cross-context channel cannot be created in this context."""


class WriteFailure(EditorError):
    """A document write did not succeed."""


class NetworkFailure(WriteFailure):
    """The write request raised before a response arrived."""


class RejectedWrite(WriteFailure):
    """The server answered the write with a failing status."""

    def __init__(self, status_code: int, detail: str = ""):
        self.status_code = status_code
        self.detail = detail
        message = f"Write rejected with status {status_code}"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)
