"""Custom exceptions for the file storage service."""


class ConfigurationMissingError(Exception):
    """Raised at startup when required settings are absent."""

    def __init__(self, names: list[str]):
        self.names = names
        super().__init__(
            f"{' and '.join(names)} environment variable(s) must be set"
        )


class BackendUnavailableError(Exception):
    """Raised when the object store cannot serve a request."""

    def __init__(self, operation: str, cause: Exception | None = None):
        self.operation = operation
        self.cause = cause
        super().__init__(f"Storage backend failed during '{operation}'")


class ObjectNotFoundError(Exception):
    """Raised when a requested object does not exist."""

    def __init__(self, object_name: str):
        self.object_name = object_name
        super().__init__(f"Object '{object_name}' not found")


class UploadAbortedError(Exception):
    """Base class for failures originating on the client side of an upload."""

    def __init__(self, file_name: str, message: str):
        self.file_name = file_name
        super().__init__(message)


class SizeExceededError(UploadAbortedError):
    """Raised when an uploaded file grows past the configured ceiling."""

    def __init__(self, file_name: str, limit: int):
        self.limit = limit
        super().__init__(
            file_name,
            f"File '{file_name}' exceeds the maximum allowed size of {limit} bytes",
        )


class UploadReadError(UploadAbortedError):
    """Raised when reading the uploaded file from the request fails."""

    def __init__(self, file_name: str, cause: Exception | None = None):
        self.cause = cause
        super().__init__(file_name, f"Failed to read uploaded file '{file_name}'")


class StreamAbortedError(Exception):
    """Raised by storage when the upload stream itself signalled an error."""

    def __init__(self, object_name: str, cause: UploadAbortedError):
        self.object_name = object_name
        self.cause = cause
        super().__init__(f"Upload stream for '{object_name}' was aborted: {cause}")


class PipeClosedError(Exception):
    """Raised when writing to a pipe whose reader has gone away."""

    def __init__(self):
        super().__init__("Write on closed pipe")
