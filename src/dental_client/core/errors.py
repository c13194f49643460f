"""Exception hierarchy for the API client, query cache and durable storage."""


class ClientError(Exception):
    """Base class for every error raised by this package."""


class NetworkError(ClientError):
    """Raised when a request could not be sent or a response not received."""

    def __init__(self, endpoint: str, message: str) -> None:
        self.endpoint = endpoint
        super().__init__(f"Request to {endpoint} failed: {message}")


class HttpError(ClientError):
    """Raised when the backend answers with a non-2xx status code."""

    def __init__(self, endpoint: str, status_code: int) -> None:
        self.endpoint = endpoint
        self.status_code = status_code
        super().__init__(f"HTTP {status_code} from {endpoint}")


class MutationError(HttpError):
    """Raised when a write endpoint answers with a non-2xx status code."""


class DecodeError(ClientError):
    """Raised when a response body does not have the expected shape."""

    def __init__(self, endpoint: str, message: str) -> None:
        self.endpoint = endpoint
        super().__init__(f"Could not decode response from {endpoint}: {message}")


class StorageError(ClientError):
    """
    Raised when a persisted blob is malformed.

    Callers treat this as a cache miss and fall back to their default state.
    """

    def __init__(self, key: str, message: str) -> None:
        self.key = key
        super().__init__(f"Malformed value for storage key '{key}': {message}")
