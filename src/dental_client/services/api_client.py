"""HTTP client for the practice REST API."""
import logging
from typing import Any, TypeVar

import httpx
from pydantic import TypeAdapter, ValidationError

from dental_client.core.errors import DecodeError, HttpError, MutationError, NetworkError

logger = logging.getLogger(__name__)

USER_AGENT = 'DentalClient/1.0'
DEFAULT_TIMEOUT = 10.0

T = TypeVar("T")


def decode(type_: type[T] | Any, payload: Any, endpoint: str) -> T:
    """
    Validate a decoded JSON payload against a pydantic type.

    Args:
        type_:
            Model class or typing construct (e.g. ``list[MedicalNote]``).
        payload:
            Decoded JSON value.
        endpoint:
            Endpoint the payload came from, for error messages.

    Raises:
        DecodeError: If the payload does not match the expected shape.
    """
    try:
        return TypeAdapter(type_).validate_python(payload)
    except ValidationError as e:
        raise DecodeError(endpoint, f"{e.error_count()} validation error(s)") from e


class ApiClient:
    """
    Thin async wrapper over httpx that maps failures onto the client error types.

    - transport failures raise NetworkError
    - non-2xx responses raise HttpError (MutationError for writes)
    - bodies that are not JSON raise DecodeError
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = DEFAULT_TIMEOUT,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._client = httpx.AsyncClient(
            base_url=base_url,
            timeout=timeout,
            headers={'User-Agent': USER_AGENT, 'Accept': 'application/json'},
            transport=transport,
        )

    async def __aenter__(self) -> "ApiClient":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def request_json(
        self,
        method: str,
        path: str,
        body: dict | None = None,
        error_cls: type[HttpError] = HttpError,
    ) -> Any:
        """Send a request and return the decoded JSON body of a 2xx response."""
        endpoint = f"{method} {path}"
        try:
            response = await self._client.request(method, path, json=body)
        except httpx.TimeoutException as e:
            raise NetworkError(endpoint, "Request timed out") from e
        except httpx.RequestError as e:
            raise NetworkError(endpoint, str(e) or type(e).__name__) from e

        if not response.is_success:
            logger.info(
                "api_request_failed",
                extra={"endpoint": endpoint, "status_code": response.status_code},
            )
            raise error_cls(endpoint, response.status_code)

        try:
            return response.json()
        except ValueError as e:
            raise DecodeError(endpoint, "Response body is not valid JSON") from e

    async def get_json(self, path: str) -> Any:
        return await self.request_json('GET', path)

    async def post_json(self, path: str, body: dict) -> Any:
        """POST a JSON body; a non-2xx response raises MutationError."""
        return await self.request_json('POST', path, body=body, error_cls=MutationError)
