"""HTTP client for the address service.

Translates method calls into GET requests against the address service and
decodes the JSON bodies into domain objects. Failures are classified but not
handled here: resilience policies are applied by the calling services.
"""

from typing import Any
from urllib.parse import quote

import httpx
from pydantic import TypeAdapter, ValidationError

from src.domain.exceptions import UpstreamNotFoundError, UpstreamServiceError
from src.domain.models.address import Address, FlakyResource
from src.external.interfaces import IAddressServiceClient
from src.infrastructure.config import Settings
from src.infrastructure.logging.config import get_logger
from src.infrastructure.telemetry import observed


logger = get_logger(__name__)

_ADDRESS = TypeAdapter(Address)
_FLAKY = TypeAdapter(FlakyResource)
_FLAKY_LIST = TypeAdapter(list[FlakyResource])


def _path_segment(value: str) -> str:
    """Percent-encode a value as exactly one path segment."""
    segment = quote(value, safe="")
    # httpx drops "." and ".." segments when merging with the base URL
    if segment in {".", ".."}:
        return segment.replace(".", "%2E")
    return segment


def create_http_client(settings: Settings) -> httpx.AsyncClient:
    """Create the shared async HTTP client pointed at the address service."""
    return httpx.AsyncClient(
        base_url=settings.address_service_url,
        timeout=settings.http_timeout_seconds,
        headers={"Accept": "application/json"},
    )


class AddressServiceClient(IAddressServiceClient):
    """Address service client backed by a shared ``httpx.AsyncClient``."""

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        address_path: str = "/api/v1/address",
        flaky_path: str = "/api/v1/flaky",
    ) -> None:
        """Initialize the client.

        Args:
            http_client: Client with the address service base URL configured
            address_path: Route prefix of the address endpoints
            flaky_path: Route prefix of the flaky resource endpoints
        """
        self._http = http_client
        self._address_path = address_path.rstrip("/")
        self._flaky_path = flaky_path.rstrip("/")

    @observed("address-service.get", low_cardinality={"route.tier": "standard"})
    async def get_address_by_id(self, address_id: int) -> Address:
        body = await self._get_json(f"{self._address_path}/{address_id}")
        return self._decode(_ADDRESS, body)

    @observed("address-service.get", low_cardinality={"route.tier": "nolimit"})
    async def get_address_by_id_no_limit(self, address_id: int) -> Address:
        body = await self._get_json(f"{self._address_path}/nolimit/{address_id}")
        return self._decode(_ADDRESS, body)

    @observed("address-service.flaky.get")
    async def get_flaky_by_code(self, code: str) -> FlakyResource:
        body = await self._get_json(f"{self._flaky_path}/{_path_segment(code)}")
        return self._decode(_FLAKY, body)

    @observed("address-service.flaky.list")
    async def get_all_flaky(self) -> list[FlakyResource]:
        body = await self._get_json(self._flaky_path)
        return self._decode(_FLAKY_LIST, body)

    async def _get_json(self, path: str) -> Any:
        """Perform a GET and return the decoded JSON body.

        Raises:
            UpstreamNotFoundError: On 404
            UpstreamServiceError: On any other non-2xx status, transport error,
                timeout or undecodable body
        """
        try:
            response = await self._http.get(path)
        except httpx.TimeoutException as e:
            logger.warning("address_service_timeout", path=path, error=str(e))
            raise UpstreamServiceError(
                f"Timed out calling address service: GET {path}",
                details={"path": path},
            ) from e
        except httpx.HTTPError as e:
            logger.warning("address_service_unreachable", path=path, error=str(e))
            raise UpstreamServiceError(
                f"Address service unreachable: GET {path}",
                details={"path": path, "error": type(e).__name__},
            ) from e

        if response.status_code == httpx.codes.NOT_FOUND:
            raise UpstreamNotFoundError(f"Address service has no resource at {path}")

        if not response.is_success:
            logger.warning(
                "address_service_error_response",
                path=path,
                status_code=response.status_code,
            )
            raise UpstreamServiceError(
                f"Address service returned {response.status_code} for GET {path}",
                details={"path": path, "status_code": response.status_code},
                status_code=response.status_code,
            )

        try:
            return response.json()
        except ValueError as e:
            raise UpstreamServiceError(
                f"Address service returned invalid JSON for GET {path}",
                details={"path": path},
                status_code=response.status_code,
            ) from e

    @staticmethod
    def _decode[T](adapter: TypeAdapter[T], body: Any) -> T:
        try:
            return adapter.validate_python(body)
        except ValidationError as e:
            raise UpstreamServiceError(
                "Address service returned an unexpected payload",
                details=[{"loc": list(err["loc"]), "msg": err["msg"]} for err in e.errors()],
            ) from e
