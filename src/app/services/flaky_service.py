"""Student-side access to the flaky resource endpoint, guarded by retry."""

from src.domain.exceptions import UpstreamNotFoundError, UpstreamServiceError
from src.domain.models.address import FlakyResource
from src.domain.result import LookupResult
from src.external.interfaces import IAddressServiceClient
from src.infrastructure.logging.config import get_logger
from src.infrastructure.patterns.retry import RetryPolicy


logger = get_logger(__name__)


class FlakyResourceService:
    """Fetches flaky resources, retrying upstream failures.

    No circuit breaker is layered on this path: every request spends its full
    retry budget against the upstream before surfacing the final failure.
    """

    def __init__(self, address_client: IAddressServiceClient, retry_policy: RetryPolicy) -> None:
        self._get_by_code = retry_policy(address_client.get_flaky_by_code)
        self._get_all = retry_policy(address_client.get_all_flaky)

    async def get_flaky_by_code(self, code: str) -> LookupResult[FlakyResource]:
        """Fetch one resource; unknown codes are absent, exhausted retries are errors."""
        try:
            resource = await self._get_by_code(code)
        except UpstreamNotFoundError:
            return LookupResult.absent()
        except UpstreamServiceError as e:
            logger.warning("flaky_lookup_failed", code=code, error=e.message)
            return LookupResult.failed(e)
        return LookupResult.present(resource)

    async def get_all_flaky(self) -> list[FlakyResource]:
        """Fetch every resource.

        The collection route always exists upstream, so a 404 there means the
        address service is misrouted or misconfigured and is reported as an
        upstream failure rather than as absence.

        Raises:
            UpstreamServiceError: When every attempt failed or the listing answered 404
        """
        try:
            return await self._get_all()
        except UpstreamNotFoundError as e:
            logger.warning("flaky_listing_not_found", error=e.message)
            raise UpstreamServiceError(
                "Address service has no flaky resource listing", status_code=404
            ) from e
