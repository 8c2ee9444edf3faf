"""Student service application services wrapping the address service."""

from src.app.services.address_proxy_service import AddressProxyService
from src.app.services.flaky_service import FlakyResourceService


__all__ = ["AddressProxyService", "FlakyResourceService"]
