"""
Service factory for the ERP console.

This module provides the get_erp_service() factory function that returns
the appropriate ErpService implementation based on configuration.

Available Implementations:
- demo: In-memory service with fixture data (no API required)
- impl: REST-backed service talking to ERP_API_BASE_URL

The service is cached at the module level, so the same instance is reused
across all requests. Configure via the ERP_SERVICE environment variable.
"""

from functools import cache
from typing import Callable, Dict

from erp_console import config
from erp_console.lib import logs
from erp_console.services.erp_service import ErpService
from erp_console.services.erp_service_demo import DemoErpService
from erp_console.services.erp_service_impl import ErpServiceImpl

LOG = logs.logger(__file__)

_SERVICE_REGISTRY: Dict[str, Callable[[], ErpService]] = {
    "demo": lambda: DemoErpService(),
    "impl": lambda: ErpServiceImpl(),
}


@cache
def get_erp_service(kind: str | None = None) -> ErpService:
    """Return the configured ERP service implementation."""
    resolved_kind = (kind or config.SERVICE_KIND).lower()
    LOG.info("get_erp_service - kind:%s resolved_kind:%s", kind, resolved_kind)
    try:
        factory = _SERVICE_REGISTRY[resolved_kind]
    except KeyError as exc:
        msg = f"Unknown ERP service kind: {resolved_kind}"
        raise ValueError(msg) from exc
    return factory()


__all__ = ["ErpService", "DemoErpService", "ErpServiceImpl", "get_erp_service"]
