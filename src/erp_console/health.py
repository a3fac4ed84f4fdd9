"""
API heartbeat for the settings page.

The console polls the API every ERP_HEARTBEAT_INTERVAL seconds with the
cheapest read it has and reports whether the API answered and how long it
took. This is the only request that is repeated automatically.
"""

import time
from dataclasses import dataclass
from typing import Callable

from erp_console.lib import logs
from erp_console.lib.clients import ApiClient, ApiError

LOG = logs.logger(__file__)

HEARTBEAT_PATH = "/billing/history"

ONLINE = "online"
ERROR = "error"
CHECKING = "checking"


@dataclass(slots=True)
class HealthStatus:
    """Result of one heartbeat."""

    status: str = CHECKING
    latency_ms: int = 0

    @property
    def online(self) -> bool:
        return self.status == ONLINE


def check_api(client: ApiClient, clock: Callable[[], float] = time.monotonic) -> HealthStatus:
    """
    Issue one heartbeat request.

    Args:
        client: API client to check.
        clock: Time source used to measure latency.

    Returns:
        HealthStatus with ``online`` and the round-trip latency, or
        ``error`` when the request failed. Failures are logged, not raised.
    """
    start = clock()
    try:
        client.get(HEARTBEAT_PATH, params={"limit": 1})
    except ApiError as exc:
        LOG.warning("Heartbeat failed: %s", exc)
        return HealthStatus(status=ERROR)
    return HealthStatus(status=ONLINE, latency_ms=round((clock() - start) * 1000))
