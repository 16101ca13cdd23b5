"""Best-effort propagation triggers fired after a reset.

Each step is an independent cache-bypassing GET. Outcomes are logged and
returned for reporting; none of them changes a workflow's status.
"""

import logging
import time
from dataclasses import dataclass

from .config import RemoteConfig
from .errors import TransportError
from .transport import SheetTransport

logger = logging.getLogger(__name__)

NO_CACHE_HEADERS = {
    "Cache-Control": "no-cache",
    "Pragma": "no-cache",
}


@dataclass
class PropagationOutcome:
    """Result of one best-effort step."""

    step: str
    url: str
    ok: bool
    status_code: int | None = None
    error: str | None = None


class Propagator:
    """Hints downstream caches and delivery domains to refresh a sheet."""

    def __init__(self, transport: SheetTransport, remote: RemoteConfig):
        self.transport = transport
        self.remote = remote

    async def _trigger(
        self, step: str, url: str, headers: dict[str, str]
    ) -> PropagationOutcome:
        params = {"ck": str(int(time.time() * 1000))}
        try:
            response = await self.transport.get(
                url, headers={**NO_CACHE_HEADERS, **headers}, params=params
            )
        except TransportError as e:
            logger.warning(f"{step} trigger failed: {e}")
            return PropagationOutcome(step=step, url=url, ok=False, error=str(e))

        if response.is_success:
            logger.info(f"{step} trigger: HTTP {response.status_code}")
        else:
            logger.warning(f"{step} trigger: HTTP {response.status_code}")
        return PropagationOutcome(
            step=step,
            url=url,
            ok=response.is_success,
            status_code=response.status_code,
            error=None if response.is_success else response.reason_phrase,
        )

    async def cache_bust(self, da_token: str) -> PropagationOutcome:
        """Re-read the source document, bypassing caches."""
        return await self._trigger(
            "cache-bust",
            self.remote.source_url,
            {"Authorization": f"Bearer {da_token}"},
        )

    async def preview(self, admin_token: str) -> PropagationOutcome:
        """Request the sheet on the preview domain."""
        return await self._trigger(
            "preview", self.remote.preview_url, {"x-auth-token": admin_token}
        )

    async def publish(self, admin_token: str) -> PropagationOutcome:
        """Request the sheet on the publish domain."""
        return await self._trigger(
            "publish", self.remote.publish_url, {"x-auth-token": admin_token}
        )

    async def run_all(
        self, da_token: str | None, admin_token: str
    ) -> list[PropagationOutcome]:
        """Run cache-bust, preview and publish in order.

        Cache-bust needs the document token and is skipped without one.
        """
        outcomes = []
        if da_token:
            outcomes.append(await self.cache_bust(da_token))
        else:
            logger.info("Skipping cache-bust: no document token")
        outcomes.append(await self.preview(admin_token))
        outcomes.append(await self.publish(admin_token))
        return outcomes
