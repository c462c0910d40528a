"""Fan-out search across the bus and subway providers."""

import asyncio
import logging

from .client import ProviderClient
from .config import DEFAULT_RADIUS
from .exceptions import ProviderFailure
from .models import SearchOutcome, StopKind, TransitStop, UnifiedResult
from .normalizer import normalize

logger = logging.getLogger(__name__)

# Merge order of branches in a UnifiedResult
BRANCH_ORDER = (StopKind.BUS, StopKind.SUBWAY)


class TransitAggregator:
    """Runs provider queries and merges their normalized results."""

    def __init__(self, client: ProviderClient | None = None):
        self.client = client or ProviderClient()

    async def search_by_name(self, term: str) -> UnifiedResult:
        """Search both providers by name concurrently.

        A failing branch is reported as a failed outcome with no stops and
        never affects the other branch. Both branches are always awaited.

        Args:
            term: Station name, forwarded unmodified

        Returns:
            UnifiedResult with bus stops ahead of subway stations
        """
        results = await asyncio.gather(
            *(self._search_branch(term, provider) for provider in BRANCH_ORDER),
            return_exceptions=True,
        )

        outcomes = []
        for provider, result in zip(BRANCH_ORDER, results):
            if isinstance(result, SearchOutcome):
                outcomes.append(result)
            elif isinstance(result, Exception):
                logger.error(
                    f"Unexpected error in {provider} branch: {result!r}",
                    exc_info=result,
                )
                outcomes.append(
                    SearchOutcome(provider=provider, failed=True, error=str(result))
                )
            else:
                # Cancellation and other BaseExceptions are not ours to absorb
                raise result

        return UnifiedResult(outcomes=outcomes)

    async def search_bus_by_name(self, term: str) -> list[TransitStop]:
        """Search the bus registry only.

        Raises:
            ProviderFailure: If the bus provider request fails
        """
        raw = await asyncio.to_thread(self.client.fetch_by_name, term, StopKind.BUS)
        return normalize(raw.text, StopKind.BUS, raw.content_type)

    async def search_by_location(
        self, x: float, y: float, radius: float = DEFAULT_RADIUS
    ) -> list[TransitStop]:
        """Find bus stops within radius meters of a TM coordinate.

        Raises:
            ProviderFailure: If the bus provider request fails
        """
        raw = await asyncio.to_thread(self.client.fetch_by_location, x, y, radius)
        return normalize(raw.text, StopKind.BUS, raw.content_type)

    async def _search_branch(self, term: str, provider: StopKind) -> SearchOutcome:
        try:
            raw = await asyncio.to_thread(self.client.fetch_by_name, term, provider)
        except ProviderFailure as e:
            logger.warning(f"{provider} branch failed: {e.cause}")
            return SearchOutcome(provider=provider, failed=True, error=e.cause)

        stops = normalize(raw.text, provider, raw.content_type)
        logger.debug(f"{provider} branch returned {len(stops)} stops")
        return SearchOutcome(provider=provider, stops=stops)
