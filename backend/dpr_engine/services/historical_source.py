"""
Historical project lookups.

The feature extractor asks a ``HistoricalProjectsSource`` how many comparable
projects exist for a category/region. Production deployments back this with
the historical-projects database; ``StaticHistoricalSource`` returns a fixed,
configurable count so scoring stays reproducible for identical input.
"""
import logging
from typing import Protocol

logger = logging.getLogger("dpr-historical")


class HistoricalProjectsSource(Protocol):
    def similar_projects_count(self, category: str, region: str) -> int:
        ...


class StaticHistoricalSource:
    """Returns the same count for every lookup."""

    def __init__(self, count: int = 15):
        if count < 0:
            raise ValueError(f"similar project count must be >= 0, got {count}")
        self.count = count

    def similar_projects_count(self, category: str, region: str) -> int:
        logger.debug(f"Static historical lookup category={category} region={region or '-'}: {self.count}")
        return self.count
