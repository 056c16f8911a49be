"""
Hot spot workload: most accesses land on the most recently created records.
"""

import logging

from workloads.base import Workload
from configuration import HOT_DATA_PERCENTAGE, HOT_SPOT_ACCESS_PERCENTAGE

logger = logging.getLogger(__name__)


class HotSpotWorkload(Workload):
    """Skewed access pattern.

    With the defaults, 80% of existing-key lookups pick from the newest 20%
    of live records and the rest pick from the older ones.
    """

    name = "hotspot"

    def __init__(self, seed: int = None,
                 hot_data_percentage: int = HOT_DATA_PERCENTAGE,
                 hot_access_percentage: int = HOT_SPOT_ACCESS_PERCENTAGE):
        super().__init__(seed)
        if not 0 < hot_data_percentage <= 100:
            raise ValueError(f"hot_data_percentage must be in (0, 100], got {hot_data_percentage}")
        if not 0 <= hot_access_percentage <= 100:
            raise ValueError(f"hot_access_percentage must be in [0, 100], got {hot_access_percentage}")
        self.hot_data_percentage = hot_data_percentage
        self.hot_access_percentage = hot_access_percentage

    def pick_existing_record(self, lower: int, upper: int) -> int:
        live = upper - lower + 1
        hot_records = max(1, live * self.hot_data_percentage // 100)
        hot_lower = upper - hot_records + 1

        if hot_lower == lower or self._random.randrange(100) < self.hot_access_percentage:
            return self._random.randint(hot_lower, upper)
        return self._random.randint(lower, hot_lower - 1)
