"""
Default workload: uniform access over live records.
"""

import logging

from workloads.base import Workload

logger = logging.getLogger(__name__)


class DefaultWorkload(Workload):
    """Every live record is equally likely to be read, updated or queried."""

    name = "default"

    def pick_existing_record(self, lower: int, upper: int) -> int:
        return self._random.randint(lower, upper)
