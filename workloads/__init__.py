"""
Workload generators, configuration and benchmark state.
"""

import logging

from .base import Workload, KeyspaceEmptyError
from .config import WorkloadConfig, ConfigurationError
from .default import DefaultWorkload
from .hotspot import HotSpotWorkload
from .state import State

logger = logging.getLogger(__name__)

WORKLOAD_TYPES = {
    DefaultWorkload.name: DefaultWorkload,
    HotSpotWorkload.name: HotSpotWorkload,
}


def create_workload(workload_type: str, seed: int = None) -> Workload:
    """Create a workload generator by name.

    Raises:
        ConfigurationError: If workload_type is not supported
    """
    try:
        workload_class = WORKLOAD_TYPES[workload_type.lower()]
    except KeyError:
        raise ConfigurationError(
            f"Unsupported workload type: {workload_type}. "
            f"Must be one of {', '.join(WORKLOAD_TYPES)}."
        ) from None
    logger.debug(f"Creating {workload_class.__name__}")
    return workload_class(seed=seed)


__all__ = [
    'Workload', 'KeyspaceEmptyError', 'WorkloadConfig', 'ConfigurationError',
    'DefaultWorkload', 'HotSpotWorkload', 'State', 'WORKLOAD_TYPES', 'create_workload',
]
