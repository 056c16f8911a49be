"""
Thread-based run coordinator: N operation-mix executors plus one throughput reporter.
"""

import sys
import logging
from concurrent.futures import ThreadPoolExecutor, wait, FIRST_EXCEPTION
from typing import List, Optional, TextIO

from configuration import (
    EVENT_STARTED,
    EVENT_FINISHED,
    TOTAL_ERRORS_KEY,
    ITERATION_SLEEP_SECONDS,
    THROUGHPUT_REPORT_INTERVAL_SECONDS,
)
from workloads.state import State

logger = logging.getLogger(__name__)


class WorkerPool:
    """Launches executors sharing one State and joins them before returning."""

    def __init__(
        self,
        database,
        workload,
        config,
        out: Optional[TextIO] = None,
        iteration_sleep: float = ITERATION_SLEEP_SECONDS,
        report_interval: float = THROUGHPUT_REPORT_INTERVAL_SECONDS,
    ):
        """Initialize the worker pool.

        Args:
            database: Connected database backend shared by every worker
            workload: Workload generator shared by every worker
            config: Validated WorkloadConfig for the run
            out: Stream for throughput lines (default: stdout)
            iteration_sleep: Pause after each executor iteration in seconds
            report_interval: Seconds between throughput lines
        """
        self.database = database
        self.workload = workload
        self.config = config
        self.out = out or sys.stdout
        self.iteration_sleep = iteration_sleep
        self.report_interval = report_interval
        self.state = State(records=config.records)
        self.interrupted = False

        logger.info(
            f"Initialized WorkerPool with {config.workers} workers, "
            f"target={config.operations} operations, workload={type(workload).__name__}"
        )

    def run(self) -> State:
        """Execute the run and return the final state.

        Started/Finished events bracket the whole run. Every executor and the
        reporter have exited by the time this returns, so the state is safe
        to summarise.

        Raises:
            Exception: The first exception raised by an executor, after all
                other threads have been stopped and joined
        """
        self.config.validate()
        state = self.state
        workers = self.config.workers

        state.mark_event(EVENT_STARTED)
        logger.info(f"Starting run: {workers} workers, {self.config.operations} operations")

        executors: List = []
        with ThreadPoolExecutor(max_workers=workers + 1, thread_name_prefix="docbench") as pool:
            reporter = pool.submit(
                state.report_throughput, self.config, self.out, self.report_interval
            )
            try:
                for _ in range(workers):
                    executors.append(pool.submit(
                        state.measure_latency, self.database, self.workload,
                        self.config, self.iteration_sleep,
                    ))
                wait(executors, return_when=FIRST_EXCEPTION)
            except KeyboardInterrupt:
                logger.info("Run interrupted by user, stopping workers")
                self.interrupted = True
            finally:
                # Releases the reporter and any executor still running
                state.stop()

        state.mark_event(EVENT_FINISHED)
        logger.info(
            f"Run finished: {state.operations} operations, {state.records} records, "
            f"{state.errors.get(TOTAL_ERRORS_KEY, 0)} errors"
        )

        for future in executors + [reporter]:
            error = future.exception()
            if error is not None:
                logger.error(f"Worker failed: {error}")
                raise error
        return state
