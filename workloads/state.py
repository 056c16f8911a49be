"""
Shared benchmark state: counters, error tallies, milestones and latency sketches.

One State instance is shared by every executor thread and the throughput
reporter. Scalar counters and the error map are updated under a single lock;
each latency sketch carries its own. Guards and progress reports read the
counters without locking, which is accurate enough for progress tracking.
"""

import sys
import time
import logging
import threading
from typing import Any, Dict, Optional, TextIO

from common.latency_stats import LatencyStats
from common.metrics_utils import format_duration, calculate_operations_per_second
from configuration import (
    CREATE,
    READ,
    UPDATE,
    DELETE,
    QUERY,
    OPERATION_KINDS,
    ERROR_CODES,
    TOTAL_ERRORS_KEY,
    EVENT_STARTED,
    EVENT_FINISHED,
    ITERATION_SLEEP_SECONDS,
    THROUGHPUT_REPORT_INTERVAL_SECONDS,
    SUMMARY_PERCENTILES,
)
from workloads.base import KeyspaceEmptyError

logger = logging.getLogger(__name__)


class State:
    """Aggregate progress and latency of one benchmark run."""

    def __init__(self, records: int = 0):
        """Initialize the state.

        Args:
            records: Number of records already present in the database
        """
        self.operations: int = 0
        self.records: int = records
        self.stop_event = threading.Event()
        self._lock = threading.Lock()
        self.init()

    def init(self) -> None:
        """Allocate empty error/event maps and one latency sketch per operation kind."""
        self.errors: Dict[str, int] = {}
        self.events: Dict[str, float] = {}
        self.latency: Dict[str, LatencyStats] = {kind: LatencyStats() for kind in OPERATION_KINDS}

    # ---- Bookkeeping ----------------------------------------------------------

    def _add_operation(self) -> None:
        with self._lock:
            self.operations += 1

    def _add_record(self) -> int:
        with self._lock:
            self.records += 1
            return self.records

    def record_error(self, kind: str) -> None:
        code = ERROR_CODES[kind]
        with self._lock:
            self.errors[code] = self.errors.get(code, 0) + 1
            self.errors[TOTAL_ERRORS_KEY] = self.errors.get(TOTAL_ERRORS_KEY, 0) + 1

    def mark_event(self, name: str, timestamp: Optional[float] = None) -> None:
        self.events[name] = time.time() if timestamp is None else timestamp

    def elapsed(self) -> float:
        """Seconds between the Started and Finished events (0.0 if either is missing)."""
        if EVENT_STARTED not in self.events or EVENT_FINISHED not in self.events:
            return 0.0
        return self.events[EVENT_FINISHED] - self.events[EVENT_STARTED]

    def stop(self) -> None:
        """Ask every executor and the reporter to exit at their next check."""
        self.stop_event.set()

    def is_running(self, config) -> bool:
        return self.operations < config.operations and not self.stop_event.is_set()

    # ---- Throughput reporter --------------------------------------------------

    def report_throughput(self, config, out: Optional[TextIO] = None,
                          interval: float = THROUGHPUT_REPORT_INTERVAL_SECONDS) -> None:
        """Print operation rate every interval seconds until the run ends."""
        out = out or sys.stdout
        ops_done = 0
        samples = 1
        print("Benchmark started:", file=out, flush=True)

        while self.is_running(config):
            if self.stop_event.wait(interval):
                break
            operations = self.operations
            throughput = calculate_operations_per_second(operations - ops_done, interval)
            ops_done = operations
            print(
                f"{samples * interval:>6g} seconds: {throughput:>10} ops/sec; "
                f"total operations: {ops_done}; total errors: {self.errors.get(TOTAL_ERRORS_KEY, 0)}",
                file=out, flush=True,
            )
            samples += 1

    # ---- Operation-mix executor -----------------------------------------------

    def measure_latency(self, database, workload, config,
                        iteration_sleep: float = ITERATION_SLEEP_SECONDS) -> None:
        """Run enabled operation kinds in fixed order until the target is reached.

        The target is checked once per iteration, so concurrent workers may
        overshoot it by up to one iteration each.

        Raises:
            KeyspaceEmptyError: If a read, update, delete or query is due
                while no record exists
        """
        executors = {
            CREATE: self._create,
            READ: self._read,
            UPDATE: self._update,
            DELETE: self._delete,
            QUERY: self._query,
        }
        while self.is_running(config):
            for kind in OPERATION_KINDS:
                if config.includes(kind):
                    executors[kind](database, workload, config)
            if self.stop_event.wait(iteration_sleep):
                break

    def _timed(self, kind: str, call, *args) -> None:
        t0 = time.perf_counter()
        try:
            call(*args)
        except Exception as e:
            self.record_error(kind)
            logger.debug(f"{kind} failed: {e}")
        finally:
            self.latency[kind].add_sample(time.perf_counter() - t0)

    def _require_records(self, kind: str) -> None:
        if self.records == 0:
            raise KeyspaceEmptyError(f"{kind} attempted before any record exists")

    def _create(self, database, workload, config) -> None:
        self._add_operation()
        sequence_number = self._add_record()
        key = workload.generate_new_key(sequence_number)
        value = workload.generate_value(key, config.indexable_fields, config.value_size)
        self._timed(CREATE, database.create, key, value)

    def _read(self, database, workload, config) -> None:
        self._require_records(READ)
        self._add_operation()
        key = workload.generate_existing_key(self.records)
        self._timed(READ, database.read, key)

    def _update(self, database, workload, config) -> None:
        self._require_records(UPDATE)
        self._add_operation()
        key = workload.generate_existing_key(self.records)
        value = workload.generate_value(key, config.indexable_fields, config.value_size)
        self._timed(UPDATE, database.update, key, value)

    def _delete(self, database, workload, config) -> None:
        self._require_records(DELETE)
        self._add_operation()
        key = workload.generate_key_for_removal()
        self._timed(DELETE, database.delete, key)

    def _query(self, database, workload, config) -> None:
        self._require_records(QUERY)
        self._add_operation()
        field_name, field_value, limit = workload.generate_query(config.indexable_fields, self.records)
        self._timed(QUERY, database.query, field_name, field_value, limit)

    # ---- Summary ------------------------------------------------------------

    def latency_summary(self) -> Dict[str, Dict[str, Any]]:
        """Count, mean and reported percentiles (seconds) for kinds with samples."""
        summary: Dict[str, Dict[str, Any]] = {}
        for kind in OPERATION_KINDS:
            stats = self.latency[kind]
            count = stats.count()
            if count == 0:
                continue
            entry: Dict[str, Any] = {"count": count, "mean": stats.mean()}
            for p in SUMMARY_PERCENTILES:
                entry[f"p{round(p * 100)}"] = stats.percentile(p)
            summary[kind] = entry
        return summary

    def report_summary(self, out: Optional[TextIO] = None) -> None:
        """Print per-kind latency, the error breakdown and total elapsed time.

        Must only run after every executor and the reporter have finished.
        """
        out = out or sys.stdout
        for kind, entry in self.latency_summary().items():
            print(f"{kind} latency:", file=out)
            for p in SUMMARY_PERCENTILES:
                percent = round(p * 100)
                print(f"\t{percent}th percentile: {format_duration(entry[f'p{percent}'])}", file=out)
            print(f"\tMean: {format_duration(entry['mean'])}", file=out)

        if self.errors:
            print("Errors:", file=out)
            for kind in OPERATION_KINDS:
                print(f"\t{kind:<7}: {self.errors.get(ERROR_CODES[kind], 0)}", file=out)
            print(f"\t{'Total':<7}: {self.errors.get(TOTAL_ERRORS_KEY, 0)}", file=out)

        print(f"Time elapsed:\n\t{format_duration(self.elapsed())}", file=out)
        out.flush()

    def __repr__(self) -> str:
        return (
            f"State(operations={self.operations}, records={self.records}, "
            f"errors={self.errors.get(TOTAL_ERRORS_KEY, 0)})"
        )
