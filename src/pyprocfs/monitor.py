"""Periodic sampling of /proc for pyprocfs consumers."""

import logging
import threading
from collections.abc import Iterable
from dataclasses import dataclass
from queue import Queue

import psutil

from pyprocfs.errors import DecodeError
from pyprocfs.models import (
    CpuStat,
    LoadAverage,
    ProcessMemorySummary,
    ProcessStat,
    Uptime,
)
from pyprocfs.reader import ProcReader, validate_pid

logger = logging.getLogger(__name__)


@dataclass(slots=True, frozen=True)
class ProcessSample:
    """Both per-process records of one process, read in the same cycle."""

    stat: ProcessStat
    memory: ProcessMemorySummary


@dataclass(slots=True)
class ProcSample:
    """Snapshot of system-wide and per-process records from one poll cycle."""

    load_average: LoadAverage
    cpu_stat: CpuStat
    uptime: Uptime
    processes: list[ProcessSample]


class ProcMonitor:
    """
    Sampler that reads /proc on a fixed cadence.

    Runs in a separate daemon thread and pushes one ProcSample per cycle to
    a thread-safe Queue. Processes that exit or deny access mid-cycle are
    skipped; a cycle whose system-wide files cannot be read or decoded is
    dropped and retried on the next tick. No state is kept between cycles.
    """

    def __init__(
        self,
        update_queue: Queue[ProcSample],
        reader: ProcReader | None = None,
        poll_rate: float = 2.0,
        pids: Iterable[int] | None = None,
    ) -> None:
        """
        Initialize the ProcMonitor.

        Args:
            update_queue: Thread-safe queue to push samples to.
            reader: Reader to sample from. Defaults to the real /proc.
            poll_rate: How often to poll (in seconds). Default 2.0s.
            pids: Restrict per-process sampling to these PIDs. None samples
                every process under the reader's root.
        """
        self._queue = update_queue
        self._reader = reader if reader is not None else ProcReader()
        self._poll_rate = max(0.1, poll_rate)
        self._pids = None if pids is None else tuple(validate_pid(pid) for pid in pids)
        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None

    @property
    def poll_rate(self) -> float:
        """Get the current poll rate."""
        return self._poll_rate

    @poll_rate.setter
    def poll_rate(self, value: float) -> None:
        """Set the poll rate."""
        self._poll_rate = max(0.1, value)  # Minimum 0.1 seconds

    @property
    def reader(self) -> ProcReader:
        """Get the reader samples are taken from."""
        return self._reader

    @property
    def is_running(self) -> bool:
        """Check if the monitor thread is running."""
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        """Start the monitoring thread."""
        if self.is_running:
            return

        self._stop_event.clear()
        self._thread = threading.Thread(
            target=self._poll_loop,
            daemon=True,
            name="ProcMonitor",
        )
        self._thread.start()

    def stop(self, timeout: float | None = 5.0) -> None:
        """
        Stop the monitoring thread.

        Args:
            timeout: How long to wait for thread to stop (seconds).
        """
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout=timeout)
            self._thread = None

    def _poll_loop(self) -> None:
        """Main polling loop running in the background thread."""
        while not self._stop_event.is_set():
            try:
                self._queue.put(self._collect_sample())
            except (OSError, DecodeError) as exc:
                # Usually a race with a kernel update; the next cycle re-reads
                logger.warning("Dropping sample: %s", exc)

            self._stop_event.wait(timeout=self._poll_rate)

    def _collect_sample(self) -> ProcSample:
        """Collect one sample of the system-wide and per-process records."""
        return ProcSample(
            load_average=self._reader.load_average(),
            cpu_stat=self._reader.cpu_stat(),
            uptime=self._reader.uptime(),
            processes=self._collect_processes(),
        )

    def _collect_processes(self) -> list[ProcessSample]:
        """
        Collect the records of every sampled process.

        Processes that exited, deny access, or produce an undecodable line
        are skipped.
        """
        pids = self._pids if self._pids is not None else self._reader.pids()
        processes: list[ProcessSample] = []

        for pid in pids:
            try:
                processes.append(
                    ProcessSample(
                        stat=self._reader.process_stat(pid),
                        memory=self._reader.process_memory_summary(pid),
                    )
                )
            except (psutil.NoSuchProcess, psutil.AccessDenied) as exc:
                logger.debug("Skipping pid %d: %s", pid, exc)
            except DecodeError as exc:
                logger.debug("Skipping pid %d, undecodable: %s", pid, exc)

        return processes
