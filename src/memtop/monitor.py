"""Snapshot collection and the refresh loop for memtop."""

import logging
import threading
from pathlib import Path
from typing import Protocol

import psutil

from memtop.display import TopDisplay
from memtop.models import MemoryStats, ProcessRecord, SystemSnapshot
from memtop.procfs import PROC_ROOT, ProcfsError, ProcfsReadError, list_processes, read_meminfo

logger = logging.getLogger(__name__)

REFRESH_INTERVAL = 1.0  # seconds


class SnapshotSource(Protocol):
    """Anything that can produce a SystemSnapshot."""

    def collect(self) -> SystemSnapshot: ...


class ProcfsSource:
    """Collects snapshots by parsing procfs files directly."""

    def __init__(self, proc_root: Path = PROC_ROOT) -> None:
        self._proc_root = Path(proc_root)

    @property
    def proc_root(self) -> Path:
        """Get the procfs root being read."""
        return self._proc_root

    def collect(self) -> SystemSnapshot:
        """
        Read global memory and every process.

        Raises:
            RequiredFieldMissingError, ProcfsReadError: meminfo unusable.
            EnumerationError: The process root cannot be listed.
        """
        memory = read_meminfo(self._proc_root)
        processes = list_processes(self._proc_root)
        return SystemSnapshot(memory=memory, processes=processes)


class PsutilSource:
    """
    Collects snapshots through psutil.

    Handles NoSuchProcess, AccessDenied and ZombieProcess by skipping the
    process, mirroring the procfs reader.
    """

    def collect(self) -> SystemSnapshot:
        try:
            mem = psutil.virtual_memory()
        except OSError as e:
            raise ProcfsReadError(f"Cannot read memory stats: {e}") from e
        memory = MemoryStats(total_kb=mem.total // 1024, available_kb=mem.available // 1024)
        return SystemSnapshot(memory=memory, processes=self._collect_processes())

    def _collect_processes(self) -> list[ProcessRecord]:
        processes: list[ProcessRecord] = []
        for proc in psutil.process_iter(attrs=["pid", "name", "memory_info"]):
            try:
                info = proc.info
                mem_info = info.get("memory_info")
                name = info.get("name")
                if mem_info is None or not name:
                    # Access denied or unnamed; no partial records
                    continue
                processes.append(
                    ProcessRecord(
                        pid=info["pid"],
                        name=name,
                        resident_kb=mem_info.rss // 1024,
                    )
                )
            except (psutil.NoSuchProcess, psutil.AccessDenied, psutil.ZombieProcess):
                continue
        return processes


class MemoryMonitor:
    """
    Drives collect-and-display cycles at a fixed interval.

    A cycle whose snapshot cannot be collected is reported through the
    logger and skipped; the loop carries on at the next interval.
    """

    def __init__(
        self,
        source: SnapshotSource,
        display: TopDisplay,
        interval: float = REFRESH_INTERVAL,
    ) -> None:
        """
        Initialize the MemoryMonitor.

        Args:
            source: Produces one SystemSnapshot per cycle.
            display: Renders each snapshot.
            interval: Pause between cycles (in seconds).
        """
        self._source = source
        self._display = display
        self._interval = interval
        self._stop_event = threading.Event()

    @property
    def interval(self) -> float:
        """Get the pause between cycles."""
        return self._interval

    def stop(self) -> None:
        """Ask a running loop to return after the current cycle."""
        self._stop_event.set()

    def run_once(self) -> SystemSnapshot | None:
        """Run one cycle. Returns the snapshot, or None if collection failed."""
        try:
            snapshot = self._source.collect()
        except ProcfsError as e:
            logger.error("Skipping refresh: %s", e)
            return None
        self._display.show(snapshot)
        return snapshot

    def run(self, cycles: int | None = None) -> int:
        """
        Run the refresh loop.

        Args:
            cycles: Number of cycles to run; None runs until stop().

        Returns:
            The number of cycles that failed to collect a snapshot.
        """
        self._stop_event.clear()
        failures = 0
        completed = 0
        while (cycles is None or completed < cycles) and not self._stop_event.is_set():
            if self.run_once() is None:
                failures += 1
            completed += 1
            if cycles is not None and completed >= cycles:
                break
            self._stop_event.wait(timeout=self._interval)
        return failures
