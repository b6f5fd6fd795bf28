"""Data models for memtop."""

from dataclasses import dataclass


@dataclass(slots=True, frozen=True)
class MemoryStats:
    """Immutable snapshot of global memory totals."""

    total_kb: int
    available_kb: int

    @property
    def used_kb(self) -> int:
        """Memory in use, never negative."""
        return max(self.total_kb - self.available_kb, 0)


@dataclass(slots=True, frozen=True)
class ProcessRecord:
    """Immutable snapshot of a process's resident memory."""

    pid: int
    name: str
    resident_kb: int  # VmRSS, kB


@dataclass(slots=True)
class SystemSnapshot:
    """Everything collected during one refresh cycle."""

    memory: MemoryStats
    processes: list[ProcessRecord]
