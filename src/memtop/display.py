"""Line-oriented text rendering for memtop."""

import sys
from typing import TextIO

from memtop.models import MemoryStats, ProcessRecord, SystemSnapshot

DEFAULT_TOP_N = 5

# Terminal reset (RIS); redraws the screen in place on most terminals.
CLEAR_SCREEN = "\x1bc"


def top_processes(processes: list[ProcessRecord], n: int = DEFAULT_TOP_N) -> list[ProcessRecord]:
    """
    Return up to ``n`` processes ordered by resident memory, largest first.

    ``sorted`` is stable, so equal RSS values keep their input order.
    """
    return sorted(processes, key=lambda p: p.resident_kb, reverse=True)[:n]


def format_memory(memory: MemoryStats) -> str:
    """Format the global memory header line."""
    return (
        f"Memory: total={memory.total_kb}kB "
        f"available={memory.available_kb}kB "
        f"used={memory.used_kb}kB"
    )


def render(snapshot: SystemSnapshot, n: int = DEFAULT_TOP_N) -> str:
    """Render one refresh cycle as a block of text."""
    lines = [
        format_memory(snapshot.memory),
        f"Top {n} processes by memory:",
    ]
    top = top_processes(snapshot.processes, n)
    if top:
        lines.append(f"{'#':>3}  {'PID':<7} {'NAME':<20} RSS")
        for rank, proc in enumerate(top, start=1):
            lines.append(f"{rank:>3}  {proc.pid:<7} {proc.name[:20]:<20} {proc.resident_kb} kB")
    return "\n".join(lines) + "\n"


class TopDisplay:
    """Writes rendered snapshots to a text stream."""

    def __init__(
        self,
        stream: TextIO | None = None,
        top_n: int = DEFAULT_TOP_N,
        clear: bool = True,
    ) -> None:
        """
        Initialize the TopDisplay.

        Args:
            stream: Where to write; defaults to stdout at write time.
            top_n: How many processes to show per cycle.
            clear: Reset the terminal before each cycle.
        """
        if top_n < 1:
            raise ValueError(f"top_n must be at least 1, got {top_n}")
        self._stream = stream
        self._top_n = top_n
        self._clear = clear

    @property
    def top_n(self) -> int:
        """Get the number of processes shown."""
        return self._top_n

    def show(self, snapshot: SystemSnapshot) -> None:
        """Render ``snapshot`` and write it out."""
        stream = self._stream or sys.stdout
        if self._clear:
            stream.write(CLEAR_SCREEN)
        stream.write(render(snapshot, self._top_n))
        stream.flush()
