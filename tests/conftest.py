"""Shared fixtures: fake procfs trees under tmp_path."""

from pathlib import Path

import pytest

MEMINFO = (
    "MemTotal:       16384000 kB\n"
    "MemFree:         1024000 kB\n"
    "MemAvailable:    8192000 kB\n"
    "Buffers:          204800 kB\n"
    "HugePages_Total:       0\n"
)


def status_text(name: str, rss_kb: int | None) -> str:
    """Build a /proc/<pid>/status body, optionally without VmRSS."""
    lines = [f"Name:\t{name}", "State:\tS (sleeping)", "VmPeak:\t   99999 kB"]
    if rss_kb is not None:
        lines.append(f"VmRSS:\t{rss_kb:>8} kB")
    lines.append("Threads:\t1")
    return "\n".join(lines) + "\n"


class FakeProc:
    """Builds a directory tree shaped like /proc."""

    def __init__(self, root: Path) -> None:
        self.root = root
        self.root.mkdir(exist_ok=True)

    def meminfo(self, content: str = MEMINFO) -> None:
        (self.root / "meminfo").write_text(content)

    def process(
        self,
        pid: int | str,
        name: str | None = "proc",
        rss_kb: int | None = 100,
    ) -> Path:
        """Add a process dir; name=None omits comm."""
        proc_dir = self.root / str(pid)
        proc_dir.mkdir()
        if name is not None:
            (proc_dir / "comm").write_text(f"{name}\n")
        (proc_dir / "status").write_text(status_text(name or "proc", rss_kb))
        return proc_dir


@pytest.fixture
def fake_proc(tmp_path: Path) -> FakeProc:
    """An empty fake procfs root with a standard meminfo."""
    proc = FakeProc(tmp_path / "proc")
    proc.meminfo()
    return proc
