"""Parsers and readers for the Linux procfs pseudo-files used by memtop.

Everything here works against a configurable process root so the same
code can read ``/proc`` or a fake tree built in tests.
"""

import logging
import os
from pathlib import Path

from memtop.models import MemoryStats, ProcessRecord

logger = logging.getLogger(__name__)

PROC_ROOT = Path("/proc")

MEMINFO_FIELDS = {"MemTotal": "total_kb", "MemAvailable": "available_kb"}


class ProcfsError(Exception):
    """Base class for procfs reading and parsing errors."""


class MalformedLineError(ProcfsError):
    """A line does not have the ``Label: value`` shape."""

    def __init__(self, line: str) -> None:
        super().__init__(f"Malformed line: {line!r}")
        self.line = line


class RequiredFieldMissingError(ProcfsError):
    """A mandatory meminfo field never appeared in the input."""

    def __init__(self, missing: list[str]) -> None:
        super().__init__(f"Missing required field(s): {', '.join(missing)}")
        self.missing = missing


class ProcfsReadError(ProcfsError):
    """A global procfs file could not be read."""


class ProcessUnreadableError(ProcfsError):
    """A per-process file could not be opened or read."""

    def __init__(self, pid: int, path: Path, reason: str) -> None:
        super().__init__(f"Cannot read {path} for pid {pid}: {reason}")
        self.pid = pid
        self.path = path


class EnumerationError(ProcfsError):
    """The process root itself could not be listed."""


def _is_unsigned(token: str) -> bool:
    return token.isascii() and token.isdigit()


def _split_line(line: str) -> tuple[str, int]:
    """Split a ``Label:   value [unit]`` line into its label and value."""
    tokens = line.split()
    if len(tokens) < 2 or not _is_unsigned(tokens[1]):
        raise MalformedLineError(line)
    return tokens[0].removesuffix(":"), int(tokens[1])


def parse_meminfo(content: str) -> MemoryStats:
    """
    Parse the text of ``/proc/meminfo``.

    Only ``MemTotal`` and ``MemAvailable`` are kept; values stay in kB.
    Malformed lines are skipped.

    Raises:
        RequiredFieldMissingError: If either field is absent.
    """
    found: dict[str, int] = {}
    for line in content.splitlines():
        if not line.strip():
            continue
        try:
            label, value = _split_line(line)
        except MalformedLineError as e:
            logger.debug("Skipping meminfo line: %s", e)
            continue
        field = MEMINFO_FIELDS.get(label)
        if field is not None:
            found[field] = value

    missing = [label for label, field in MEMINFO_FIELDS.items() if field not in found]
    if missing:
        raise RequiredFieldMissingError(missing)
    return MemoryStats(**found)


def read_meminfo(proc_root: Path = PROC_ROOT) -> MemoryStats:
    """Read and parse ``<proc_root>/meminfo``."""
    path = Path(proc_root) / "meminfo"
    try:
        content = path.read_text(encoding="utf-8", errors="replace")
    except OSError as e:
        raise ProcfsReadError(f"Cannot read {path}: {e}") from e
    return parse_meminfo(content)


def parse_vmrss(content: str) -> int | None:
    """Return the ``VmRSS`` value in kB, or None if the field is absent."""
    for line in content.splitlines():
        label, sep, rest = line.partition(":")
        if not sep or label.strip() != "VmRSS":
            continue
        tokens = rest.split()
        if tokens and _is_unsigned(tokens[0]):
            return int(tokens[0])
        return None
    return None


def _read_process_file(pid: int, name: str, proc_root: Path) -> str:
    path = Path(proc_root) / str(pid) / name
    try:
        with open(path, encoding="utf-8", errors="replace") as f:
            return f.read()
    except OSError as e:
        raise ProcessUnreadableError(pid, path, e.strerror or str(e)) from e


def read_process_name(pid: int, proc_root: Path = PROC_ROOT) -> str:
    """
    Read a process's display name from ``<proc_root>/<pid>/comm``.

    Raises:
        ProcessUnreadableError: If the process exited or access is denied.
    """
    return _read_process_file(pid, "comm", proc_root).strip()


def read_process(pid: int, proc_root: Path = PROC_ROOT) -> ProcessRecord | None:
    """
    Build a ProcessRecord for ``pid``.

    Returns None unless both the name and VmRSS could be read, so callers
    never see partial records.
    """
    try:
        name = read_process_name(pid, proc_root)
        status = _read_process_file(pid, "status", proc_root)
    except ProcessUnreadableError as e:
        logger.debug("Skipping process: %s", e)
        return None

    resident_kb = parse_vmrss(status)
    if resident_kb is None:
        logger.debug("Skipping pid %d (%s): no VmRSS", pid, name)
        return None
    return ProcessRecord(pid=pid, name=name, resident_kb=resident_kb)


def list_processes(proc_root: Path = PROC_ROOT) -> list[ProcessRecord]:
    """
    Collect a ProcessRecord for every readable process under ``proc_root``.

    Non-numeric entries are ignored. Output follows directory order.

    Raises:
        EnumerationError: If ``proc_root`` cannot be listed.
    """
    try:
        entries = os.listdir(proc_root)
    except OSError as e:
        raise EnumerationError(f"Cannot list {proc_root}: {e}") from e

    processes: list[ProcessRecord] = []
    for entry in entries:
        if not _is_unsigned(entry):
            continue
        record = read_process(int(entry), proc_root)
        if record is not None:
            processes.append(record)
    return processes
