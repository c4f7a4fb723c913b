"""Reading /proc pseudo-files and handing their content to the decoders."""

import logging
from pathlib import Path

import psutil

from pyprocfs.decoders import (
    decode_cpu_stat,
    decode_load_average,
    decode_process_memory_summary,
    decode_process_stat,
    decode_uptime,
)
from pyprocfs.models import (
    CpuStat,
    LoadAverage,
    ProcessMemorySummary,
    ProcessStat,
    Uptime,
)

logger = logging.getLogger(__name__)


def validate_pid(pid: int) -> int:
    """Return pid unchanged if it is a positive int, raise ValueError otherwise."""
    if isinstance(pid, bool) or not isinstance(pid, int) or pid <= 0:
        raise ValueError(f"invalid pid: {pid!r}")
    return pid


class ProcReader:
    """
    Reads pseudo-files under a /proc root and decodes them.

    Every call re-reads the file, so each returned record is a fresh
    snapshot. Read errors are raised as-is and never retried; a
    per-process file that disappeared is reported with psutil's
    NoSuchProcess, a permission failure with AccessDenied.
    """

    def __init__(self, root: str | Path = "/proc") -> None:
        """
        Initialize the ProcReader.

        Args:
            root: Directory the proc filesystem is mounted on. Tests point
                this at a fake tree.
        """
        self._root = Path(root)

    @property
    def root(self) -> Path:
        """Get the proc root directory."""
        return self._root

    def read_bytes(self, relative_path: str) -> bytes:
        """Read the raw content of a pseudo-file below the root."""
        return (self._root / relative_path).read_bytes()

    def _read_pid_file(self, pid: int, name: str) -> bytes:
        """Read /proc/[pid]/<name>, mapping OS errors to psutil's exceptions."""
        validate_pid(pid)
        try:
            return self.read_bytes(f"{pid}/{name}")
        except (FileNotFoundError, ProcessLookupError) as exc:
            logger.debug("Process %d vanished before %s was read", pid, name)
            raise psutil.NoSuchProcess(pid) from exc
        except PermissionError as exc:
            raise psutil.AccessDenied(pid) from exc

    def load_average(self) -> LoadAverage:
        """Read and decode loadavg."""
        return decode_load_average(self.read_bytes("loadavg"))

    def cpu_stat(self) -> CpuStat:
        """Read and decode the aggregate cpu line of stat."""
        return decode_cpu_stat(self.read_bytes("stat"))

    def uptime(self) -> Uptime:
        """Read and decode uptime."""
        return decode_uptime(self.read_bytes("uptime"))

    def process_stat(self, pid: int) -> ProcessStat:
        """Read and decode [pid]/stat."""
        return decode_process_stat(self._read_pid_file(pid, "stat"))

    def process_memory_summary(self, pid: int) -> ProcessMemorySummary:
        """Read and decode [pid]/statm."""
        return decode_process_memory_summary(self._read_pid_file(pid, "statm"))

    def pids(self) -> list[int]:
        """List the process IDs present under the root, in ascending order."""
        return sorted(
            int(entry.name)
            for entry in self._root.iterdir()
            if entry.name.isdigit() and entry.is_dir()
        )
