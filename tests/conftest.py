"""Shared fixtures: raw pseudo-file content and a fake /proc tree."""

from pathlib import Path

import pytest

LOADAVG = "0.50 0.25 0.10 3/128 4821\n"
PROC_STAT = (
    "cpu  4705 150 1120 16250 520 0 12 0 0 0\n"
    "cpu0 2352 75 560 8125 260 0 6 0 0 0\n"
    "cpu1 2353 75 560 8125 260 0 6 0 0 0\n"
    "intr 114930548 113199788 3 0 5 263 0 4 [... 50 more ...]\n"
    "ctxt 1990473\n"
    "btime 1062191376\n"
    "processes 2915\n"
    "procs_running 1\n"
    "procs_blocked 0\n"
)
UPTIME = "12345.67 9999.00\n"
STATM = "2960 890 512 220 0 410 0\n"


def make_stat_line(pid: int, comm: str = "bash", state: str = "S") -> str:
    """Build a /proc/[pid]/stat line with 44 fields plus the 8 newer trailing ones."""
    return (
        f"{pid} ({comm}) {state} 1 {pid} {pid} 34816 {pid} 4194560 1520 0 12 0 "
        "35 17 -3 0 20 0 1 0 8123 12345678 890 18446744073709551615 "
        "94251439001600 94251439123456 140727512345600 0 0 0 0 4096 134234626 "
        "0 0 0 17 3 0 0 5 0 0 "
        "94251439200000 94251439300000 94251460000000 140727512350000 "
        "140727512351000 140727512351000 140727512354000 0\n"
    )


@pytest.fixture
def stat_line():
    """Factory for /proc/[pid]/stat lines."""
    return make_stat_line


@pytest.fixture
def fake_proc(tmp_path: Path) -> Path:
    """
    A minimal /proc tree with system files and three processes.

    PID 1234 has a command name with spaces in it.
    """
    (tmp_path / "loadavg").write_text(LOADAVG)
    (tmp_path / "stat").write_text(PROC_STAT)
    (tmp_path / "uptime").write_text(UPTIME)
    (tmp_path / "self").mkdir()
    (tmp_path / "sys").mkdir()

    for pid, comm in [(1, "systemd"), (42, "bash"), (1234, "my cool app")]:
        pid_dir = tmp_path / str(pid)
        pid_dir.mkdir()
        (pid_dir / "stat").write_text(make_stat_line(pid, comm))
        (pid_dir / "statm").write_text(STATM)

    return tmp_path
