"""procview - Textual viewer for decoded /proc records."""

import argparse
import os
from enum import Enum
from queue import Empty, Queue

from textual.app import App, ComposeResult
from textual.containers import Container, Horizontal
from textual.css.query import NoMatches
from textual.widgets import DataTable, Footer, Static

from pyprocfs.logging_config import setup_logging
from pyprocfs.models import CpuStat, LoadAverage, Uptime
from pyprocfs.monitor import ProcessSample, ProcMonitor, ProcSample
from pyprocfs.reader import ProcReader

CLOCK_TICKS = os.sysconf("SC_CLK_TCK")
PAGE_SIZE = os.sysconf("SC_PAGE_SIZE")


class SortKey(Enum):
    """Sort keys for the process table."""

    TIME = "time"
    RES = "res"
    PID = "pid"
    NAME = "name"


def format_bytes(size: int) -> str:
    """Format bytes as human-readable string."""
    for unit in ["B", "K", "M", "G", "T"]:
        if size < 1024:
            return f"{size:5.1f}{unit}" if unit != "B" else f"{size:5d}{unit}"
        size = size / 1024
    return f"{size:.1f}P"


def format_ticks(ticks: int) -> str:
    """Format cumulative clock ticks as M:SS.hh, the way top shows TIME+."""
    hundredths = ticks * 100 // CLOCK_TICKS
    minutes, hundredths = divmod(hundredths, 6000)
    return f"{minutes}:{hundredths // 100:02d}.{hundredths % 100:02d}"


def display_text(text: str) -> str:
    """Make decoded text printable, showing undecodable bytes as U+FFFD."""
    return text.encode("utf-8", "surrogateescape").decode("utf-8", "replace")


def format_uptime(seconds: float) -> str:
    """Format uptime seconds as 'N days, HH:MM:SS'."""
    days = int(seconds // 86400)
    hours = int((seconds % 86400) // 3600)
    minutes = int((seconds % 3600) // 60)
    secs = int(seconds % 60)
    if days > 0:
        return f"{days} days, {hours:02d}:{minutes:02d}:{secs:02d}"
    return f"{hours:02d}:{minutes:02d}:{secs:02d}"


class HeaderStats(Static):
    """Header widget showing system-wide records."""

    DEFAULT_CSS = """
    HeaderStats {
        height: auto;
        min-height: 5;
        padding: 1;
        background: $surface;
    }
    """

    def __init__(self, *args, **kwargs) -> None:
        """Initialize HeaderStats."""
        super().__init__(*args, **kwargs)
        self._load_average: LoadAverage | None = None
        self._cpu_stat: CpuStat | None = None
        self._uptime: Uptime | None = None

    def compose(self) -> ComposeResult:
        """Compose the header stats layout."""
        yield Horizontal(
            Static(self._get_cpu_info(), id="cpu-info"),
            Static(self._get_load_info(), id="load-info"),
        )

    def update_stats(self, sample: ProcSample) -> None:
        """Update the statistics from a sample."""
        self._load_average = sample.load_average
        self._cpu_stat = sample.cpu_stat
        self._uptime = sample.uptime
        self._refresh_display()

    def _refresh_display(self) -> None:
        """Refresh the display with current data."""
        try:
            cpu_info = self.query_one("#cpu-info", Static)
            load_info = self.query_one("#load-info", Static)
            cpu_info.update(self._get_cpu_info())
            load_info.update(self._get_load_info())
        except Exception:
            pass  # Widget not mounted yet

    def _get_cpu_info(self) -> str:
        """Get cumulative CPU tick display."""
        cpu = self._cpu_stat
        if cpu is None:
            return "Loading CPU info..."
        return (
            f"CPU ticks since boot: {cpu.total}\n"
            f"usr {cpu.user}  nic {cpu.nice}  sys {cpu.system}  idl {cpu.idle}\n"
            f"iow {cpu.iowait}  irq {cpu.irq}  sirq {cpu.softirq}  stl {cpu.steal}\n"
            f"gst {cpu.guest}  gnic {cpu.guest_nice}"
        )

    def _get_load_info(self) -> str:
        """Get load average and uptime display."""
        load = self._load_average
        if load is None or self._uptime is None:
            return "Loading load info..."
        return (
            f"Load average: {load.avg_1min:.2f} {load.avg_5min:.2f} {load.avg_15min:.2f}\n"
            f"Tasks: {load.runnable_entities} running, {load.total_entities} total\n"
            f"Last PID: {load.last_pid}\n"
            f"Uptime: {format_uptime(self._uptime.uptime)}"
        )


class ProcessTable(Container):
    """Container for the process data table."""

    DEFAULT_CSS = """
    ProcessTable {
        height: 1fr;
        border: solid $primary;
    }
    """

    def __init__(self, *args, **kwargs) -> None:
        """Initialize ProcessTable."""
        super().__init__(*args, **kwargs)
        self._current_pids: set[int] = set()
        self._sort_key: SortKey = SortKey.TIME
        self._sort_reverse: bool = True  # Default: descending for TIME

    @property
    def sort_key(self) -> SortKey:
        """Get current sort key."""
        return self._sort_key

    def cycle_sort(self) -> SortKey:
        """Cycle to the next sort key and return it."""
        keys = list(SortKey)
        current_index = keys.index(self._sort_key)
        self._sort_key = keys[(current_index + 1) % len(keys)]
        self._sort_reverse = self._sort_key in (SortKey.TIME, SortKey.RES)
        return self._sort_key

    def compose(self) -> ComposeResult:
        """Compose the process table."""
        yield DataTable(id="process-table")

    def on_mount(self) -> None:
        """Initialize the data table when mounted."""
        table = self.query_one("#process-table", DataTable)
        table.cursor_type = "row"

        table.add_column("PID", key="pid", width=8)
        table.add_column("PPID", key="ppid", width=8)
        table.add_column("S", key="state", width=3)
        table.add_column("NI", key="nice", width=4)
        table.add_column("THR", key="threads", width=5)
        table.add_column("RES", key="res", width=8)
        table.add_column("TIME+", key="time", width=10)
        table.add_column("Command", key="command")

    def update_processes(self, processes: list[ProcessSample]) -> None:
        """
        Update the process table with new data.

        Uses update_cell for existing rows to avoid re-rendering the whole table.
        """
        table = self.query_one("#process-table", DataTable)

        sorted_processes = self._sort_processes(processes)
        new_pids = {proc.stat.pid for proc in sorted_processes}

        for pid in self._current_pids - new_pids:
            try:
                table.remove_row(str(pid))
            except Exception:
                pass  # Row may not exist

        for proc in sorted_processes:
            row_key = str(proc.stat.pid)
            if proc.stat.pid in self._current_pids:
                self._update_row(table, row_key, proc)
            else:
                self._add_row(table, row_key, proc)

        self._current_pids = new_pids

    def _sort_processes(self, processes: list[ProcessSample]) -> list[ProcessSample]:
        """Sort processes based on the current sort key."""
        key_func = {
            SortKey.TIME: lambda p: p.stat.utime + p.stat.stime,
            SortKey.RES: lambda p: p.memory.resident,
            SortKey.PID: lambda p: p.stat.pid,
            SortKey.NAME: lambda p: p.stat.comm.lower(),
        }
        return sorted(processes, key=key_func[self._sort_key], reverse=self._sort_reverse)

    @staticmethod
    def _cells(proc: ProcessSample) -> dict[str, str]:
        """Render the cells of one row, keyed by column."""
        stat = proc.stat
        return {
            "pid": str(stat.pid),
            "ppid": str(stat.ppid),
            "state": stat.state,
            "nice": str(stat.nice),
            "threads": str(stat.num_threads),
            "res": format_bytes(proc.memory.resident * PAGE_SIZE),
            "time": format_ticks(stat.utime + stat.stime),
            "command": display_text(stat.comm),
        }

    def _update_row(self, table: DataTable, row_key: str, proc: ProcessSample) -> None:
        """Update an existing row using update_cell for performance."""
        try:
            for column_key, value in self._cells(proc).items():
                table.update_cell(row_key, column_key, value)
        except Exception:
            pass  # Row may have been removed

    def _add_row(self, table: DataTable, row_key: str, proc: ProcessSample) -> None:
        """Add a new row to the table."""
        try:
            table.add_row(*self._cells(proc).values(), key=row_key)
        except Exception:
            pass  # Row may already exist


class ProcviewApp(App):
    """Main procview application."""

    TITLE = "procview"
    SUB_TITLE = "Decoded /proc records"

    CSS = """
    Screen {
        layout: vertical;
    }

    #header-stats {
        dock: top;
        height: auto;
        min-height: 6;
    }

    Horizontal {
        height: auto;
    }

    #cpu-info {
        width: 1fr;
        padding-right: 2;
    }

    #load-info {
        width: 1fr;
        padding-left: 2;
    }
    """

    BINDINGS = [
        ("q", "quit", "Quit"),
        ("f6", "sort", "Sort"),
    ]

    def __init__(
        self,
        reader: ProcReader | None = None,
        poll_rate: float = 2.0,
        pids: list[int] | None = None,
    ) -> None:
        """Initialize the ProcviewApp."""
        super().__init__()
        self._update_queue: Queue[ProcSample] = Queue()
        self._monitor = ProcMonitor(
            self._update_queue,
            reader=reader,
            poll_rate=poll_rate,
            pids=pids,
        )

    def compose(self) -> ComposeResult:
        """Compose the application layout."""
        yield HeaderStats(id="header-stats")
        yield ProcessTable()
        yield Footer()

    def on_mount(self) -> None:
        """Start the monitor when the app is mounted."""
        self._monitor.start()
        self.set_interval(0.5, self._check_for_updates)

    def _check_for_updates(self) -> None:
        """Drain the queue and show the most recent sample."""
        sample = None
        while True:
            try:
                sample = self._update_queue.get_nowait()
            except Empty:
                break

        if sample is not None:
            self._update_ui(sample)

    def _update_ui(self, sample: ProcSample) -> None:
        """Update the UI with a new sample."""
        try:
            self.query_one("#header-stats", HeaderStats).update_stats(sample)
            self.query_one(ProcessTable).update_processes(sample.processes)
        except NoMatches:
            pass  # Widgets already torn down

    def action_sort(self) -> None:
        """Handle sort action - cycle through sort keys."""
        try:
            new_sort_key = self.query_one(ProcessTable).cycle_sort()
        except NoMatches:
            return
        self.notify(f"Sort: {new_sort_key.value.upper()}")

    def action_quit(self) -> None:
        """Handle quit action with graceful cleanup."""
        self._monitor.stop()
        self.exit()


def build_parser() -> argparse.ArgumentParser:
    """Build the command-line parser for procview."""
    parser = argparse.ArgumentParser(
        prog="procview",
        description="Show decoded /proc records in the terminal.",
    )
    parser.add_argument("--proc-root", default="/proc", help="proc filesystem mount point")
    parser.add_argument("--poll-rate", type=float, default=2.0, help="seconds between samples")
    parser.add_argument(
        "--pid",
        type=int,
        action="append",
        dest="pids",
        help="only sample this process (repeatable)",
    )
    parser.add_argument("--log-level", default="WARNING", help="DEBUG, INFO, WARNING or ERROR")
    parser.add_argument("--log-file", default=None, help="write log records to this file")
    return parser


def main(argv: list[str] | None = None) -> None:
    """Entry point for procview."""
    args = build_parser().parse_args(argv)
    setup_logging(args.log_level, args.log_file)

    try:
        app = ProcviewApp(
            reader=ProcReader(args.proc_root),
            poll_rate=args.poll_rate,
            pids=args.pids,
        )
    except ValueError as exc:
        raise SystemExit(f"procview: {exc}") from exc
    app.run()


if __name__ == "__main__":
    main()
