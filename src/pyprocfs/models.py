"""Record types decoded from /proc pseudo-files."""

from dataclasses import dataclass


@dataclass(slots=True, frozen=True)
class LoadAverage:
    """Immutable snapshot of /proc/loadavg."""

    avg_1min: float
    avg_5min: float
    avg_15min: float
    runnable_entities: int  # Runnable processes and threads
    total_entities: int  # Scheduling entities that currently exist
    last_pid: int  # Most recently assigned PID


@dataclass(slots=True, frozen=True)
class CpuStat:
    """
    Aggregate CPU time accounting from the first line of /proc/stat.

    Every counter is in clock ticks, cumulative since boot and
    non-decreasing across reads.
    """

    user: int
    nice: int
    system: int
    idle: int
    iowait: int
    irq: int
    softirq: int
    steal: int
    guest: int
    guest_nice: int

    @property
    def total(self) -> int:
        """Sum of all ten counters."""
        return (
            self.user
            + self.nice
            + self.system
            + self.idle
            + self.iowait
            + self.irq
            + self.softirq
            + self.steal
            + self.guest
            + self.guest_nice
        )


@dataclass(slots=True, frozen=True)
class Uptime:
    """Immutable snapshot of /proc/uptime, in seconds."""

    uptime: float
    idle: float  # Summed over all CPUs, may exceed uptime on SMP


@dataclass(slots=True, frozen=True)
class ProcessMemorySummary:
    """Page counts from /proc/[pid]/statm."""

    size: int  # Total program size
    resident: int
    shared: int  # Resident file-backed pages
    text: int
    lib: int  # Always 0 since Linux 2.6
    data: int  # Data + stack
    dirty: int  # Always 0 since Linux 2.6


@dataclass(slots=True, frozen=True)
class ProcessStat:
    """
    Immutable snapshot of /proc/[pid]/stat.

    Fields keep the kernel's order and meaning (see proc(5)). Times are in
    clock ticks, memory sizes in bytes except rss (pages), and the signal
    fields are decimal bitmaps.
    """

    pid: int
    comm: str  # Executable name, may contain spaces
    state: str  # 'R', 'S', 'D', 'Z', 'T', 'W'; others passed through
    ppid: int
    pgrp: int
    session: int
    tty_nr: int
    tpgid: int
    flags: int
    minflt: int
    cminflt: int
    majflt: int
    cmajflt: int
    utime: int
    stime: int
    cutime: int  # Signed
    cstime: int  # Signed
    priority: int
    nice: int
    num_threads: int
    itrealvalue: int
    starttime: int
    vsize: int
    rss: int
    rsslim: int
    startcode: int
    endcode: int
    startstack: int
    kstkesp: int
    kstkeip: int
    signal: int
    blocked: int
    sigignore: int
    sigcatch: int
    wchan: int
    nswap: int
    cnswap: int
    exit_signal: int
    processor: int
    rt_priority: int
    policy: int
    delayacct_blkio_ticks: int
    guest_time: int
    cguest_time: int
