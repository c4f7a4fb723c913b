"""
Decoders for the fixed-layout /proc pseudo-files.

Each decoder takes the full raw content of one pseudo-file, as read by the
caller, and returns an immutable record or raises a DecodeError subclass.
Decoders are pure: no I/O, no logging, no state kept between calls, so they
are safe to call from any thread.

Only the first line of the input is decoded. Tokens past a format's arity
are ignored, since newer kernels append fields to /proc/stat and
/proc/[pid]/stat. Bytes that are not valid UTF-8 (only a command name can
hold them) are kept as surrogate escapes, so
``comm.encode("utf-8", "surrogateescape")`` gives back the raw bytes.
"""

from pyprocfs.errors import ShortReadError, UnexpectedFormatError
from pyprocfs.fields import FieldType, convert
from pyprocfs.models import (
    CpuStat,
    LoadAverage,
    ProcessMemorySummary,
    ProcessStat,
    Uptime,
)

# (name, type) per positional field, in the kernel's order.
Layout = tuple[tuple[str, FieldType], ...]

LOAD_AVERAGE_FIELDS: Layout = (
    ("avg_1min", FieldType.FLOAT),
    ("avg_5min", FieldType.FLOAT),
    ("avg_15min", FieldType.FLOAT),
    ("runnable_entities", FieldType.U32),
    ("total_entities", FieldType.U32),
    ("last_pid", FieldType.U32),
)

CPU_STAT_TAG = "cpu  "

CPU_STAT_FIELDS: Layout = tuple(
    (name, FieldType.U64)
    for name in (
        "user",
        "nice",
        "system",
        "idle",
        "iowait",
        "irq",
        "softirq",
        "steal",
        "guest",
        "guest_nice",
    )
)

UPTIME_FIELDS: Layout = (
    ("uptime", FieldType.FLOAT),
    ("idle", FieldType.FLOAT),
)

PROCESS_MEMORY_SUMMARY_FIELDS: Layout = tuple(
    (name, FieldType.U64)
    for name in ("size", "resident", "shared", "text", "lib", "data", "dirty")
)

# Widths follow the printf formats documented in proc(5) for a 64-bit
# kernel: %d -> I32, %u -> U32, %ld -> I64, %lu and %llu -> U64.
PROCESS_STAT_FIELDS: Layout = (
    ("pid", FieldType.I32),
    ("comm", FieldType.TEXT),
    ("state", FieldType.CHAR),
    ("ppid", FieldType.I32),
    ("pgrp", FieldType.I32),
    ("session", FieldType.I32),
    ("tty_nr", FieldType.I32),
    ("tpgid", FieldType.I32),
    ("flags", FieldType.U32),
    ("minflt", FieldType.U64),
    ("cminflt", FieldType.U64),
    ("majflt", FieldType.U64),
    ("cmajflt", FieldType.U64),
    ("utime", FieldType.U64),
    ("stime", FieldType.U64),
    ("cutime", FieldType.I64),
    ("cstime", FieldType.I64),
    ("priority", FieldType.I64),
    ("nice", FieldType.I64),
    ("num_threads", FieldType.I64),
    ("itrealvalue", FieldType.I64),
    ("starttime", FieldType.U64),
    ("vsize", FieldType.U64),
    ("rss", FieldType.I64),
    ("rsslim", FieldType.U64),
    ("startcode", FieldType.U64),
    ("endcode", FieldType.U64),
    ("startstack", FieldType.U64),
    ("kstkesp", FieldType.U64),
    ("kstkeip", FieldType.U64),
    ("signal", FieldType.U64),
    ("blocked", FieldType.U64),
    ("sigignore", FieldType.U64),
    ("sigcatch", FieldType.U64),
    ("wchan", FieldType.U64),
    ("nswap", FieldType.U64),
    ("cnswap", FieldType.U64),
    ("exit_signal", FieldType.I32),
    ("processor", FieldType.I32),
    ("rt_priority", FieldType.U32),
    ("policy", FieldType.U32),
    ("delayacct_blkio_ticks", FieldType.U64),
    ("guest_time", FieldType.U64),
    ("cguest_time", FieldType.I64),
)


def _first_line(text: bytes | str) -> str:
    """Return the first line of a pseudo-file's content as text."""
    if isinstance(text, bytes):
        text = text.decode("utf-8", errors="surrogateescape")
    return text.partition("\n")[0]


def _assemble(record_type, layout: Layout, tokens: list[str]):
    """
    Convert positional tokens per layout and build the record.

    The field count is checked before any conversion so that a truncated
    line always reports a short read rather than a conversion failure.
    """
    if len(tokens) < len(layout):
        raise ShortReadError(len(tokens), len(layout))

    values = [
        convert(token, field_type, name, position)
        for position, ((name, field_type), token) in enumerate(zip(layout, tokens), start=1)
    ]
    return record_type(*values)


def decode_load_average(text: bytes | str) -> LoadAverage:
    """
    Decode /proc/loadavg, e.g. ``"0.50 0.25 0.10 3/128 4821"``.

    The fourth token carries two fields joined by ``/`` and is split on its
    first ``/`` before conversion.

    Raises:
        UnexpectedFormatError: If the fourth token has no ``/`` and more
            tokens follow it.
        ShortReadError: If fewer than six fields are present.
        FieldConversionError: If any field is not a valid number.
    """
    tokens = _first_line(text).split()
    if len(tokens) > 3:
        runnable, slash, total = tokens[3].partition("/")
        if slash:
            tokens[3:4] = [runnable, total]
        elif len(tokens) == 4:
            # Line ends after the runnable count
            raise ShortReadError(4, len(LOAD_AVERAGE_FIELDS))
        else:
            raise UnexpectedFormatError("runnable/total entities", tokens[3])
    return _assemble(LoadAverage, LOAD_AVERAGE_FIELDS, tokens)


def decode_cpu_stat(text: bytes | str) -> CpuStat:
    """
    Decode the aggregate ``cpu`` line of /proc/stat.

    Raises:
        UnexpectedFormatError: If the line does not start with ``"cpu  "``.
        ShortReadError: If fewer than ten counters follow the tag.
        FieldConversionError: If a counter is not a valid u64.
    """
    line = _first_line(text)
    if not line.startswith(CPU_STAT_TAG):
        raise UnexpectedFormatError(CPU_STAT_TAG, line[: len(CPU_STAT_TAG)])
    return _assemble(CpuStat, CPU_STAT_FIELDS, line[len(CPU_STAT_TAG) :].split())


def decode_uptime(text: bytes | str) -> Uptime:
    """Decode /proc/uptime, e.g. ``"12345.67 9999.00"``."""
    return _assemble(Uptime, UPTIME_FIELDS, _first_line(text).split())


def decode_process_memory_summary(text: bytes | str) -> ProcessMemorySummary:
    """Decode /proc/[pid]/statm: seven page counts."""
    return _assemble(
        ProcessMemorySummary,
        PROCESS_MEMORY_SUMMARY_FIELDS,
        _first_line(text).split(),
    )


def decode_process_stat(text: bytes | str) -> ProcessStat:
    """
    Decode /proc/[pid]/stat.

    The command name sits between the first ``(`` and the last ``)`` and
    is taken literally, spaces and parentheses included. Only the text
    before and after it is split on whitespace.

    Raises:
        UnexpectedFormatError: If the line is not ``pid (comm) ...``.
        ShortReadError: If the line ends before all 44 fields, including
            a line cut off inside the command name.
        FieldConversionError: If a field does not fit its declared width.
    """
    line = _first_line(text)
    arity = len(PROCESS_STAT_FIELDS)

    open_paren = line.find("(")
    if open_paren < 0:
        head = line.split()
        if len(head) > 1:
            raise UnexpectedFormatError("'(' before the command name", line)
        raise ShortReadError(len(head), arity)

    head = line[:open_paren].split()
    if len(head) != 1:
        raise UnexpectedFormatError("a single pid before '('", line[:open_paren])

    close_paren = line.rfind(")")
    if close_paren < open_paren:
        raise ShortReadError(len(head), arity)

    tokens = head + [line[open_paren + 1 : close_paren]] + line[close_paren + 1 :].split()
    return _assemble(ProcessStat, PROCESS_STAT_FIELDS, tokens)
