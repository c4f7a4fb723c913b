"""Tests for the ProcMonitor class."""

import logging
from queue import Empty, Queue

import pytest

from pyprocfs.models import LoadAverage
from pyprocfs.monitor import ProcessSample, ProcMonitor, ProcSample
from pyprocfs.reader import ProcReader


class TestProcSample:
    """Tests for ProcSample dataclass."""

    def test_proc_sample_uses_slots(self, fake_proc):
        """Test ProcSample uses __slots__ for memory efficiency."""
        reader = ProcReader(fake_proc)
        sample = ProcSample(
            load_average=reader.load_average(),
            cpu_stat=reader.cpu_stat(),
            uptime=reader.uptime(),
            processes=[],
        )
        # Slots-based dataclasses don't have __dict__
        assert not hasattr(sample, "__dict__")
        assert sample.load_average == LoadAverage(0.5, 0.25, 0.1, 3, 128, 4821)


class TestProcMonitor:
    """Tests for ProcMonitor class."""

    def test_monitor_creation(self, fake_proc):
        """Test ProcMonitor can be instantiated."""
        queue: Queue[ProcSample] = Queue()
        monitor = ProcMonitor(queue, reader=ProcReader(fake_proc))

        assert monitor.poll_rate == 2.0
        assert monitor.reader.root == fake_proc
        assert not monitor.is_running

    def test_default_reader(self):
        """Test ProcMonitor reads the real /proc by default."""
        monitor = ProcMonitor(Queue())
        assert str(monitor.reader.root) == "/proc"

    def test_poll_rate_minimum(self, fake_proc):
        """Test poll rate has a minimum value."""
        monitor = ProcMonitor(Queue(), reader=ProcReader(fake_proc), poll_rate=0.0)
        assert monitor.poll_rate == 0.1

        monitor.poll_rate = 0.01  # Very small value
        assert monitor.poll_rate >= 0.1  # Should be clamped to minimum

    def test_invalid_pids_rejected(self, fake_proc):
        """Test the pid filter is validated up front."""
        with pytest.raises(ValueError):
            ProcMonitor(Queue(), reader=ProcReader(fake_proc), pids=[1, 0])

    def test_monitor_start_stop(self, fake_proc):
        """Test ProcMonitor can be started and stopped."""
        monitor = ProcMonitor(Queue(), reader=ProcReader(fake_proc), poll_rate=0.1)

        assert not monitor.is_running

        monitor.start()
        assert monitor.is_running

        monitor.stop()
        assert not monitor.is_running

    def test_monitor_start_idempotent(self, fake_proc):
        """Test starting an already running monitor is safe."""
        monitor = ProcMonitor(Queue(), reader=ProcReader(fake_proc), poll_rate=0.1)

        monitor.start()
        thread1 = monitor._thread

        monitor.start()  # Should not create a new thread
        thread2 = monitor._thread

        assert thread1 is thread2
        monitor.stop()

    def test_daemon_thread(self, fake_proc):
        """Test monitor thread is a daemon thread."""
        monitor = ProcMonitor(Queue(), reader=ProcReader(fake_proc), poll_rate=0.1)

        monitor.start()

        try:
            assert monitor._thread is not None
            assert monitor._thread.daemon is True
            assert monitor._thread.name == "ProcMonitor"
        finally:
            monitor.stop()

    def test_monitor_collects_samples(self, fake_proc):
        """Test ProcMonitor collects and queues samples."""
        queue: Queue[ProcSample] = Queue()
        monitor = ProcMonitor(queue, reader=ProcReader(fake_proc), poll_rate=0.1)

        monitor.start()

        try:
            sample = queue.get(timeout=2.0)
            assert isinstance(sample, ProcSample)
            assert sample.cpu_stat.user == 4705
            assert sample.uptime.idle == 9999.0
            assert [p.stat.pid for p in sample.processes] == [1, 42, 1234]
            for proc in sample.processes:
                assert isinstance(proc, ProcessSample)
                assert proc.memory.size == 2960
        finally:
            monitor.stop()

    def test_pid_filter(self, fake_proc):
        """Test only the requested PIDs are sampled."""
        monitor = ProcMonitor(Queue(), reader=ProcReader(fake_proc), pids=[1234])

        processes = monitor._collect_processes()

        assert [p.stat.comm for p in processes] == ["my cool app"]

    def test_skips_vanished_process(self, fake_proc):
        """Test a process that exits between listing and reading is skipped."""
        monitor = ProcMonitor(Queue(), reader=ProcReader(fake_proc), pids=[1, 555, 42])

        processes = monitor._collect_processes()

        assert [p.stat.pid for p in processes] == [1, 42]

    def test_skips_process_without_statm(self, fake_proc):
        """Test a process whose second file vanished is skipped entirely."""
        (fake_proc / "42" / "statm").unlink()
        monitor = ProcMonitor(Queue(), reader=ProcReader(fake_proc))

        processes = monitor._collect_processes()

        assert [p.stat.pid for p in processes] == [1, 1234]

    def test_skips_undecodable_process(self, fake_proc, caplog):
        """Test a truncated per-process file is skipped and logged."""
        (fake_proc / "42" / "stat").write_text("42 (bash) S 1")
        monitor = ProcMonitor(Queue(), reader=ProcReader(fake_proc))

        with caplog.at_level(logging.DEBUG, logger="pyprocfs.monitor"):
            processes = monitor._collect_processes()

        assert [p.stat.pid for p in processes] == [1, 1234]
        assert "undecodable" in caplog.text

    def test_drops_cycle_on_system_decode_error(self, fake_proc, caplog):
        """Test a bad system-wide file drops the cycle but keeps the loop alive."""
        (fake_proc / "stat").write_text("cpu0 1 2 3\n")
        queue: Queue[ProcSample] = Queue()
        monitor = ProcMonitor(queue, reader=ProcReader(fake_proc), poll_rate=0.1)

        with caplog.at_level(logging.WARNING, logger="pyprocfs.monitor"):
            monitor.start()
            try:
                with pytest.raises(Empty):
                    queue.get(timeout=0.5)
                assert monitor.is_running

                # Recovers once the file is readable again
                (fake_proc / "stat").write_text("cpu  1 2 3 4 5 6 7 8 9 10\n")
                sample = queue.get(timeout=2.0)
                assert sample.cpu_stat.total == 55
            finally:
                monitor.stop()

        assert "Dropping sample" in caplog.text

    def test_drops_cycle_on_missing_root(self, tmp_path):
        """Test an unreadable root never kills the loop."""
        queue: Queue[ProcSample] = Queue()
        monitor = ProcMonitor(queue, reader=ProcReader(tmp_path / "missing"), poll_rate=0.1)

        monitor.start()
        try:
            with pytest.raises(Empty):
                queue.get(timeout=0.5)
            assert monitor.is_running
        finally:
            monitor.stop()

    def test_samples_are_fresh_reads(self, fake_proc):
        """Test each cycle re-reads the files instead of reusing old records."""
        monitor = ProcMonitor(Queue(), reader=ProcReader(fake_proc))

        first = monitor._collect_sample()
        (fake_proc / "uptime").write_text("20000.00 15000.00\n")
        second = monitor._collect_sample()

        assert first.uptime.uptime == 12345.67
        assert second.uptime.uptime == 20000.00


@pytest.mark.skipif(not ProcReader().root.joinpath("self", "stat").exists(), reason="requires a Linux /proc")
def test_monitor_live_system():
    """Test the monitor samples the running system."""
    queue: Queue[ProcSample] = Queue()
    monitor = ProcMonitor(queue, poll_rate=0.1)

    monitor.start()

    try:
        snapshot1 = queue.get(timeout=5.0)
        snapshot2 = queue.get(timeout=5.0)

        assert len(snapshot1.processes) > 0
        assert snapshot2.cpu_stat.total >= snapshot1.cpu_stat.total
    finally:
        monitor.stop()
