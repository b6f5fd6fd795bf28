"""Tests for the memtop command-line entry point."""

import logging

import pytest

from memtop.app import PROC_ROOT_ENV, build_parser, main, make_source
from memtop.display import CLEAR_SCREEN
from memtop.monitor import ProcfsSource, PsutilSource


class TestParser:
    """Tests for argument parsing."""

    def test_defaults(self, monkeypatch):
        """Test defaults: top 5 from /proc via procfs, clearing the screen."""
        monkeypatch.delenv(PROC_ROOT_ENV, raising=False)
        args = build_parser().parse_args([])

        assert args.top == 5
        assert args.proc_root == "/proc"
        assert args.source == "procfs"
        assert args.clear is True
        assert args.once is False

    def test_proc_root_from_env(self, monkeypatch):
        """Test the procfs root can come from the environment."""
        monkeypatch.setenv(PROC_ROOT_ENV, "/host/proc")
        assert build_parser().parse_args([]).proc_root == "/host/proc"

    @pytest.mark.parametrize("value", ["0", "-3", "many"])
    def test_rejects_bad_top(self, value, capsys):
        """Test non-positive or non-numeric --top values are refused."""
        with pytest.raises(SystemExit) as exc_info:
            build_parser().parse_args(["--top", value])
        assert exc_info.value.code == 2
        assert "--top" in capsys.readouterr().err

    def test_make_source(self):
        """Test --source selects the backend."""
        parser = build_parser()
        assert isinstance(make_source(parser.parse_args(["--source", "psutil"])), PsutilSource)
        source = make_source(parser.parse_args(["--proc-root", "/tmp/x"]))
        assert isinstance(source, ProcfsSource)
        assert str(source.proc_root) == "/tmp/x"

    def test_psutil_warns_about_proc_root(self, caplog):
        """Test a custom procfs root is reported as ignored by the psutil backend."""
        args = build_parser().parse_args(["--source", "psutil", "--proc-root", "/host/proc"])

        with caplog.at_level(logging.WARNING, logger="memtop.app"):
            assert isinstance(make_source(args), PsutilSource)

        assert "Ignoring procfs root /host/proc" in caplog.text

    def test_psutil_default_root_is_quiet(self, caplog, monkeypatch):
        """Test the default root with psutil logs no warning."""
        monkeypatch.delenv(PROC_ROOT_ENV, raising=False)
        args = build_parser().parse_args(["--source", "psutil"])

        with caplog.at_level(logging.WARNING, logger="memtop.app"):
            make_source(args)

        assert caplog.records == []


class TestMain:
    """Tests for main()."""

    def test_once_prints_snapshot(self, fake_proc, capsys):
        """Test --once prints one snapshot without clearing and exits 0."""
        fake_proc.process(1, name="init", rss_kb=1000)
        fake_proc.process(2, name="bash", rss_kb=3000)

        code = main(["--once", "--proc-root", str(fake_proc.root)])
        out = capsys.readouterr().out

        assert code == 0
        assert CLEAR_SCREEN not in out
        lines = out.splitlines()
        assert lines[0] == "Memory: total=16384000kB available=8192000kB used=8192000kB"
        assert lines[1] == "Top 5 processes by memory:"
        assert lines[3].split()[:3] == ["1", "2", "bash"]
        assert lines[4].split()[:3] == ["2", "1", "init"]

    def test_once_respects_top(self, fake_proc, capsys):
        """Test --top limits the number of rows."""
        for pid in range(1, 8):
            fake_proc.process(pid, name=f"p{pid}", rss_kb=pid * 10)

        assert main(["--once", "--top", "2", "--proc-root", str(fake_proc.root)]) == 0

        rows = capsys.readouterr().out.splitlines()[3:]
        assert [row.split()[2] for row in rows] == ["p7", "p6"]

    def test_once_failure_exit_code(self, tmp_path, capsys):
        """Test a failed cycle makes --once exit 1 and prints nothing."""
        assert main(["--once", "--proc-root", str(tmp_path / "missing")]) == 1
        assert capsys.readouterr().out == ""

    def test_once_psutil(self, capsys):
        """Test the psutil backend renders the live system."""
        assert main(["--once", "--source", "psutil"]) == 0
        assert capsys.readouterr().out.startswith("Memory: total=")

    def test_keyboard_interrupt_exits_cleanly(self, monkeypatch):
        """Test Ctrl-C ends the loop with status 0."""

        def interrupted(self, cycles=None):
            raise KeyboardInterrupt

        monkeypatch.setattr("memtop.monitor.MemoryMonitor.run", interrupted)
        assert main([]) == 0
