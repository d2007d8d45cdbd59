"""Tests for signal handlers, the background reaper and exit cleanup."""

import os
import signal
import subprocess
import sys

import psutil
import pytest

from smallsh.job_control import (
    apply_child_signals,
    check_background_jobs,
    cleanup_jobs,
    make_sigtstp_handler,
)
from smallsh.state import ShellState


class TestSigtstpHandler:
    """The toggle handler flips the mode and writes straight to fd 1."""

    def test_enter_and_exit(self, state: ShellState, capfd: pytest.CaptureFixture[str]) -> None:
        """Two deliveries enter then leave foreground-only mode."""
        handler = make_sigtstp_handler(state)

        handler(signal.SIGTSTP, None)
        assert state.foreground_only
        out = capfd.readouterr().out
        assert "Entering foreground-only mode (& is now ignored)\n" in out
        assert out.endswith(": ")

        handler(signal.SIGTSTP, None)
        assert not state.foreground_only
        out = capfd.readouterr().out
        assert "Exiting foreground-only mode\n" in out
        assert out.endswith(": ")

    def test_installed_handlers(self, shell_signals: ShellState) -> None:
        """The shell ignores SIGINT and handles SIGTSTP."""
        assert signal.getsignal(signal.SIGINT) is signal.SIG_IGN
        os.kill(os.getpid(), signal.SIGINT)
        os.kill(os.getpid(), signal.SIGTSTP)
        assert shell_signals.foreground_only


class TestChildSignals:
    """Dispositions set in the child before exec."""

    def _dispositions_after(self, foreground: bool) -> tuple:
        saved = {sig: signal.getsignal(sig) for sig in (signal.SIGINT, signal.SIGTSTP)}
        signal.signal(signal.SIGINT, signal.SIG_IGN)
        try:
            apply_child_signals(foreground)
            return signal.getsignal(signal.SIGINT), signal.getsignal(signal.SIGTSTP)
        finally:
            for sig, handler in saved.items():
                signal.signal(sig, handler)

    def test_foreground(self) -> None:
        """Foreground children take SIGINT's default action."""
        sigint, sigtstp = self._dispositions_after(foreground=True)
        assert sigint is signal.SIG_DFL
        assert sigtstp is signal.SIG_IGN

    def test_background(self) -> None:
        """Background children keep SIGINT ignored."""
        sigint, sigtstp = self._dispositions_after(foreground=False)
        assert sigint is signal.SIG_IGN
        assert sigtstp is signal.SIG_IGN


class TestReaper:
    """check_background_jobs collects finished children without blocking."""

    def test_nothing_to_reap(self, state: ShellState, capfd: pytest.CaptureFixture[str]) -> None:
        """No finished children means no output."""
        check_background_jobs(state)
        assert capfd.readouterr().out == ""

    def test_running_child_not_reported(
        self, state: ShellState, capfd: pytest.CaptureFixture[str]
    ) -> None:
        """A child that is still running is left alone."""
        proc = subprocess.Popen(["sleep", "5"])
        state.background_pids.add(proc.pid)
        try:
            check_background_jobs(state)
            assert capfd.readouterr().out == ""
            assert proc.pid in state.background_pids
        finally:
            proc.kill()
            os.waitpid(proc.pid, 0)

    def test_reports_exit_and_signal(
        self, state: ShellState, capfd: pytest.CaptureFixture[str], reap
    ) -> None:
        """Each finished child is reported once, in the status wording."""
        exited = subprocess.Popen([sys.executable, "-c", "raise SystemExit(2)"])
        killed = subprocess.Popen(["sleep", "30"])
        state.background_pids.update({exited.pid, killed.pid})
        killed.send_signal(signal.SIGTERM)

        reap(state, exited.pid)
        reap(state, killed.pid)

        out = capfd.readouterr().out
        assert f"background pid {exited.pid} is done: exit value 2\n" in out
        assert f"background pid {killed.pid} is done: terminated by signal 15\n" in out
        check_background_jobs(state)
        assert capfd.readouterr().out == ""


class TestCleanupJobs:
    """Exit-time termination of background children via psutil."""

    def test_terminates_running(self, state: ShellState) -> None:
        """Running children get SIGTERM and are gone afterwards."""
        proc = subprocess.Popen(["sleep", "30"])
        state.background_pids.add(proc.pid)
        assert cleanup_jobs(state, timeout=2) == 1
        assert state.background_pids == set()
        assert not psutil.pid_exists(proc.pid) or psutil.Process(proc.pid).status() == psutil.STATUS_ZOMBIE

    def test_kills_stubborn(self, state: ShellState) -> None:
        """Children ignoring SIGTERM are killed after the timeout."""
        code = "import signal, time; signal.signal(signal.SIGTERM, signal.SIG_IGN); print('ready', flush=True); time.sleep(30)"
        proc = subprocess.Popen([sys.executable, "-c", code], stdout=subprocess.PIPE)
        proc.stdout.readline()
        state.background_pids.add(proc.pid)
        cleanup_jobs(state, timeout=0.5)
        proc.stdout.close()
        assert proc.poll() is not None

    def test_already_gone(self, state: ShellState) -> None:
        """Pids that no longer exist are skipped quietly."""
        proc = subprocess.Popen(["true"])
        proc.wait()
        state.background_pids.add(proc.pid)
        assert cleanup_jobs(state, timeout=0.1) == 0
        assert state.background_pids == set()
