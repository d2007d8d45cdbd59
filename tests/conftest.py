"""Shared fixtures for the smallsh tests."""

import os
import signal
import time

import pytest

from smallsh.job_control import check_background_jobs, init_signal_handlers
from smallsh.state import ShellState


@pytest.fixture
def state() -> ShellState:
    """A fresh shell state for the current test process."""
    return ShellState()


@pytest.fixture
def shell_signals(state: ShellState):
    """Install the shell's signal handlers, restoring pytest's afterwards."""
    saved = {sig: signal.getsignal(sig) for sig in (signal.SIGINT, signal.SIGTSTP)}
    init_signal_handlers(state)
    yield state
    for sig, handler in saved.items():
        signal.signal(sig, handler)


def reap_until_done(state: ShellState, pid: int, timeout: float = 5.0) -> None:
    """Poll the reaper until pid has been collected."""
    deadline = time.monotonic() + timeout
    while pid in state.background_pids:
        if time.monotonic() > deadline:
            os.kill(pid, signal.SIGKILL)
            os.waitpid(pid, 0)
            pytest.fail(f"background pid {pid} was never reaped")
        check_background_jobs(state)
        time.sleep(0.02)


@pytest.fixture
def reap():
    """Helper that waits for a background pid to be reported by the reaper."""
    return reap_until_done
