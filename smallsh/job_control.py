import os
import signal
import sys

import psutil

from smallsh.config import CLEANUP_TIMEOUT, PROMPT
from smallsh.state import ProcessStatus

STDOUT_FILENO = 1

ENTER_FOREGROUND_ONLY = "\nEntering foreground-only mode (& is now ignored)\n"
EXIT_FOREGROUND_ONLY = "\nExiting foreground-only mode\n"


def _write_raw(text):
    # Bypass sys.stdout: buffered writers raise on reentrant calls
    try:
        os.write(STDOUT_FILENO, text.encode())
    except OSError:
        pass


def make_sigtstp_handler(state):
    """Build the SIGTSTP handler that flips foreground-only mode."""

    def handle_sigtstp(signum, frame):
        if state.toggle_foreground_only():
            _write_raw(ENTER_FOREGROUND_ONLY)
        else:
            _write_raw(EXIT_FOREGROUND_ONLY)
        _write_raw(PROMPT)

    return handle_sigtstp


def init_signal_handlers(state):
    """Shell ignores SIGINT; SIGTSTP toggles foreground-only mode."""
    signal.signal(signal.SIGINT, signal.SIG_IGN)
    signal.signal(signal.SIGTSTP, make_sigtstp_handler(state))


def apply_child_signals(foreground):
    """
    Signal dispositions for a freshly forked child, before exec.

    Every child ignores SIGTSTP. SIGINT goes back to the default action
    only for children run in the foreground; background children keep
    the shell's SIG_IGN across exec.
    """
    signal.signal(signal.SIGTSTP, signal.SIG_IGN)
    if foreground:
        signal.signal(signal.SIGINT, signal.SIG_DFL)


def check_background_jobs(state):
    """Reap every finished child without blocking and report it."""
    while True:
        try:
            pid, status = os.waitpid(-1, os.WNOHANG)
        except ChildProcessError:
            break
        if pid == 0:
            break
        state.background_pids.discard(pid)
        outcome = ProcessStatus.from_wait_status(status)
        print(f"background pid {pid} is done: {outcome}", flush=True)


def add_background_job(state, pid):
    state.background_pids.add(pid)
    print(f"background pid is {pid}", flush=True)


def cleanup_jobs(state, timeout=CLEANUP_TIMEOUT):
    """Terminate background children still running; SIGKILL the stubborn ones."""
    procs = []
    for pid in sorted(state.background_pids):
        try:
            proc = psutil.Process(pid)
            proc.terminate()
            procs.append(proc)
        except psutil.NoSuchProcess:
            pass
        except psutil.AccessDenied as e:
            print(f"smallsh: could not terminate background pid {pid}: {e}", file=sys.stderr)

    _, alive = psutil.wait_procs(procs, timeout=timeout)
    for proc in alive:
        try:
            proc.kill()
        except psutil.NoSuchProcess:
            pass
    if alive:
        psutil.wait_procs(alive, timeout=timeout)

    state.background_pids.clear()
    return len(procs)
