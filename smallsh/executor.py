import os
import signal
import sys

from smallsh.job_control import add_background_job, apply_child_signals
from smallsh.state import ProcessStatus

STDIN_FILENO = 0
STDOUT_FILENO = 1


def _child_print(message):
    print(message, file=sys.stderr, flush=True)


def redirect(path, target_fd, flags, mode=0o644):
    """Open path and move it onto target_fd. Returns False if the open fails."""
    try:
        fd = os.open(path, flags, mode)
    except OSError:
        return False
    if fd == target_fd:
        # Landed on a closed std descriptor; os.open made it close-on-exec
        os.set_inheritable(fd, True)
    else:
        # os.open descriptors are close-on-exec; the dup2 copy is not
        os.dup2(fd, target_fd)
        os.close(fd)
    return True


def setup_child(command, foreground, sigmask=None):
    """Runs in the child: signals first, then redirections. Exits 1 on a bad path."""
    apply_child_signals(foreground)
    if sigmask is not None:
        # SIGTSTP is ignored now, so a pending one is dropped here
        signal.pthread_sigmask(signal.SIG_SETMASK, sigmask)

    if command.input_path is not None:
        if not redirect(command.input_path, STDIN_FILENO, os.O_RDONLY):
            _child_print(f"cannot open {command.input_path} for input")
            os._exit(1)

    if command.output_path is not None:
        flags = os.O_WRONLY | os.O_CREAT | os.O_TRUNC
        if not redirect(command.output_path, STDOUT_FILENO, flags):
            _child_print(f"cannot open {command.output_path} for output")
            os._exit(1)


def exec_command(command):
    """Replace the child image with the program; never returns."""
    try:
        os.execvp(command.name, command.arguments)
    except OSError:
        _child_print(f"{command.name}: command not found")
    os._exit(1)


def wait_foreground(pid):
    """Block until pid terminates, retrying if a signal interrupts the wait."""
    while True:
        try:
            _, status = os.waitpid(pid, 0)
        except InterruptedError:
            continue
        return ProcessStatus.from_wait_status(status)


def run_external(command, state):
    """
    Fork and exec a non-builtin command.

    Foreground commands (no "&", or foreground-only mode on) are waited
    for and their outcome is stored in state.last_status. Background
    commands are announced and left for check_background_jobs to reap.
    Returns the foreground ProcessStatus, or None for a background job.
    A failed fork is fatal to the shell.
    """
    foreground = not command.background or state.foreground_only

    sys.stdout.flush()
    sys.stderr.flush()

    # Keep SIGTSTP off until the child has dropped the shell's handler
    sigmask = signal.pthread_sigmask(signal.SIG_BLOCK, {signal.SIGTSTP})
    try:
        pid = os.fork()
    except OSError as e:
        signal.pthread_sigmask(signal.SIG_SETMASK, sigmask)
        print(f"smallsh: fork: {e}", file=sys.stderr)
        raise SystemExit(1)

    if pid == 0:
        try:
            setup_child(command, foreground, sigmask)
            exec_command(command)
        finally:
            os._exit(1)

    signal.pthread_sigmask(signal.SIG_SETMASK, sigmask)

    if not foreground:
        add_background_job(state, pid)
        return None

    outcome = wait_foreground(pid)
    if outcome.was_signaled:
        print(outcome, flush=True)
    state.last_status = outcome
    return outcome
