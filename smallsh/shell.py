import sys

from smallsh.builtin import builtin_exit, execute_builtin
from smallsh.config import EXPANSION_TOKEN
from smallsh.executor import run_external
from smallsh.history import init_readline, load_history, save_history
from smallsh.job_control import check_background_jobs, cleanup_jobs, init_signal_handlers
from smallsh.parser import ParseError, parse_command
from smallsh.prompt import read_line
from smallsh.state import ShellState


def expand_variables(line, pid, token=EXPANSION_TOKEN):
    """
    Replace every "$$" in line with pid.

    Matches are found left to right without overlap, and the inserted
    digits are never scanned again, so "$$$" becomes "<pid>$".
    """
    return line.replace(token, str(pid))


def is_ignorable(line):
    """Blank lines and "#" comments do nothing."""
    return not line.strip() or line.startswith("#")


def run_line(line, state):
    """Expand, parse and run one input line."""
    if is_ignorable(line):
        return

    line = expand_variables(line, state.shell_pid)
    try:
        command = parse_command(line, state.foreground_only)
    except ParseError as e:
        print(f"smallsh: {e}", file=sys.stderr)
        return

    if execute_builtin(command, state):
        return
    run_external(command, state)


def main_loop(state=None):
    """Main shell loop"""
    state = state or ShellState()

    init_signal_handlers(state)
    interactive = init_readline()
    if interactive:
        load_history()

    try:
        while True:
            check_background_jobs(state)

            line = read_line()
            if line is None:
                builtin_exit(None, state)

            run_line(line.rstrip("\n"), state)
    finally:
        cleanup_jobs(state)
        if interactive:
            save_history()


def main():
    main_loop()
