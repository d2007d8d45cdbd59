import os
import sys

from smallsh.job_control import cleanup_jobs


def builtin_exit(command, state):
    """Kill leftover background jobs, then leave the shell."""
    cleanup_jobs(state)
    raise SystemExit(0)


def builtin_cd(command, state):
    """Change directory; HOME when no path is given."""
    args = command.arguments[1:]
    if len(args) > 1:
        print("cd: too many arguments", file=sys.stderr)
        return False

    if args:
        path = args[0]
    else:
        path = os.getenv("HOME")
        if not path:
            print("cd: HOME not set", file=sys.stderr)
            return False

    try:
        os.chdir(path)
        return True
    except OSError as e:
        print(f"cd: {path}: {e.strerror}", file=sys.stderr)
        return False


def builtin_status(command, state):
    """Print how the last foreground command ended."""
    print(state.last_status, flush=True)
    return True


BUILTINS = {
    "exit": builtin_exit,
    "cd": builtin_cd,
    "status": builtin_status,
}


def is_builtin(name):
    return name in BUILTINS


def execute_builtin(command, state):
    """
    Run command in the shell itself if it names a built-in.
    Returns True when it was handled here. Built-ins ignore "&" and
    redirections and never change state.last_status.
    """
    handler = BUILTINS.get(command.name)
    if handler is None:
        return False
    handler(command, state)
    return True
