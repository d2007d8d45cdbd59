import os


class ProcessStatus:
    """How a child ended: exited with a code, or killed by a signal."""

    EXITED = "exited"
    SIGNALED = "signaled"

    def __init__(self, kind, value):
        self.kind = kind
        self.value = value

    @classmethod
    def exited(cls, code):
        return cls(cls.EXITED, code)

    @classmethod
    def signaled(cls, signum):
        return cls(cls.SIGNALED, signum)

    @classmethod
    def from_wait_status(cls, status):
        """Decode a raw status as returned by os.waitpid."""
        if os.WIFSIGNALED(status):
            return cls.signaled(os.WTERMSIG(status))
        return cls.exited(os.WEXITSTATUS(status))

    @property
    def was_signaled(self):
        return self.kind == self.SIGNALED

    def __eq__(self, other):
        if not isinstance(other, ProcessStatus):
            return NotImplemented
        return (self.kind, self.value) == (other.kind, other.value)

    def __repr__(self):
        return f"ProcessStatus({self.kind!r}, {self.value!r})"

    def __str__(self):
        if self.was_signaled:
            return f"terminated by signal {self.value}"
        return f"exit value {self.value}"


class ShellState:
    """
    Process-wide state shared by the loop, the executor and the SIGTSTP handler.

    foreground_only is written only from the SIGTSTP handler (through
    toggle_foreground_only). CPython runs handlers on the main thread
    between bytecodes, so a plain attribute is enough.
    """

    def __init__(self, shell_pid=None):
        self.shell_pid = shell_pid if shell_pid is not None else os.getpid()
        self.foreground_only = False
        self.last_status = ProcessStatus.exited(0)
        # Launched with & and not reaped yet; only used to clean up on exit
        self.background_pids = set()

    def toggle_foreground_only(self):
        self.foreground_only = not self.foreground_only
        return self.foreground_only
