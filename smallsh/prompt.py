import sys

from smallsh.config import PROMPT


def get_prompt():
    return PROMPT


def read_line():
    """Prompt and read one line. Returns None at end of input."""
    sys.stdout.flush()
    try:
        return input(get_prompt())
    except EOFError:
        print()
        return None
