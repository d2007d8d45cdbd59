import os

PROMPT = ": "

HISTORY_FILE = os.path.expanduser(os.getenv("SMALLSH_HISTORY", "~/.smallsh_history"))
MAX_HISTORY = 1000

# Redirect target for background jobs with no explicit < or >
NULL_DEVICE = os.devnull

EXPANSION_TOKEN = "$$"
BACKGROUND_TOKEN = "&"
INPUT_TOKEN = "<"
OUTPUT_TOKEN = ">"

# Upper bound on argv length, program name included
MAX_ARGUMENTS = 512

# Seconds to wait for background children after SIGTERM before SIGKILL
CLEANUP_TIMEOUT = 3
