#!/usr/bin/env python3
"""
smallsh - a small interactive shell
 - Builtins: exit, cd, status
 - External commands via fork/exec
 - I/O redirection: < and >
 - Background execution with trailing &
 - $$ expands to the shell's pid
 - Ctrl+C only reaches foreground children
 - Ctrl+Z toggles foreground-only mode
"""

from smallsh.shell import main

if __name__ == "__main__":
    main()
