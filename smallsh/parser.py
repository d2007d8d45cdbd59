from smallsh.config import (
    BACKGROUND_TOKEN,
    INPUT_TOKEN,
    MAX_ARGUMENTS,
    NULL_DEVICE,
    OUTPUT_TOKEN,
)


class ParseError(ValueError):
    """Raised for a line that cannot be turned into a Command."""


class Command:
    """One parsed input line: argv, optional redirections and the & flag."""

    def __init__(self, arguments, input_path=None, output_path=None, background=False):
        self.arguments = arguments
        self.input_path = input_path
        self.output_path = output_path
        self.background = background

    @property
    def name(self):
        return self.arguments[0]

    def __repr__(self):
        return (
            f"Command(arguments={self.arguments!r}, input_path={self.input_path!r}, "
            f"output_path={self.output_path!r}, background={self.background!r})"
        )


def parse_command(line, foreground_only=False):
    """
    Parse an expanded command line into a Command.

    Tokens are split on whitespace only, no quoting. A trailing "&" marks
    the command as background. "< path" and "> path" set the redirections
    and are not passed to the program. When the command runs in the
    background and foreground-only mode is off, missing redirections
    default to the null device.
    Raises ParseError for empty input or a redirection with no path.
    """
    tokens = line.split()
    if not tokens:
        raise ParseError("empty command")

    background = tokens[-1] == BACKGROUND_TOKEN
    if background:
        tokens.pop()
        if not tokens:
            raise ParseError(f"syntax error near unexpected token '{BACKGROUND_TOKEN}'")

    arguments = [tokens[0]]
    input_path = output_path = None
    i = 1
    while i < len(tokens):
        tok = tokens[i]
        if tok in (INPUT_TOKEN, OUTPUT_TOKEN):
            if i + 1 >= len(tokens):
                raise ParseError(f"malformed redirection: '{tok}' needs a path")
            if tok == INPUT_TOKEN:
                input_path = tokens[i + 1]
            else:
                output_path = tokens[i + 1]
            i += 2
        else:
            arguments.append(tok)
            i += 1

    if len(arguments) > MAX_ARGUMENTS:
        raise ParseError(f"too many arguments (limit is {MAX_ARGUMENTS})")

    if background and not foreground_only:
        if input_path is None:
            input_path = NULL_DEVICE
        if output_path is None:
            output_path = NULL_DEVICE

    return Command(arguments, input_path, output_path, background)
