"""
Usage grammar parser for "# Usage:" lines.

Grammar
    usage      := "# Usage:" "{cmd}" argument* rest?
    argument   := (optional | required) followed by whitespace or end of line
    required   := short | long | "<" ident ">"           required, never exclusive
    optional   := "[" (short | long | ident) "]" "!"?    "!" marks the argument exclusive
    short      := "-" letter
    long       := "--" ident ("=" VALUE)?                VALUE is one or more uppercase letters
    rest       := "[" ident "]..."                       last token, at most once
    ident      := [A-Za-z][A-Za-z0-9_-]*

Errors carry 0-based character positions into the line. The parser does not
stop at the first bad token: it records the problem, skips to the next
whitespace boundary and carries on, so a single call reports every bad token.
"""
import re
from dataclasses import dataclass

from .faults import InvalidUsageStringError

PREFIX = "# Usage:"
CMD_TOKEN = "{cmd}"
REST_SUFFIX = "..."

IDENT = re.compile(r"[A-Za-z][A-Za-z0-9_-]*")
VALUE = re.compile(r"[A-Z]+")


@dataclass(frozen=True)
class Positional:
    name: str

    @property
    def key(self):
        return self.name

    def render(self, required):
        return "<%s>" % self.name if required else self.name


@dataclass(frozen=True)
class Short:
    char: str

    @property
    def key(self):
        return self.char

    def render(self, required):
        return "-" + self.char


@dataclass(frozen=True)
class Long:
    name: str
    value: str | None = None

    @property
    def key(self):
        return self.name

    def render(self, required):
        if self.value is None:
            return "--" + self.name
        return "--%s=%s" % (self.name, self.value)


@dataclass(frozen=True)
class ArgSpec:
    base: Positional | Short | Long
    required: bool
    exclusive: bool = False

    @property
    def key(self):
        return self.base.key

    def render(self):
        if self.required:
            return self.base.render(True)
        return "[%s]%s" % (self.base.render(False), "!" if self.exclusive else "")


@dataclass(frozen=True)
class UsageSpec:
    arguments: tuple[ArgSpec, ...] = ()
    rest: str | None = None


@dataclass(frozen=True)
class UsageError:
    position: int
    message: str

    def __str__(self):
        return "at position %d: %s" % (self.position, self.message)


class _Parser:
    """
    Recursive-descent parser over one usage line; see the module docstring.
    """

    def __init__(self, line):
        self.line = line
        self.index = 0
        self.errors = []

    # --- low-level helpers ---

    @property
    def char(self):
        return self.line[self.index] if self.index < len(self.line) else ""

    def found(self):
        return repr(self.char) if self.char else "end of line"

    def error(self, message, position=None):
        self.errors.append(UsageError(self.index if position is None else position, message))

    def skip_whitespace(self):
        while self.char and self.char.isspace():
            self.index += 1

    def skip_token(self):
        while self.char and not self.char.isspace():
            self.index += 1

    def literal(self, text):
        if self.line.startswith(text, self.index):
            self.index += len(text)
            return True
        return False

    def pattern(self, regex):
        if match := regex.match(self.line, self.index):
            self.index = match.end()
            return match[0]
        return None

    def boundary(self):
        if self.char and not self.char.isspace():
            self.error("expected whitespace or end of line after argument, found %s" % self.found())
            return False
        return True

    # --- grammar ---

    def ident(self, after):
        if (name := self.pattern(IDENT)) is None:
            self.error("expected an identifier after %r, found %s" % (after, self.found()))
        return name

    def switch(self):
        """
        short | long; returns None without consuming when the input is neither.
        """
        if self.line.startswith("--", self.index):
            self.index += 2
            if (name := self.ident("--")) is None:
                return None
            if not self.literal("="):
                return Long(name)
            if (value := self.pattern(VALUE)) is None:
                self.error("expected an uppercase value placeholder after '--%s=', found %s" % (name, self.found()))
                return None
            return Long(name, value)

        if self.char == "-":
            self.index += 1
            if not self.char.isalpha():
                self.error("expected a letter after '-', found %s" % self.found())
                return None
            char = self.char
            self.index += 1
            return Short(char)

        return None

    def required(self):
        if self.char == "<":
            self.index += 1
            if (name := self.ident("<")) is None:
                return None
            if not self.literal(">"):
                self.error("expected '>' to close '<%s', found %s" % (name, self.found()))
                return None
            return Positional(name)

        start = len(self.errors)
        if (base := self.switch()) is None and len(self.errors) == start:
            self.error("expected an argument ('<name>', '-x', '--name' or '[...]'), found %s" % self.found())
        return base

    def optional(self):
        start = len(self.errors)
        if (base := self.switch()) is None and len(self.errors) == start:
            if (name := self.pattern(IDENT)) is None:
                self.error("expected '-x', '--name' or a name inside '[', found %s" % self.found())
                return None
            base = Positional(name)
        return base

    def token(self):
        """
        one argument or the rest capture.

        returns ("argument", ArgSpec), ("rest", name) or None on error.
        """
        if not self.literal("["):
            if (base := self.required()) is None or not self.boundary():
                return None
            return "argument", ArgSpec(base, True, False)

        self.skip_whitespace()
        if (base := self.optional()) is None:
            return None
        self.skip_whitespace()
        if not self.literal("]"):
            self.error("expected ']' to close the optional argument, found %s" % self.found())
            return None

        if self.line.startswith(REST_SUFFIX, self.index):
            if not isinstance(base, Positional):
                self.error("only a plain name can capture the rest of the arguments")
                return None
            self.index += len(REST_SUFFIX)
            if not self.boundary():
                return None
            return "rest", base.name

        exclusive = self.literal("!")
        if not self.boundary():
            return None
        return "argument", ArgSpec(base, False, exclusive)

    def usage(self):
        self.skip_whitespace()
        if not self.literal(PREFIX):
            self.error("expected %r" % PREFIX)
            return None
        self.skip_whitespace()
        if not self.literal(CMD_TOKEN):
            self.error("expected %r, found %s" % (CMD_TOKEN, self.found()))
            return None
        if not self.boundary():
            return None

        arguments = []
        rest = None
        seen = {}

        while True:
            self.skip_whitespace()
            if not self.char:
                break

            start = self.index

            if rest is not None:
                self.skip_token()
                self.error(
                    "unexpected %r after the rest capture '[%s]...'" % (self.line[start:self.index], rest),
                    start,
                )
                continue

            if (result := self.token()) is None:
                self.skip_token()
                continue

            kind, value = result
            key = value if kind == "rest" else value.key

            if key in seen:
                self.error("duplicate argument %r (first declared at position %d)" % (key, seen[key]), start)
                continue
            seen[key] = start

            if kind == "rest":
                rest = value
            else:
                arguments.append(value)

        return UsageSpec(tuple(arguments), rest)


def parse_usage(line, /):
    """
    Parse one "# Usage:" line into a UsageSpec.

    Raises
    - InvalidUsageStringError carrying every UsageError (errors=...) and their
      rendered forms (details=...) when the line does not follow the grammar.
    """
    if not isinstance(line, str):
        raise TypeError("parse_usage() argument must be a string")

    parser = _Parser(line)
    spec = parser.usage()

    if parser.errors:
        raise InvalidUsageStringError(
            "invalid usage string",
            line=line,
            errors=tuple(parser.errors),
            details=tuple(map(str, parser.errors)),
        )
    return spec


def render_usage(spec, /):
    """
    Render a UsageSpec back into a "# Usage: {cmd} ..." line (declaration order kept).
    """
    tokens = [PREFIX, CMD_TOKEN, *(argument.render() for argument in spec.arguments)]
    if spec.rest is not None:
        tokens.append("[%s]%s" % (spec.rest, REST_SUFFIX))
    return " ".join(tokens)


__all__ = (
    "Positional",
    "Short",
    "Long",
    "ArgSpec",
    "UsageSpec",
    "UsageError",
    "parse_usage",
    "render_usage",
)
