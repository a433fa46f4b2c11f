"""
Option annotations ("# Options:" block) and the completion index built from them.

Each raw option line has the shape

    name ("(" completion ")")? ":" description

with optional whitespace around every part, where completion is either the
word "script" (ask the script itself) or a shell command between backquotes.
"""
import re
import warnings
from dataclasses import dataclass
from types import MappingProxyType

from .faults import InvalidOptionStringError, SkippedOptionWarning

IDENT = re.compile(r"[A-Za-z][A-Za-z0-9_-]*")


@dataclass(frozen=True)
class Script:
    """
    completion values are produced by the script itself (run with _{NAME}_COMPLETE=true).
    """


@dataclass(frozen=True)
class LiteralCommand:
    """
    completion values are produced by a shell command.
    """
    command: str


@dataclass(frozen=True)
class OptionSpec:
    name: str
    completion: Script | LiteralCommand | None = None
    description: str | None = None


class _Cursor:
    def __init__(self, line):
        self.line = line
        self.index = 0

    @property
    def char(self):
        return self.line[self.index] if self.index < len(self.line) else ""

    def skip_whitespace(self):
        while self.char and self.char.isspace():
            self.index += 1

    def fail(self, message):
        raise InvalidOptionStringError(
            "invalid option string %r" % self.line,
            line=self.line,
            position=self.index,
            details=("at position %d: %s" % (self.index, message),),
        )

    def found(self):
        return repr(self.char) if self.char else "end of line"


def parse_option(line, /):
    """
    Parse one raw option line into an OptionSpec.

    Raises InvalidOptionStringError (with the failing character position as
    `position`) when the line does not follow the option grammar.
    """
    if not isinstance(line, str):
        raise TypeError("parse_option() argument must be a string")

    cursor = _Cursor(line)
    cursor.skip_whitespace()

    if not (match := IDENT.match(line, cursor.index)):
        cursor.fail("expected an option name, found %s" % cursor.found())
    name = match[0]
    cursor.index = match.end()
    cursor.skip_whitespace()

    completion = None
    if cursor.char == "(":
        cursor.index += 1
        cursor.skip_whitespace()
        if line.startswith("script", cursor.index):
            cursor.index += len("script")
            completion = Script()
        elif cursor.char == "`":
            cursor.index += 1
            if (end := line.find("`", cursor.index)) < 0:
                cursor.index = len(line)
                cursor.fail("expected a closing '`' for the completion command")
            completion = LiteralCommand(line[cursor.index:end].strip())
            cursor.index = end + 1
        else:
            cursor.fail("expected 'script' or a `command` completion, found %s" % cursor.found())
        cursor.skip_whitespace()
        if cursor.char != ")":
            cursor.fail("expected ')' to close the completion, found %s" % cursor.found())
        cursor.index += 1
        cursor.skip_whitespace()

    if cursor.char != ":":
        cursor.fail("expected ':' after the option name, found %s" % cursor.found())

    description = line[cursor.index + 1:].strip()
    return OptionSpec(name, completion, description or None)


def parse_options(lines, /):
    """
    Parse every raw option line, skipping the ones that fail.

    Each skipped line emits a SkippedOptionWarning. Returns (specs, errors)
    where errors holds the InvalidOptionStringError of every skipped line.
    """
    specs = []
    errors = []
    for line in lines:
        try:
            specs.append(parse_option(line))
        except InvalidOptionStringError as error:
            errors.append(error)
            warnings.warn(
                SkippedOptionWarning(
                    "skipped option line %r" % line,
                    line=line,
                    error=error,
                    details=error.details,
                ),
                stacklevel=2,
            )
    return tuple(specs), tuple(errors)


class CompletionIndex:
    """
    Read-only mapping from argument key to its completion hint.

    Built from the option annotations of one script; options without a hint
    are left out, and names that match no usage argument simply never get
    looked up.
    """
    __slots__ = ("_hints",)

    def __init__(self, hints=()):
        self._hints = MappingProxyType(dict(hints))

    @classmethod
    def build(cls, options, /):
        return cls((option.name, option.completion) for option in options if option.completion is not None)

    def get(self, key, default=None, /):
        return self._hints.get(key, default)

    def __getitem__(self, key):
        return self._hints[key]

    def __contains__(self, key):
        return key in self._hints

    def __iter__(self):
        return iter(self._hints)

    def __len__(self):
        return len(self._hints)

    def __eq__(self, other):
        if not isinstance(other, CompletionIndex):
            return NotImplemented
        return self._hints == other._hints

    def __repr__(self):
        return "CompletionIndex(%r)" % dict(self._hints)


__all__ = (
    "Script",
    "LiteralCommand",
    "OptionSpec",
    "parse_option",
    "parse_options",
    "CompletionIndex",
)
