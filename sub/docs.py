"""
Doc extraction from the leading comment block of a script (or a README).

Only the contiguous block of lines starting with '#' at the top of the file is
read; reading stops at the first other line, so script bodies are never
scanned. The block is classified line by line:

    #!/usr/bin/env bash                 ignored (not "# ...")
    # Summary: Greets someone           -> summary
    # Usage: {cmd} <name> [--loud]!     -> usage (indented "#   ..." lines continue it)
    # Options:                          -> options block
    #   name: who to greet              -> raw option line
    #                                   -> back out of the options block
    # Provide completions               -> legacy completion marker
    # Anything else starts the          -> description (kept verbatim, trimmed,
    # description.                         bare "#" lines become empty lines)
"""
import enum
import re
from dataclasses import dataclass

from .faults import InvalidUTF8Error, SubCommandIoError

SUMMARY = re.compile(r"^# Summary: (.*)$")
INDENTED = re.compile(r"^# ( .*)$")
EXTENDED = re.compile(r"^# (.*)$")

USAGE_PREFIX = "# Usage:"
OPTIONS_HEADER = "# Options:"
COMPLETIONS_MARKER = "# Provide completions"


class Mode(enum.Enum):
    OUT = "out"
    USAGE = "usage"
    OPTIONS = "options"
    DESCRIPTION = "description"


@dataclass(frozen=True)
class Docs:
    summary: str | None = None
    usage: str | None = None
    options: tuple[str, ...] = ()
    description: str | None = None
    provides_completions: bool = False


def _unreadable(path, error):
    return SubCommandIoError(
        "cannot read %s: %s" % (path, error.strerror or error),
        path=path,
        cause=error,
    )


def _numbered(file, path):
    lines = enumerate(file, 1)
    while True:
        try:
            yield next(lines)
        except StopIteration:
            return
        except OSError as error:
            raise _unreadable(path, error) from error


def extract_comment_block(path):
    """
    Return the leading '#' lines of `path` (without line terminators).

    The file is read in binary and each comment line is decoded on its own, so
    a binary executable costs one line read. Raises InvalidUTF8Error when a
    comment line is not valid UTF-8 and SubCommandIoError when the file cannot
    be read; FileNotFoundError propagates.
    """
    lines = []
    try:
        file = open(path, "rb")
    except FileNotFoundError:
        raise
    except OSError as error:
        raise _unreadable(path, error) from error

    with file:
        for number, raw in _numbered(file, path):
            if not raw.startswith(b"#"):
                break
            try:
                lines.append(raw.decode("utf-8").rstrip("\r\n"))
            except UnicodeDecodeError as error:
                raise InvalidUTF8Error(
                    "invalid utf-8 in comment block of %s (line %d)" % (path, number),
                    path=path,
                    line=number,
                    cause=error,
                ) from error
    return lines


def parse_docs(lines):
    """
    Classify comment block lines into Docs (see the module docstring).
    """
    summary = None
    usage = None
    options = []
    description = []
    provides_completions = False

    mode = Mode.OUT

    for line in lines:
        if line == COMPLETIONS_MARKER:
            provides_completions = True
            continue

        if mode is Mode.USAGE:
            if line == "#":
                mode = Mode.OUT
                continue
            if match := INDENTED.match(line):
                usage = "%s %s" % (usage, match[1].strip())
                continue
            mode = Mode.OUT

        if mode is Mode.OPTIONS:
            if line == "#":
                mode = Mode.OUT
                continue
            if match := INDENTED.match(line):
                options.append(match[1].strip())
                continue
            mode = Mode.OUT

        if mode is Mode.OUT:
            if line == "#":
                continue

            if match := SUMMARY.match(line):
                summary = match[1].strip()
                continue

            if line.startswith(USAGE_PREFIX):
                usage = line.rstrip()
                mode = Mode.USAGE
                continue

            if line == OPTIONS_HEADER:
                mode = Mode.OPTIONS
                continue

            if match := EXTENDED.match(line):
                description.append(match[1].strip())
                mode = Mode.DESCRIPTION
            continue

        # description
        if line == "#":
            description.append("")
        elif match := EXTENDED.match(line):
            description.append(match[1].strip())

    return Docs(
        summary=summary,
        usage=usage,
        options=tuple(options),
        description="\n".join(description).rstrip("\n") if description else None,
        provides_completions=provides_completions,
    )


def extract_docs(path):
    """
    Read and classify the leading comment block of `path`.

    Raises FileNotFoundError when the file does not exist.
    """
    return parse_docs(extract_comment_block(path))


def read_docs(path):
    """
    Like extract_docs(), but an absent file yields empty Docs (optional READMEs).
    """
    if not path.is_file():
        return Docs()
    return extract_docs(path)


__all__ = (
    "Docs",
    "extract_comment_block",
    "parse_docs",
    "extract_docs",
    "read_docs",
)
