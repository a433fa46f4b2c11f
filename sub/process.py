"""
Subprocess contract of file commands.

- argv: the tokens after the resolved path segments, unmodified.
- environment: the current environment plus _{NAME}_ROOT, _{NAME}_CACHE and,
  for invocations, _{NAME}_ARGS (see serialize_arguments()).
- exit status: a normal exit is the command result; death by signal raises
  SubCommandInterruptedError; failing to start raises SubCommandIoError.
"""
import subprocess

from .faults import InvalidUTF8Error, SubCommandInterruptedError, SubCommandIoError


def _quote(value):
    return '"%s"' % value.replace("\\", "\\\\").replace('"', '\\"')


def serialize_arguments(values, /):
    """
    Render parsed argument values as the _{NAME}_ARGS string.

    `values` maps argument keys to their parsed values in declaration order;
    the result is the space-joined `key "value"` pairs. Flags serialize as
    "true", the rest capture as its tokens joined by one space; '"' and '\\'
    inside values are backslash-escaped.

    >>> serialize_arguments({"name": "Ada", "loud": True})
    'name "Ada" loud "true"'

    Raises InvalidUTF8Error when a value holds bytes that are not UTF-8 (argv
    tokens decoded with surrogateescape).
    """
    pairs = []
    for key, value in values.items():
        match value:
            case True:
                value = "true"
            case tuple() | list():
                value = " ".join(value)
        try:
            value.encode("utf-8")
        except UnicodeEncodeError as error:
            raise InvalidUTF8Error(
                "argument %r is not valid utf-8" % key,
                argument=key,
                cause=error,
            ) from error
        pairs.append("%s %s" % (key, _quote(value)))
    return " ".join(pairs)


def _wait(command, description, /, **options):
    try:
        completed = subprocess.run(command, check=False, **options)
    except KeyboardInterrupt:
        raise SubCommandInterruptedError("%s was interrupted" % description, command=command) from None
    except OSError as error:
        raise SubCommandIoError(
            "cannot run %s: %s" % (description, error.strerror or error),
            command=command,
            cause=error,
        ) from error

    if completed.returncode < 0:
        raise SubCommandInterruptedError(
            "%s was killed by signal %d" % (description, -completed.returncode),
            command=command,
            signal=-completed.returncode,
        )
    return completed.returncode


def spawn(path, args=(), /, *, environment):
    """
    Run the executable at `path` with `args` and wait for it; returns its exit code.
    """
    return _wait([str(path), *args], str(path), env=environment)


def shell(command, /, *, environment):
    """
    Run a shell command line (completion `command` hints) and wait for it.
    """
    return _wait(command, repr(command), env=environment, shell=True)


__all__ = (
    "serialize_arguments",
    "spawn",
    "shell",
)
