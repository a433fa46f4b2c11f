"""
Front end: the `sub` executable that CLI launchers exec into.

    sub --name NAME (--absolute ROOT | --executable PATH --relative REL)
        [--color WHEN] [--infer-long-arguments] -- [USER ARGS]...

Everything after the first `--` belongs to the user. Inside the user
arguments, --usage, --help/-h, --commands, --completions, --validate and
--extension EXT select a mode and are recognized anywhere before a literal
`--`; every other token is the command path followed by its arguments.
"""
import os
import sys
import warnings
from pathlib import Path

from rich.console import Console
from rich.text import Text

from . import __version__
from .arguments import Cardinal, Flag, Option, Signature
from .commands import completions, echo, help, invoke, name, resolve, subcommands, usage, validate
from .config import COLORS, Config
from .faults import *

MODES = ("invoke", "usage", "help", "commands", "completions", "validate")

SIGNATURE = Signature(
    "sub",
    (
        Flag("--help", exclusive=True, descr="show this help and exit"),
        Flag("--version", exclusive=True, descr="show the version and exit"),
        Option("--name", "NAME", required=True, descr="name of the CLI (used in usage and _{NAME}_... variables)"),
        Option("--absolute", "ROOT", descr="absolute path of the CLI root"),
        Option("--executable", "PATH", descr="path of the launcher, combined with --relative"),
        Option("--relative", "REL", descr="root relative to the launcher directory"),
        Option("--color", "WHEN", descr="auto, always or never (default: auto)"),
        Flag("--infer-long-arguments", descr="accept unique prefixes of long options"),
        Cardinal("args", required=False, greedy=True, descr="arguments of the CLI, after '--'"),
    ),
    summary="Turn a directory of scripts into a command-line interface",
)


def configure(values, /):
    """
    Build the Config from the parsed front end arguments.

    Raises InvalidInvocationError on inconsistent root options or bad values.
    """
    absolute = values.get("absolute")
    executable = values.get("executable")
    relative = values.get("relative")

    if absolute is not None and (executable is not None or relative is not None):
        raise InvalidInvocationError("cannot use --absolute with --executable or --relative")
    if (executable is None) != (relative is None):
        raise InvalidInvocationError("--executable and --relative must be used together")
    if absolute is None and executable is None:
        raise InvalidInvocationError("must provide either --absolute or --executable with --relative")

    if absolute is not None:
        if not os.path.isabs(absolute):
            raise InvalidInvocationError("--absolute path must be absolute", path=absolute)
        root = Path(absolute)
    else:
        root = Path(os.path.abspath(os.path.join(os.path.dirname(os.path.abspath(executable)), relative)))

    if (color := values.get("color", "auto")) not in COLORS:
        raise InvalidInvocationError(
            "invalid color mode %r" % color,
            hint="use one of %s" % ", ".join(COLORS),
        )

    try:
        return Config(values["name"], root, color=color, infer_long_arguments=values.get("infer-long-arguments", False))
    except ValueError as error:
        raise InvalidInvocationError(str(error)) from None


def split(args, /):
    """
    Separate the mode options from the command path and its arguments.

    Returns (mode, extension, tokens). A literal `--` stops mode recognition;
    it stays in the tokens so the command's own parser sees it too.
    """
    mode = "invoke"
    extension = None
    tokens = []
    seen = set()

    args = iter(args)
    for token in args:
        match token:
            case "--":
                tokens.append(token)
                tokens.extend(args)
            case "--usage" | "--commands" | "--completions" | "--validate":
                mode = token[2:]
                seen.add(mode)
            case "--help" | "-h":
                mode = "help"
                seen.add(mode)
            case "--extension":
                if (extension := next(args, None)) is None:
                    raise InvalidInvocationError("--extension requires a value")
            case _ if token.startswith("--extension="):
                extension = token.removeprefix("--extension=")
            case _:
                tokens.append(token)

    if {"help", "usage"} <= seen:
        raise InvalidInvocationError("the argument '--usage' cannot be used with '--help'")

    return mode, extension, tuple(tokens)


def dispatch(config, mode, tokens, /, *, extension=None):
    """
    Resolve `tokens` and run `mode` on the node; returns the exit code.
    """
    if mode not in MODES:
        raise ValueError("unknown mode %r" % mode)

    node = resolve(config, tokens)

    match mode:
        case "invoke":
            return invoke(config, node)
        case "usage":
            echo(config.stdout, usage(config, node))
            return 0
        case "help":
            echo(config.stdout, help(config, node))
            return 0
        case "commands":
            for child in subcommands(config, node):
                if extension and Path(name(config, child)).suffix != "." + extension:
                    continue
                echo(config.stdout, Text(name(config, child)))
            return 0
        case "completions":
            return completions(config, node)
        case "validate":
            problems = validate(config, node)
            for path, fault in problems:
                echo(config.stdout, Text("%s: %s" % (path, "; ".join(fault.options.get("details", ())) or fault.message)))
            return 1 if problems else 0


def main(argv=None, /):
    """
    Entry point; returns the process exit code.
    """
    argv = sys.argv[1:] if argv is None else list(argv)
    console = Console(stderr=True)

    try:
        values = SIGNATURE.parse(argv)
        if values.get("help"):
            echo(Console(), SIGNATURE.help())
            return 0
        if values.get("version"):
            echo(Console(), Text("sub %s" % __version__))
            return 0
        config = configure(values)
    except CommandException as fault:
        trigger(fault, shell=True, deferred=True, prog="sub", console=console)
        return 1

    mode = "invoke"
    with warnings.catch_warnings(record=True) as caught:
        warnings.simplefilter("always", CommandWarning)
        try:
            mode, extension, tokens = split(values.get("args", ()))
            code = dispatch(config, mode, tokens, extension=extension)
        except CommandException as fault:
            trigger(
                fault,
                shell=True,
                deferred=True,
                silent=mode == "completions",
                prog=config.name,
                console=config.stderr,
            )
            code = 1

    for warning in caught:
        if not isinstance(warning.message, CommandWarning):
            warnings.showwarning(warning.message, warning.category, warning.filename, warning.lineno)
        elif mode not in ("completions", "validate"):
            trigger(warning.message, shell=True, prog=config.name, console=config.stderr)

    return code


__all__ = (
    "MODES",
    "SIGNATURE",
    "configure",
    "split",
    "dispatch",
    "main",
)
