"""
Command resolution and the operations defined on command nodes.

Nodes
- TopLevel: the CLI itself (no segments).
- Internal: built-in help / commands / completions, bound to the remaining segments.
- Directory: a command group under libexec (optional README for docs).
- File: an executable script, carrying every segment after it as argv.

Every operation takes the Config first and dispatches on the node kind with
`match`; nodes are plain values and nothing is cached across calls.
"""
import difflib
import functools
import os
import warnings
from dataclasses import dataclass
from pathlib import Path

from rich.text import Text

from . import internals
from . import process
from .arguments import Signature
from .docs import extract_docs, read_docs
from .faults import *
from .options import LiteralCommand, Script as ScriptCompletion
from .script import Script


@dataclass(frozen=True)
class TopLevel:
    pass


@dataclass(frozen=True)
class Internal:
    name: str
    summary: str
    description: str
    args: tuple[str, ...] = ()


@dataclass(frozen=True)
class Directory:
    names: tuple[str, ...]
    path: Path


@dataclass(frozen=True)
class File:
    names: tuple[str, ...]
    path: Path
    args: tuple[str, ...] = ()

    @functools.cached_property
    def script(self):
        """
        Annotations of the file, read on first access (per node).
        """
        return Script.load(self.path)


# --- resolution ---

def _unknown(segment, directory):
    options = {"name": segment}
    try:
        entries = [entry for entry in os.listdir(directory) if not entry.startswith(".")]
    except OSError:
        entries = []
    if suggestions := difflib.get_close_matches(segment, entries, 3):
        options |= {"suggestions": tuple(suggestions), "hint": "did you mean %r?" % suggestions[0]}
    return UnknownSubCommandError("no such sub command '%s'" % segment, **options)


def _walk(config, segments):
    """
    resolve filesystem segments (no internal commands) into a Directory or File.
    """
    path = config.libexec
    names = []

    for position, segment in enumerate(segments):
        if not segment or segment.startswith(".") or os.sep in segment:
            raise UnknownSubCommandError("no such sub command '%s'" % segment, name=segment)

        path = path / segment
        names.append(segment)

        if not path.exists():
            raise _unknown(segment, path.parent)

        if path.is_dir():
            if position == len(segments) - 1:
                return Directory(tuple(names), path)
            continue

        if path.stat().st_mode & 0o111 == 0:
            raise NonExecutableError("sub command '%s' is not executable" % segment, name=segment, path=path)

        return File(tuple(names), path, tuple(segments[position + 1:]))


def resolve(config, args, /):
    """
    Walk `args` from the libexec root and return the command node they name.

    - no segments → TopLevel()
    - first segment "help", "commands" or "completions" → Internal (never shadowed)
    - a directory as last segment → Directory
    - a file → File, with every following segment kept as its argv

    Raises NoLibexecDirError, UnknownSubCommandError (missing path, or any
    segment starting with '.') and NonExecutableError.
    """
    if not config.libexec.is_dir():
        raise NoLibexecDirError("no libexec directory at %s" % config.libexec, path=config.libexec)

    args = tuple(args)

    if not args:
        return TopLevel()

    if args[0] in internals.NAMES:
        return internals.build(args[0], args[1:])

    return _walk(config, args)


# --- introspection ---

def names(config, node, /):
    match node:
        case TopLevel():
            return ()
        case Internal(name=name):
            return (name,)
        case Directory(names=names) | File(names=names):
            return names
    raise TypeError("unexpected command node %r" % (node,))


def name(config, node, /):
    match node:
        case TopLevel():
            return config.name
        case Internal(name=name):
            return name
        case Directory(names=names) | File(names=names):
            return names[-1]
    raise TypeError("unexpected command node %r" % (node,))


def prog(config, node, /):
    """
    "{cli} {segments...}" as shown in usage lines.
    """
    return " ".join((config.name, *names(config, node)))


def _docs(config, node):
    match node:
        case TopLevel():
            return read_docs(config.libexec / "README")
        case Directory(path=path):
            return read_docs(path / "README")
        case File(path=path):
            return extract_docs(path)
    raise TypeError("unexpected command node %r" % (node,))


def summary(config, node, /):
    if isinstance(node, Internal):
        return node.summary
    return _docs(config, node).summary or ""


def description(config, node, /):
    if isinstance(node, Internal):
        return node.description
    return _docs(config, node).description or ""


def subcommands(config, node, /):
    """
    Child nodes of a TopLevel or Directory, sorted by name.

    Hidden entries are skipped and entries that fail to resolve are dropped.
    An unreadable directory has no children.
    TopLevel lists the internal help and commands nodes after its entries.
    File and Internal nodes have no children.
    """
    match node:
        case TopLevel():
            parents, directory = (), config.libexec
        case Directory(names=parents, path=directory):
            pass
        case _:
            return []

    try:
        entries = os.listdir(directory)
    except OSError:
        entries = []

    children = []
    for entry in entries:
        if entry.startswith("."):
            continue
        if not parents and entry in internals.NAMES:
            continue
        try:
            children.append(_walk(config, (*parents, entry)))
        except (CommandException, OSError):
            continue

    children.sort(key=lambda child: child.names[-1])

    if isinstance(node, TopLevel):
        children.extend(internals.build(internal, ()) for internal in internals.LISTED)

    return children


# --- rendering ---

def echo(console, renderable, /):
    console.print(renderable, soft_wrap=True)


def _signature(config, node):
    script = node.script
    if script.usage_error is not None:
        raise script.usage_error
    return script.signature(prog(config, node), infer=config.infer_long_arguments)


def usage(config, node, /):
    """
    One-line usage as rich Text.

    Raises the deferred InvalidUsageStringError of a file with a broken usage line.
    """
    match node:
        case TopLevel() | Directory():
            return Signature(prog(config, node), ()).usage().append(" [<subcommands>] [<args>]")
        case Internal(name=name):
            return Signature(prog(config, node), ()).usage().append(" " + internals.USAGES[name])
        case File():
            return _signature(config, node).usage()
    raise TypeError("unexpected command node %r" % (node,))


def _listing(config, node):
    children = subcommands(config, node)
    if not children:
        return []

    labels = [name(config, child) for child in children]
    width = max(map(len, labels)) + 4

    listing = Text("Available subcommands:")
    for label, child in zip(labels, children):
        try:
            text = summary(config, child)
        except (CommandException, OSError):
            text = ""
        listing.append("\n    ")
        if text:
            listing.append(label.ljust(width), "bold #36C5F0").append(text)
        else:
            listing.append(label, "bold #36C5F0")

    footer = "Use '%s help %s' for information on a specific command." % (
        config.name, " ".join((*names(config, node), "<command>"))
    )
    return [listing, Text(footer, "#737373")]


def help(config, node, /):
    """
    Full help as rich Text: usage, summary, description and, for groups, the
    "Available subcommands:" listing followed by a pointer to `{cli} help`.
    """
    if isinstance(node, File):
        return _signature(config, node).help()

    renders = [usage(config, node)]
    if text := summary(config, node):
        renders.append(Text(text, "bold"))
    if text := description(config, node):
        renders.append(Text(text, "italic #A3A3A3"))
    if isinstance(node, TopLevel | Directory):
        renders.extend(_listing(config, node))
    return Text("\n\n").join(renders)


# --- behavior ---

def completions(config, node, /):
    """
    Print completion candidates for `node` and return an exit code.

    - TopLevel / Directory: the child names.
    - Internal: the children of the command path given as its arguments.
    - File with a usage line: the argument being completed (a missing required
      argument, or an option still waiting for its value) is looked up in the
      completion index; a script hint re-runs the file with _{NAME}_COMPLETE=true
      and _{NAME}_COMPLETE_ARG=<key>, a command hint runs through the shell.
    - File with the "# Provide completions" marker and no usage line: the file
      is run with a single --complete argument.
    """
    match node:
        case TopLevel() | Directory():
            for child in subcommands(config, node):
                echo(config.stdout, Text(name(config, child)))
            return 0

        case Internal(args=args):
            try:
                target = resolve(config, args)
            except CommandException:
                return 0
            return completions(config, target) if not isinstance(target, File) else 0

        case File(path=path, args=args):
            script = node.script

            if script.usage is not None:
                try:
                    _signature(config, node).parse(args)
                except (MissingArgumentError, OptionValueRequiredError) as error:
                    key = error.argument.key
                except CommandException:
                    return 0
                else:
                    return 0

                match script.index.get(key):
                    case ScriptCompletion():
                        return process.spawn(path, environment=config.environment(complete="true", complete_arg=key))
                    case LiteralCommand(command=command):
                        return process.shell(command, environment=config.environment())
                return 0

            if script.usage_error is None and script.docs.provides_completions:
                return process.spawn(path, ("--complete",), environment=config.environment())

            return 0

    raise TypeError("unexpected command node %r" % (node,))


def invoke(config, node, /):
    """
    Run `node` and return its exit code.

    - TopLevel / Directory print their help (0).
    - Internal runs the built-in command.
    - File refuses to run with a broken usage line, validates its argv against
      the usage grammar (argument faults propagate, nothing is spawned) and then
      spawns the script with _{NAME}_ROOT, _{NAME}_CACHE and _{NAME}_ARGS set.
    """
    match node:
        case TopLevel() | Directory():
            echo(config.stdout, help(config, node))
            return 0

        case Internal():
            return internals.run(config, node)

        case File(path=path, args=args):
            arguments = ""
            if node.script.has_usage:
                arguments = process.serialize_arguments(_signature(config, node).parse(args))
            return process.spawn(path, args, environment=config.environment(args=arguments))

    raise TypeError("unexpected command node %r" % (node,))


def validate(config, node, /, *, _seen=None):
    """
    Return (path, fault) pairs for every file in the subtree of `node` with a
    broken usage line (InvalidUsageStringError), skipped option lines
    (InvalidOptionStringError) or an unreadable comment block (InvalidUTF8Error,
    SubCommandIoError). Directory cycles are visited once.
    """
    match node:
        case File(path=path):
            with warnings.catch_warnings():
                warnings.simplefilter("ignore", CommandWarning)
                try:
                    script = node.script
                except (InvalidUTF8Error, SubCommandIoError) as error:
                    return [(path, error)]
            problems = []
            if script.usage_error is not None:
                problems.append((path, script.usage_error))
            problems.extend((path, error) for error in script.option_errors)
            return problems

        case TopLevel() | Directory():
            _seen = set() if _seen is None else _seen
            real = os.path.realpath(config.libexec if isinstance(node, TopLevel) else node.path)
            if real in _seen:
                return []
            _seen.add(real)

            problems = []
            for child in subcommands(config, node):
                problems.extend(validate(config, child, _seen=_seen))
            return problems

        case Internal():
            return []

    raise TypeError("unexpected command node %r" % (node,))


__all__ = (
    # Nodes
    "TopLevel",
    "Internal",
    "Directory",
    "File",

    # Resolution
    "resolve",

    # Operations
    "names",
    "name",
    "prog",
    "summary",
    "description",
    "subcommands",
    "usage",
    "help",
    "completions",
    "invoke",
    "validate",
    "echo",
)
