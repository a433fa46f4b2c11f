"""
Built-in commands: help, commands and completions.

They are resolved before any libexec entry, so a script can never shadow
them. `help` and `commands` are listed at the top level; `completions` is
meant for shell completion scripts and stays unlisted.
"""
from rich.text import Text

from . import commands
from .faults import CommandException

NAMES = ("help", "commands", "completions")
LISTED = ("help", "commands")

SUMMARIES = {
    "help": "Display help for a sub command",
    "commands": "List available commands",
    "completions": "List completions for a sub command",
}

DESCRIPTIONS = {
    "help": (
        "A command is considered documented if it starts with a comment block\n"
        "that has a `Summary:' or `Usage:' section. Usage instructions can\n"
        "span multiple lines as long as subsequent lines are indented.\n"
        "The remainder of the comment block is displayed as extended\n"
        "documentation."
    ),
    "commands": "",
    "completions": "",
}

USAGES = {
    "help": "[<command>]...",
    "commands": "[<command>]...",
    "completions": "[<command>] [<args>]...",
}


def build(name, args=(), /):
    """
    Internal node for `name`, bound to the segments that follow it.
    """
    if name not in NAMES:
        raise ValueError("unknown internal command %r" % name)
    return commands.Internal(name, SUMMARIES[name], DESCRIPTIONS[name], tuple(args))


def _help(config, args):
    node = commands.resolve(config, args)
    commands.echo(config.stdout, commands.help(config, node))
    return 0


def _commands(config, args):
    node = commands.resolve(config, args)
    for child in commands.subcommands(config, node):
        commands.echo(config.stdout, Text(commands.name(config, child)))
    return 0


def _completions(config, args):
    # shells call this mid-completion: a bad path prints nothing
    try:
        node = commands.resolve(config, args)
    except CommandException:
        return 1
    return commands.completions(config, node)


def run(config, node, /):
    """
    Run the internal command `node` and return its exit code.
    """
    match node.name:
        case "help":
            return _help(config, node.args)
        case "commands":
            return _commands(config, node.args)
        case "completions":
            return _completions(config, node.args)
    raise ValueError("unknown internal command %r" % node.name)


__all__ = (
    "NAMES",
    "LISTED",
    "build",
    "run",
)
