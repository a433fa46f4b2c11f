"""
Process-wide, immutable configuration.

A Config is built once by the front end (or by a test) and passed explicitly
as the first argument of every command operation; nothing reads globals.
"""
import os
import re
from pathlib import Path

from rich.console import Console

from .utils import *

COLORS = ("auto", "always", "never")


def default_cache_directory(name, /, environ=None):
    """
    $XDG_CACHE_HOME/{name}, falling back to ~/.cache/{name}.
    """
    environ = os.environ if environ is None else environ
    if base := environ.get("XDG_CACHE_HOME"):
        return Path(base) / name
    return Path.home() / ".cache" / name


def _console(color, /, *, stderr=False):
    match color:
        case "always":
            return Console(stderr=stderr, force_terminal=True)
        case "never":
            return Console(stderr=stderr, no_color=True, highlight=False)
        case _:
            return Console(stderr=stderr)


class Config:
    """
    Immutable configuration of one sub-based CLI.

    Parameters
    - name: str
      Name of the CLI ("mycli"); used in usage lines, fault prefixes and the
      _{NAME}_... environment variables.
    - root: str | os.PathLike
      Root directory; scripts live under {root}/libexec.
    - cache_directory: Unset | str | os.PathLike
      Defaults to $XDG_CACHE_HOME/{name} or ~/.cache/{name}.
    - color: "auto" | "always" | "never"
    - infer_long_arguments: bool
      Accept unique prefixes of long option names when parsing script arguments.
    - stdout / stderr: Unset | rich.console.Console
      Output consoles; built from `color` when not given.
    """
    name = mirror("name")
    root = mirror("root")
    cache_directory = mirror("cache_directory")
    color = mirror("color")
    infer_long_arguments = mirror("infer_long_arguments")
    stdout = mirror("stdout")
    stderr = mirror("stderr")

    def __init__(
            self,
            name,
            root,
            /,
            *,
            cache_directory=Unset,
            color="auto",
            infer_long_arguments=False,
            stdout=Unset,
            stderr=Unset
    ):
        if not isinstance(name, str):
            raise TypeError("config 'name' must be a string")
        elif not re.fullmatch(r"[A-Za-z0-9][A-Za-z0-9_-]*", name):
            raise ValueError("config 'name' %r is not a valid command name" % name)

        if not isinstance(root, str | os.PathLike):
            raise TypeError("config 'root' must be a path")

        if not isinstance(color, str):
            raise TypeError("config 'color' must be a string")
        elif color not in COLORS:
            raise ValueError("config 'color' must be one of %s" % ", ".join(map(repr, COLORS)))

        for stream in (stdout, stderr):
            if not isinstance(stream, Console | Unset):
                raise TypeError("config consoles must be rich consoles")

        self._name = name
        self._root = Path(root)
        self._cache_directory = Path(coalesce(cache_directory, default_cache_directory(name)))
        self._color = color
        self._infer_long_arguments = bool(infer_long_arguments)
        self._stdout = coalesce(stdout, _console(color))
        self._stderr = coalesce(stderr, _console(color, stderr=True))

    def __repr__(self):
        return "config(name=%r, root=%r, color=%r)" % (self._name, str(self._root), self._color)

    def __setattr__(self, name, value):
        if not name.startswith("_") or hasattr(self, name):
            raise AttributeError("config is immutable")
        super().__setattr__(name, value)

    @property
    def libexec(self):
        return self._root / "libexec"

    def variable(self, suffix, /):
        """
        Environment variable name for this CLI: variable("root") -> "_MYCLI_ROOT".
        """
        return "_%s_%s" % (self._name.upper(), suffix.upper())

    def environment(self, /, **extra):
        """
        Child environment: the current process environment plus _{NAME}_ROOT,
        _{NAME}_CACHE and the given extra suffix=value pairs.
        """
        environment = dict(os.environ)
        environment[self.variable("root")] = str(self._root)
        environment[self.variable("cache")] = str(self._cache_directory)
        for suffix, value in extra.items():
            environment[self.variable(suffix)] = value
        return environment


__all__ = (
    "COLORS",
    "Config",
    "default_cache_directory",
)
