"""
sub faults (errors and warnings) and rendering.

Scope
- FaultCode: canonical, stable numeric identifiers for every user-facing issue
  (errors and warnings). Codes are grouped by domain to keep copy consistent
  and make logs/searches predictable.
- CommandException / CommandWarning: base types that carry message + options and
  know how to render themselves as “{cli}: {message}” lines through rich.
- trigger(): central entry point to surface any fault (raise it, or print it in shell mode).

Rendering contract
- first line: “{prog}: {message}” (prog defaults to "sub").
- then one indented line per detail (e.g. usage parse errors with their positions).
- then an optional hint line (“ → ...”).
- quiet faults (non-executable, interrupted) render nothing: the exit code speaks for them.

Integration
- Library code raises faults (or warns with CommandWarning subclasses).
- The front end catches them and calls trigger(fault, shell=True, console=..., prog=...).
"""
import sys
import warnings
from collections import defaultdict
from enum import IntEnum
from types import MappingProxyType

from rich.console import Console, Group
from rich.text import Text

from .utils import Unset


class FaultCode(IntEnum):
    """
    canonical fault codes used across the engine (stable identifiers).

    grouping (by high-level domain)
    - routing (111xx)
      • UNKNOWN_SUBCOMMAND, NON_EXECUTABLE, NO_LIBEXEC_DIR
    - annotations (112xx)
      • INVALID_USAGE_STRING, INVALID_OPTION_STRING, INVALID_UTF8
    - subprocesses and completion (113xx)
      • SUBCOMMAND_INTERRUPTED, SUBCOMMAND_IO_ERROR, NO_COMPLETIONS
    - arguments (114xx)
      • UNKNOWN_SWITCH, AMBIGUOUS_SWITCH, DUPLICATED_SWITCH, FLAG_ASSIGNMENT,
        OPTION_VALUE_REQUIRED, UNEXPECTED_CARDINAL, EXCLUSIVE_ARGUMENT, MISSING_ARGUMENT
    - front end (115xx)
      • INVALID_INVOCATION
    - warnings (12xxx)
      • SKIPPED_OPTION

    spacing leaves room for future additions without reshuffling existing codes.
    """
    # --- routing errors (111xx) ---
    UNKNOWN_SUBCOMMAND          = 11101
    NON_EXECUTABLE              = 11102
    NO_LIBEXEC_DIR              = 11103

    # --- annotation errors (112xx) ---
    INVALID_USAGE_STRING        = 11201
    INVALID_OPTION_STRING       = 11202
    INVALID_UTF8                = 11203

    # --- subprocess / completion errors (113xx) ---
    SUBCOMMAND_INTERRUPTED      = 11301
    SUBCOMMAND_IO_ERROR         = 11302
    NO_COMPLETIONS              = 11303

    # --- argument errors (114xx) ---
    UNKNOWN_SWITCH              = 11401
    AMBIGUOUS_SWITCH            = 11402
    DUPLICATED_SWITCH           = 11403
    FLAG_ASSIGNMENT             = 11404
    OPTION_VALUE_REQUIRED       = 11405
    UNEXPECTED_CARDINAL         = 11406
    EXCLUSIVE_ARGUMENT          = 11407
    MISSING_ARGUMENT            = 11408

    # --- front end errors (115xx) ---
    INVALID_INVOCATION          = 11501

    # --- warnings (12xxx) ---
    SKIPPED_OPTION              = 12201


def _render(fault, styles):
    """
    shared renderer for exceptions and warnings (see module docstring for the layout).
    """
    styles = defaultdict(str, styles | fault.options.get("styles", {}))
    colorful = fault.options.get("colorful", True)

    def text(fragment, style=""):
        if not fragment:
            return Text("")
        if isinstance(fragment, Text):
            return fragment if colorful else Text(fragment.plain)
        return Text(str(fragment), styles[style] if colorful else "")

    if fault.quiet:
        return Group()

    renders = [Text.assemble(text(fault.options.get("prog", "sub"), "prog-name"), ": ", text(fault.message, "message"))]

    for detail in fault.options.get("details", ()):
        renders.append(Text.assemble("  ", text(detail, "detail")))

    if hint := fault.options.get("hint"):
        renders.append(Text.assemble(text(" → ", "hint-arrow"), text(hint, "hint")))

    return Group(*renders)


class CommandException(Exception):
    """
    base class of every engine error.

    - message: one lowercase sentence, shown after “{prog}: ”.
    - options: read-only mapping of structured context (name, path, argument,
      errors, cause, ...) plus rendering knobs (prog, console, shell, silent,
      deferred, colorful, details, hint, styles). every option is also
      readable as an attribute (fault.name, fault.argument, ...).
    - code: FaultCode of the concrete class.
    - quiet: when True the fault renders nothing (the exit code is the message).
    """
    code = Unset
    quiet = False

    def __init__(self, message="", /, **options):
        assert isinstance(message, str)
        super().__init__(message)
        self.message = message
        self.options = MappingProxyType(options)

    def __getattr__(self, name):
        if name == "options" or name.startswith("__"):
            raise AttributeError(name)
        try:
            return self.options[name]
        except KeyError:
            raise AttributeError("%r fault has no option %r" % (type(self).__name__, name)) from None

    def __str__(self):
        return "; ".join((self.message, *self.options.get("details", ())))

    def __rich__(self):
        return _render(self, {
            "prog-name": "bold #E6E6F0",  # near-white program name
            "message": "#FF4DA6",  # friendly pinky message
            "detail": "#C8C8D0",  # soft light gray details
            "hint-arrow": "#9CE19C dim",  # gentle green arrow
            "hint": "italic #9CE19C",  # gentle green hint text
        })

    def __trigger__(self):
        if not self.options.get("shell", False):
            raise self
        if not self.quiet and not self.options.get("silent", False):
            self.options.get("console", Console(stderr=True)).print(self)
        if self.options.get("deferred", False):
            return
        sys.exit(1)

    def __replace__(self, *unused, **overrides):
        assert not unused, "unused arguments are not allowed"
        return type(self)(self.message, **{**self.options, **overrides})


# --- routing ---
class UnknownSubCommandError(CommandException):
    code = FaultCode.UNKNOWN_SUBCOMMAND
class NonExecutableError(CommandException):
    code = FaultCode.NON_EXECUTABLE
    quiet = True
class NoLibexecDirError(CommandException):
    code = FaultCode.NO_LIBEXEC_DIR

# --- annotations ---
class InvalidUsageStringError(CommandException):
    code = FaultCode.INVALID_USAGE_STRING
class InvalidOptionStringError(CommandException):
    code = FaultCode.INVALID_OPTION_STRING
class InvalidUTF8Error(CommandException):
    code = FaultCode.INVALID_UTF8

# --- subprocesses / completion ---
class SubCommandInterruptedError(CommandException):
    code = FaultCode.SUBCOMMAND_INTERRUPTED
    quiet = True
class SubCommandIoError(CommandException):
    code = FaultCode.SUBCOMMAND_IO_ERROR
class NoCompletionsError(CommandException):
    code = FaultCode.NO_COMPLETIONS

# --- arguments ---
class UnknownSwitchError(CommandException):
    code = FaultCode.UNKNOWN_SWITCH
class AmbiguousSwitchError(CommandException):
    code = FaultCode.AMBIGUOUS_SWITCH
class DuplicatedSwitchError(CommandException):
    code = FaultCode.DUPLICATED_SWITCH
class FlagAssignmentError(CommandException):
    code = FaultCode.FLAG_ASSIGNMENT
class OptionValueRequiredError(CommandException):
    code = FaultCode.OPTION_VALUE_REQUIRED
class UnexpectedCardinalError(CommandException):
    code = FaultCode.UNEXPECTED_CARDINAL
class ExclusiveArgumentError(CommandException):
    code = FaultCode.EXCLUSIVE_ARGUMENT
class MissingArgumentError(CommandException):
    code = FaultCode.MISSING_ARGUMENT

# --- front end ---
class InvalidInvocationError(CommandException):
    code = FaultCode.INVALID_INVOCATION


class CommandWarning(Warning):
    """
    base class of every engine warning (non-fatal, never changes the exit code).

    library code emits warnings with warnings.warn(...); the front end records
    them (warnings.catch_warnings) and prints them through trigger(..., shell=True).
    """
    code = Unset
    quiet = False

    def __init__(self, message="", /, **options):
        assert isinstance(message, str)
        super().__init__(message)
        self.message = message
        self.options = MappingProxyType(options)

    def __getattr__(self, name):
        if name == "options" or name.startswith("__"):
            raise AttributeError(name)
        try:
            return self.options[name]
        except KeyError:
            raise AttributeError("%r warning has no option %r" % (type(self).__name__, name)) from None

    def __rich__(self):
        return _render(self, {
            "prog-name": "bold #E6E6F0",  # near-white program name
            "message": "#FFB400",  # amber message for warnings
            "detail": "#D6D6DE",  # slightly lighter gray details
            "hint-arrow": "#B8EFAF dim",  # softer green arrow
            "hint": "italic #B8EFAF",  # softer green hint text
        })

    def __trigger__(self):
        if not self.options.get("shell", False):
            return warnings.warn(self, stacklevel=3)
        if not self.options.get("silent", False):
            self.options.get("console", Console(stderr=True)).print(self)

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        return type(self)(self.message, **{**self.options, **overrides})


class SkippedOptionWarning(CommandWarning):
    code = FaultCode.SKIPPED_OPTION


def trigger(fault, /, **options):
    """
    surface a fault with the given runtime options.

    contract
    - fault must provide __trigger__ and __replace__ methods (see base classes).
    - options are merged into the fault via __replace__(**options) before triggering.
    - in shell mode, rendering happens on options["console"]; otherwise exceptions
      are raised and warnings are emitted through the warnings module.

    typical options
    - prog, console, shell, silent, deferred, colorful, hint, details.
    """
    if (
        not hasattr(fault, "__trigger__") or
        not callable(fault.__trigger__) or
        not hasattr(fault, "__replace__") or
        not callable(fault.__replace__)
    ):
        raise TypeError("trigger() argument must have a __trigger__ and __replace__ methods")
    return fault.__replace__(**options).__trigger__()


__all__ = (
    "FaultCode",
    "CommandException",
    "UnknownSubCommandError",
    "NonExecutableError",
    "NoLibexecDirError",
    "InvalidUsageStringError",
    "InvalidOptionStringError",
    "InvalidUTF8Error",
    "SubCommandInterruptedError",
    "SubCommandIoError",
    "NoCompletionsError",
    "UnknownSwitchError",
    "AmbiguousSwitchError",
    "DuplicatedSwitchError",
    "FlagAssignmentError",
    "OptionValueRequiredError",
    "UnexpectedCardinalError",
    "ExclusiveArgumentError",
    "MissingArgumentError",
    "InvalidInvocationError",
    "CommandWarning",
    "SkippedOptionWarning",
    "trigger",
)
