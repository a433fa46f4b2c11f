r"""
sub argument declarations and signatures.

Overview
- Specs
  • Cardinal: positional argument (<name>, [name], or a greedy [name]... capture).
  • Option: named, value-bearing long option (--count=COUNT or --count COUNT).
  • Flag: named, presence-only switch (-f, --loud).

- Signature
  • The compiled set of declarations of one script, in declaration order.
  • usage()/help() render rich Text; parse(tokens) turns an argv into an
    ordered mapping key -> value, or raises an argument fault.

Metadata (sanitized on construction)
- name: Cardinal names are plain identifiers; Option/Flag names carry their dashes
  ("-f", "--loud"). Every spec exposes `key`, the name without dashes, which is
  what the "# Options:" block, the completion index and _{NAME}_ARGS use.
- required / exclusive: bools. An exclusive argument must be used alone.
- greedy (Cardinal only): captures every remaining token once it starts.
- metavar (Option only): label of the value in usage/help.
- descr: Unset | str | Text (short help), non-empty when provided.

Quick example:
    >>> from sub.arguments import Cardinal, Flag, Option, Signature
    >>> signature = Signature("mycli greet", (Cardinal("name"), Flag("--loud", exclusive=True)))
    >>> signature.usage().plain
    'Usage: mycli greet <name> [--loud]'
    >>> signature.parse(["Ada"])
    {'name': 'Ada'}

Public API
- Classes: Cardinal, Option, Flag, Signature
"""
import difflib
import functools
import operator
import re
from collections import defaultdict, deque

from rich.text import Text

from .faults import *
from .utils import *

_IDENT = r"[A-Za-z][A-Za-z0-9_-]*"

_styles = defaultdict(str, {
    # === Head sections ===
    "usage-label": "bold #00E6FF",  # CYAN → signature info color
    "program-name": "bold #FF4D94",  # MAGENTA-PINK → brand pop
    "summary-section": "bold",
    "description-section": "italic #A3A3A3",  # Neutral gray

    # === Groups / arguments ===
    "group-label": "bold #FFFFFF",  # Pure white headers
    "argument-description": "#9CA3AF",  # Muted gray

    # === Names / metavars ===
    "cardinal-name": "bold #36C5F0",  # SKY-BLUE for positionals
    "option-name": "bold #00E6FF",  # CYAN for options
    "flag-name": "bold #22C55E",  # GREEN for flags
    "metavar": "bold #FFD600",  # AMBER for parameters
    "greedy-metavar": "bold italic #FFD600",
})


@functools.cache
def _ordinal(number):
    """
    Return a human-friendly ordinal label for a 1-based position.

    - 1..10 are rendered as words ("first"…"tenth").
    - Other numbers use numeric ordinals with correct English suffixes.
    """
    try:
        return {
            1: "first",
            2: "second",
            3: "third",
            4: "fourth",
            5: "fifth",
            6: "sixth",
            7: "seventh",
            8: "eighth",
            9: "ninth",
            10: "tenth",
        }[number]
    except KeyError:
        pass

    # 11th, 12th, 13th (and 111th, 112th, 113th, …)
    if 10 < number % 100 < 20:
        return f"{number}th"

    return f'{number}%s' % {1: "st", 2: "nd", 3: "rd"}.get(number % 10, "th")


class ArgumentType(type):
    """
    Metaclass that turns specs into read-only, introspectable declarations.

    Responsibilities
    - Expose selected fields as read-only properties using mirror() for all
      names listed in __introspectable__.
    - Provide stable, readable __repr__/__rich_repr__ implementations for
      diagnostics.

    Conventions
    - __typename__ is derived from the class name (camel-case split with hyphens)
      and used in messages.
    """
    __introspectable__ = ()

    def __new__(cls, name, bases, namespace, **options):
        self = super().__new__(
            cls,
            name,
            bases,
            namespace | {
                "__typename__": re.sub(r"(?<!^)(?=[A-Z])", r"-", name).lower(),
            } | {
                name: mirror(name) for name in namespace.get("__introspectable__", ())
            },
        )

        @rename("__repr__")
        def __repr__(self):
            """
            Return a concise, stable representation with key metadata.

            Example
            - flag(name='--loud', required=False, exclusive=True, descr=None)
            """
            return f"{type(self).__typename__}({', '.join(map(functools.partial(operator.mod, '%s=%r'), self.__rich_repr__()))})"
        self.__repr__ = __repr__

        @rename("__rich_repr__")
        def __rich_repr__(self):
            """
            Yield (name, object) pairs for pretty printers.
            """
            for name in type(self).__introspectable__:
                yield name, getattr(self, name)
        self.__rich_repr__ = __rich_repr__

        return self


def _sanitize_metadata(cls, metadata, /):
    """
    Internal: normalize and validate the metadata shared by every spec.

    - descr: Unset | str | Text; strings are trimmed and must be non-empty.
      Unset becomes None.
    - required / exclusive: coerced to bool. A required argument cannot be
      exclusive (an exclusive argument is only ever given alone).
    """
    if not isinstance(descr := metadata["descr"], str | Text | Unset):
        raise TypeError(f"{cls.__typename__} 'descr' must be a string")
    elif isinstance(descr, str) and not (descr := descr.strip()):
        raise ValueError(f"{cls.__typename__} 'descr' cannot be empty")
    metadata["descr"] = coalesce(descr)

    metadata["required"] = bool(metadata["required"])
    metadata["exclusive"] = bool(metadata["exclusive"])

    if metadata["required"] and metadata["exclusive"]:
        raise ValueError(f"required {cls.__typename__} cannot be exclusive")


def _sanitize_name(cls, name, pattern, /):
    if not isinstance(name, str):
        raise TypeError(f"{cls.__typename__} name must be a string")
    elif not (name := name.strip()):
        raise ValueError(f"{cls.__typename__} name cannot be an empty-string")
    elif not re.fullmatch(pattern, name):
        raise ValueError(f"{cls.__typename__} name {name!r} is not valid")
    return name


class Cardinal(metaclass=ArgumentType):
    """
    Positional argument specification.

    Highlights
    - required (default) renders as <name>, optional as [name].
    - greedy captures every remaining token once it has started and renders
      as [name]... (or <name>... when required); it must be the last cardinal.
    """

    __introspectable__ = (
        "name",
        "required",
        "exclusive",
        "greedy",
        "descr",
    )

    def __init__(self, name, /, *, required=True, exclusive=False, greedy=False, descr=Unset):
        metadata = {
            "name": _sanitize_name(type(self), name, _IDENT),
            "required": required,
            "exclusive": exclusive,
            "greedy": bool(greedy),
            "descr": descr,
        }
        _sanitize_metadata(type(self), metadata)

        if metadata["greedy"] and metadata["exclusive"]:
            raise ValueError(f"greedy {type(self).__typename__} cannot be exclusive")

        for name, object in metadata.items():
            setattr(self, "_" + name, object)

    @property
    def key(self):
        return self._name


class Option(metaclass=ArgumentType):
    """
    Named, value-bearing option specification (long form only).

    The value is given inline (--count=3) or as the next token (--count 3).
    """

    __introspectable__ = (
        "name",
        "metavar",
        "required",
        "exclusive",
        "descr",
    )

    def __init__(self, name, metavar, /, *, required=False, exclusive=False, descr=Unset):
        metadata = {
            "name": _sanitize_name(type(self), name, "--" + _IDENT),
            "metavar": metavar,
            "required": required,
            "exclusive": exclusive,
            "descr": descr,
        }
        _sanitize_metadata(type(self), metadata)

        if not isinstance(metavar, str):
            raise TypeError(f"{type(self).__typename__} 'metavar' must be a string")
        elif not (metavar := metavar.strip()) or any(char.isspace() for char in metavar):
            raise ValueError(f"{type(self).__typename__} 'metavar' must be a non-empty word")
        metadata["metavar"] = metavar

        for name, object in metadata.items():
            setattr(self, "_" + name, object)

    @property
    def key(self):
        return self._name[2:]


class Flag(metaclass=ArgumentType):
    """
    Named, presence-only switch specification: "-x" (short) or "--name" (long).
    """

    __introspectable__ = (
        "name",
        "required",
        "exclusive",
        "descr",
    )

    def __init__(self, name, /, *, required=False, exclusive=False, descr=Unset):
        metadata = {
            "name": _sanitize_name(type(self), name, r"-[^\W\d_]|--" + _IDENT),
            "required": required,
            "exclusive": exclusive,
            "descr": descr,
        }
        _sanitize_metadata(type(self), metadata)

        for name, object in metadata.items():
            setattr(self, "_" + name, object)

    @property
    def key(self):
        return self._name.lstrip("-")


def _text(fragment, style=""):
    if isinstance(fragment, Text):
        return fragment.copy()
    return Text(str(fragment), _styles[style])


def _label(argument):
    """
    Bare label of an argument, as shown in the help columns (<name>, --count=COUNT, -f).
    """
    match argument:
        case Cardinal(greedy=True):
            return Text.assemble("<", _text(argument.name, "greedy-metavar"), ">...")
        case Cardinal():
            return Text.assemble("<", _text(argument.name, "cardinal-name"), ">")
        case Option():
            return Text.assemble(_text(argument.name, "option-name"), "=", _text(argument.metavar, "metavar"))
        case Flag():
            return _text(argument.name, "flag-name")
    raise TypeError("unexpected argument %r" % (argument,))


def _token(argument):
    """
    Usage token of an argument: <x>, [x], [x]..., -f, [-f], --long, [--long=VALUE].
    """
    match argument:
        case Cardinal(greedy=True, required=True):
            return Text.assemble("<", _text(argument.name, "greedy-metavar"), ">...")
        case Cardinal(greedy=True):
            return Text.assemble("[", _text(argument.name, "greedy-metavar"), "]...")
        case Cardinal(required=True):
            return Text.assemble("<", _text(argument.name, "cardinal-name"), ">")
        case Cardinal():
            return Text.assemble("[", _text(argument.name, "cardinal-name"), "]")
        case Option() | Flag() if argument.required:
            return _label(argument)
        case Option() | Flag():
            return Text.assemble("[", _label(argument), "]")
    raise TypeError("unexpected argument %r" % (argument,))


class Signature:
    """
    The compiled declarations of one command, in declaration order.

    Parameters
    - prog: str
      Full command line prefix shown in usage (e.g., "mycli greet").
    - arguments: Iterable[Cardinal | Option | Flag]
      Keys must be unique; at most one greedy cardinal, and it must come last
      among the cardinals.
    - summary / description: Unset | str
      Shown by help().
    - infer: bool
      Accept unique prefixes of long names (--lo for --loud).
    """
    prog = mirror("prog")
    arguments = mirror("arguments")
    summary = mirror("summary")
    description = mirror("description")
    infer = mirror("infer")
    cardinals = mirror("cardinals")
    switches = mirror("switches")

    def __init__(self, prog, arguments, /, *, summary=Unset, description=Unset, infer=False):
        if not isinstance(prog, str):
            raise TypeError("signature 'prog' must be a string")
        elif not (prog := prog.strip()):
            raise ValueError("signature 'prog' cannot be empty")

        self._prog = prog
        self._arguments = []
        self._cardinals = []
        self._switches = {}
        self._summary = coalesce(summary) or None
        self._description = coalesce(description) or None
        self._infer = bool(infer)

        keys = set()
        for argument in arguments:
            if not isinstance(argument, Cardinal | Option | Flag):
                raise TypeError("signature arguments must be cardinals, options or flags")
            if argument.key in keys:
                raise ValueError("signature arguments cannot contain duplicates (%r)" % argument.key)
            if self._cardinals and self._cardinals[-1].greedy and isinstance(argument, Cardinal):
                raise ValueError("greedy cardinal %r must be the last cardinal" % self._cardinals[-1].name)
            keys.add(argument.key)

            self._arguments.append(argument)
            if isinstance(argument, Cardinal):
                self._cardinals.append(argument)
            else:
                self._switches[argument.name] = argument

    def __repr__(self):
        return "signature(prog=%r, arguments=%r)" % (self._prog, tuple(self._arguments))

    # --- rendering ---

    def usage(self):
        """
        Return the "Usage: {prog} ..." line as rich Text.
        """
        usage = Text()
        usage.append("Usage", _styles["usage-label"]).append(":")
        usage.append(" ")
        usage.append(self._prog, _styles["program-name"])
        for argument in self._arguments:
            usage.append(" ").append(_token(argument))
        return usage

    def help(self):
        """
        Return the full help as rich Text.

        Layout
        - usage line
        - summary
        - "Arguments:" then "Options:" sections; the label column is as wide as
          the longest label plus four spaces, descriptions follow on the same line.
        - description
        Sections are separated by one empty line; empty sections are left out.
        """
        renders = [self.usage()]

        if self._summary:
            renders.append(_text(self._summary, "summary-section"))

        labels = {argument: _label(argument) for argument in self._arguments}
        width = max(map(len, labels.values()), default=0) + 4

        for title, group in (
            ("Arguments", self._cardinals),
            ("Options", [argument for argument in self._arguments if not isinstance(argument, Cardinal)]),
        ):
            if not group:
                continue
            section = Text()
            section.append(title, _styles["group-label"]).append(":")
            for argument in group:
                section.append("\n").append("    ").append(labels[argument])
                if argument.descr:
                    section.append(" " * (width - len(labels[argument])))
                    section.append(_text(argument.descr, "argument-description"))
            renders.append(section)

        if self._description:
            renders.append(_text(self._description, "description-section"))

        return Text("\n\n").join(renders)

    # --- parsing ---

    def _lookup(self, name, index):
        """
        resolve a long switch name (without dashes) to its declaration.
        """
        if (argument := self._switches.get("--" + name)) is not None:
            return argument

        candidates = []
        if self._infer and name:
            candidates = sorted(key for key in self._switches if key.startswith("--" + name))

        if len(candidates) == 1:
            return self._switches[candidates[0]]

        if len(candidates) > 1:
            raise AmbiguousSwitchError(
                "ambiguous option or flag %r at %s position" % ("--" + name, _ordinal(index)),
                input="--" + name,
                index=index,
                candidates=tuple(candidates),
                hint="did you mean one of %s?" % ", ".join(map(repr, candidates)),
            )

        suggestions = difflib.get_close_matches("--" + name, self._switches.keys(), 5)
        try:
            hint = "did you mean %r? you can also run '%s --help' to see all options" % (suggestions[0], self._prog)
        except IndexError:
            hint = "run '%s --help' to see all available options" % self._prog

        raise UnknownSwitchError(
            "unknown option or flag %r at %s position" % ("--" + name, _ordinal(index)),
            input="--" + name,
            index=index,
            suggestions=tuple(suggestions),
            hint=hint,
        )

    def _record(self, namespace, argument, input, index, value):
        if argument.key in namespace:
            type = "option" if isinstance(argument, Option) else "flag"
            raise DuplicatedSwitchError(
                "%s %r at %s position was already provided" % (type, input, _ordinal(index)),
                input=input,
                index=index,
                argument=argument,
                hint="keep a single %s; each %s can be specified only once" % (type, type),
            )
        namespace[argument.key] = value

    def parse(self, tokens):
        """
        parse argv-like tokens against the declarations.

        returns
        - dict key -> value in declaration order, holding only the arguments
          present: str for cardinals and options, tuple[str, ...] for the greedy
          cardinal, True for flags.

        raises (first problem wins)
        - UnknownSwitchError, AmbiguousSwitchError, DuplicatedSwitchError,
          FlagAssignmentError, OptionValueRequiredError, UnexpectedCardinalError
          while walking the tokens;
        - ExclusiveArgumentError when an exclusive argument is not alone;
        - MissingArgumentError for the first absent required argument (skipped
          when an exclusive argument is present).
        argument faults carry the declaration as `argument`.
        """
        namespace = {}
        tokens = deque(tokens)
        cardinals = deque(self._cardinals)
        terminated = False
        capturing = False
        index = 0

        while tokens:
            token = tokens.popleft()
            index += 1

            if capturing:  # greedy cardinal takes everything once started
                namespace[cardinals[0].key].append(token)
                continue

            if not terminated and token == "--":
                terminated = True
                continue

            if not terminated and token.startswith("--"):
                name, separator, value = token[2:].partition("=")
                argument = self._lookup(name, index)
                input = argument.name

                if isinstance(argument, Flag):
                    if separator:
                        raise FlagAssignmentError(
                            "flag %r at %s position cannot have an inline value" % (input, _ordinal(index)),
                            input=input,
                            index=index,
                            argument=argument,
                            hint="remove everything from '=' (for example: %s)" % input,
                        )
                    self._record(namespace, argument, input, index, True)
                    continue

                start = index
                if not separator:
                    if not tokens or (tokens[0].startswith("-") and tokens[0] != "-"):
                        raise OptionValueRequiredError(
                            "option %r at %s position requires a value" % (input, _ordinal(start)),
                            input=input,
                            index=start,
                            argument=argument,
                            hint="pass it inline (%s=%s) or as the next argument" % (input, argument.metavar),
                        )
                    value = tokens.popleft()
                    index += 1
                elif not value:
                    raise OptionValueRequiredError(
                        "empty inline value for option %r at %s position" % (input, _ordinal(start)),
                        input=input,
                        index=start,
                        argument=argument,
                        hint="add a value after '=' (for example: %s=%s)" % (input, argument.metavar),
                    )
                self._record(namespace, argument, input, start, value)
                continue

            if not terminated and token.startswith("-") and token != "-":
                cluster, separator, _ = token[1:].partition("=")
                for position, char in enumerate(cluster):
                    input = "-" + char
                    if (argument := self._switches.get(input)) is None:
                        raise UnknownSwitchError(
                            "unknown option or flag %r at %s position" % (input, _ordinal(index)),
                            input=input,
                            index=index,
                            hint="run '%s --help' to see all available options" % self._prog,
                        )
                    if separator and position == len(cluster) - 1:
                        raise FlagAssignmentError(
                            "flag %r at %s position cannot have an inline value" % (input, _ordinal(index)),
                            input=input,
                            index=index,
                            argument=argument,
                            hint="remove everything from '=' (for example: %s)" % input,
                        )
                    self._record(namespace, argument, input, index, True)
                continue

            if not cardinals:
                raise UnexpectedCardinalError(
                    "unexpected positional argument %r from %s position" % (token, _ordinal(index)),
                    input=token,
                    index=index,
                    hint="remove this extra value or run '%s --help' to see the expected usage" % self._prog,
                )

            if cardinals[0].greedy:
                namespace[cardinals[0].key] = [token]
                capturing = True
            else:
                namespace[cardinals.popleft().key] = token

        present = [argument for argument in self._arguments if argument.key in namespace]
        exclusives = [argument for argument in present if argument.exclusive]

        if exclusives and len(present) > 1:
            argument = exclusives[0]
            raise ExclusiveArgumentError(
                "argument %r must be used alone" % _label(argument).plain,
                argument=argument,
                others=tuple(other for other in present if other is not argument),
                hint="remove the other arguments or run '%s %s' by itself" % (self._prog, _label(argument).plain),
            )

        if not exclusives:
            for argument in self._arguments:
                if argument.required and argument.key not in namespace:
                    raise MissingArgumentError(
                        "missing required argument %r" % _label(argument).plain,
                        argument=argument,
                        hint="run '%s --help' to see the expected usage" % self._prog,
                    )

        return {
            argument.key: tuple(namespace[argument.key]) if isinstance(namespace[argument.key], list) else namespace[argument.key]
            for argument in present
        }


__all__ = (
    # Classes (specifications)
    "Cardinal",
    "Option",
    "Flag",

    # Compiled declarations
    "Signature",
)
