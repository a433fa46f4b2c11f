"""
Per-file aggregate: docs, parsed usage (or its deferred error), options and
completion index of one script, plus the compiled argument signature.
"""
from dataclasses import dataclass, field
from pathlib import Path

from .arguments import Cardinal, Flag, Option, Signature
from .docs import Docs, extract_docs
from .faults import InvalidUsageStringError
from .options import CompletionIndex, OptionSpec, parse_options
from .usage import Long, Positional, Short, UsageSpec, parse_usage
from .utils import Unset


@dataclass(frozen=True)
class Script:
    path: Path
    docs: Docs = field(default_factory=Docs)
    usage: UsageSpec | None = None
    usage_error: InvalidUsageStringError | None = None
    options: tuple[OptionSpec, ...] = ()
    option_errors: tuple = ()
    index: CompletionIndex = field(default_factory=CompletionIndex)

    @classmethod
    def load(cls, path, /):
        """
        Read the leading comment block of `path` and parse its annotations.

        Annotation problems never raise here: a bad usage line is kept in
        `usage_error` and bad option lines in `option_errors` (each also emits a
        SkippedOptionWarning). Reading problems do raise (InvalidUTF8Error,
        SubCommandIoError, FileNotFoundError).
        """
        path = Path(path)
        docs = extract_docs(path)

        usage = None
        usage_error = None
        if docs.usage is not None:
            try:
                usage = parse_usage(docs.usage)
            except InvalidUsageStringError as error:
                usage_error = type(error)("invalid usage string in %s" % path, **{**error.options, "path": path})

        options, option_errors = parse_options(docs.options)

        return cls(
            path=path,
            docs=docs,
            usage=usage,
            usage_error=usage_error,
            options=options,
            option_errors=tuple(error.__replace__(path=path) for error in option_errors),
            index=CompletionIndex.build(options),
        )

    @property
    def has_usage(self):
        return self.docs.usage is not None

    def signature(self, prog, /, *, infer=False):
        """
        Compile the usage grammar into a Signature for `prog` ("{cli} {names...}").

        Descriptions come from the "# Options:" block, keyed like the usage
        arguments (positional name, short letter, long name). A script without
        a usage line (or with a broken one) compiles to an argument-less
        signature that still carries its summary and description.
        """
        descriptions = {option.name: option.description for option in self.options if option.description}
        arguments = []

        if self.usage is not None:
            for spec in self.usage.arguments:
                metadata = {
                    "required": spec.required,
                    "exclusive": spec.exclusive,
                    "descr": descriptions.get(spec.key, Unset),
                }
                match spec.base:
                    case Positional(name=name):
                        arguments.append(Cardinal(name, **metadata))
                    case Short(char=char):
                        arguments.append(Flag("-" + char, **metadata))
                    case Long(name=name, value=None):
                        arguments.append(Flag("--" + name, **metadata))
                    case Long(name=name, value=value):
                        arguments.append(Option("--" + name, value, **metadata))

            if (rest := self.usage.rest) is not None:
                arguments.append(Cardinal(rest, required=False, greedy=True, descr=descriptions.get(rest, Unset)))

        return Signature(
            prog,
            arguments,
            summary=self.docs.summary or Unset,
            description=self.docs.description or Unset,
            infer=infer,
        )


__all__ = (
    "Script",
)
