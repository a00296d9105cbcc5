"""
Pennant faults (errors) and rendering.

Scope
- FaultCode: canonical, stable numeric identifiers for every failure the library
  can surface. Codes are grouped by tier so logs and searches stay predictable.
- FlagsError: base type carrying a message plus options (field, tag, flag, hint...)
  that knows how to render itself through rich.
- report(): print any fault to a console (stderr unless another sink is given).

Tiers
- Declaration faults (21xxx) describe defects in the calling program's dataclass:
  not a struct, unsupported field type, malformed tag, duplicated flag name,
  a flag set without a usable var() method. They are raised by the default
  entry points and returned by check().
- Parse faults (22xxx) describe bad user input on the command line: an unknown
  flag, a malformed value, a flag missing its argument. They are raised by
  FlagSet.parse() and the parse entry points, and are meant to be caught.

Integration
- The host application may publish __codes__ (FaultCode -> label), __styles__
  (palette overrides) and __prog__ (program name) in __main__.
"""
from collections import defaultdict
from enum import IntEnum
from types import MappingProxyType

from rich.console import Console, Group
from rich.text import Text

from .utils import *


class FaultCode(IntEnum):
    """
    canonical fault codes (stable identifiers).

    grouping
    - declarations (211xx)
      • NOT_A_STRUCT, INVALID_TYPE, MALFORMED_TAG, DUPLICATED_FLAG, MISSING_VAR
    - command line (221xx)
      • UNDEFINED_FLAG, INVALID_VALUE, MISSING_VALUE

    normalize() allows host remapping to custom labels while keeping code-stability.
    """
    # --- declaration errors (21xxx) ---
    NOT_A_STRUCT    = 21101
    INVALID_TYPE    = 21102
    MALFORMED_TAG   = 21111
    DUPLICATED_FLAG = 21112
    MISSING_VAR     = 21121

    # --- command line errors (22xxx) ---
    UNDEFINED_FLAG  = 22101
    INVALID_VALUE   = 22102
    MISSING_VALUE   = 22103

    def normalize(self):
        """
        return a host-normalized string for this code.

        the host application can provide a __codes__ mapping in __main__
        to override numeric ids with friendlier labels.
        """
        return str(host("__codes__", {}).get(self, self.value))


class FlagsError(Exception):
    """
    base of every pennant fault.

    str(error) is the bare message (stable, suitable for tests and logs);
    the options mapping carries the context used when rendering (field, tag,
    flag, hint, colorful).
    """
    code = FaultCode.MALFORMED_TAG
    title = "error"
    hint = ""

    def __init__(self, message, /, **options):
        assert isinstance(message, str)
        super().__init__(message)
        self.message = message
        self.options = MappingProxyType(options)

    def __str__(self):
        return self.message

    def __rich__(self):
        styles = defaultdict(str, {
            # header parts
            "prog-name": "bold #E6E6F0",  # near-white program name
            "code": "bold #00E5FF",  # neon cyan fault code
            "error-title": "bold #FF4DA6",  # friendly pinky title

            # body
            "error-message": "#C8C8D0",  # soft light gray message
            "hint-arrow": "#9CE19C dim",  # gentle green arrow
            "hint": "italic #9CE19C",  # gentle green hint text
        } | host("__styles__", {}))

        colorful = self.options.get("colorful", False)

        def text(fragment, style=""):
            if not fragment:
                return Text("")
            return Text(str(fragment), styles[style] if colorful else "")

        header = Text.assemble(
            "[ ",
            text(self.options.get("prog") or program() or "pennant", "prog-name"),
            " - ",
            text(self.code.normalize(), "code"),
            " | ",
            text(self.title.title(), "error-title"),
            " ]"
        )
        renders = [header, text(self.message, "error-message")]

        if hint := self.options.get("hint", self.hint):
            renders.append(Text.assemble(text(" → ", "hint-arrow"), text(hint, "hint")))

        return Group(*renders)

    def replace(self, **overrides):
        """
        return a copy of this fault with its options merged with overrides.
        """
        return type(self)(self.message, **{**self.options, **overrides})

    __replace__ = replace


# --- declaration tier ---

class StructError(FlagsError, TypeError):
    code = FaultCode.NOT_A_STRUCT
    title = "not a struct"
    hint = "pass a (non-frozen) dataclass instance"

class OptionTypeError(FlagsError, TypeError):
    code = FaultCode.INVALID_TYPE
    title = "invalid option type"
    hint = "use bool, int, float, str, timedelta, list[str] or a type with set()"

class TagError(FlagsError, ValueError):
    code = FaultCode.MALFORMED_TAG
    title = "malformed tag"
    hint = 'tags read "[--long|-s][=PARAM] [help...]", or "-" to skip the field'

class DuplicateFlagError(FlagsError):
    code = FaultCode.DUPLICATED_FLAG
    title = "duplicated flag"
    hint = "give one of the fields an explicit name in its tag"

class VarError(FlagsError, TypeError):
    code = FaultCode.MISSING_VAR
    title = "unusable flag set"
    hint = "the flag set must provide var(value, name, help)"


# --- parse tier ---

class ParseError(FlagsError):
    code = FaultCode.INVALID_VALUE
    title = "bad command line"

class UndefinedFlagError(ParseError):
    code = FaultCode.UNDEFINED_FLAG
    title = "undefined flag"
    hint = "check the flag name against the usage below"

class InvalidValueError(ParseError):
    code = FaultCode.INVALID_VALUE
    title = "invalid value"

class MissingValueError(ParseError):
    code = FaultCode.MISSING_VALUE
    title = "missing value"
    hint = "pass the value as --flag=VALUE or --flag VALUE"


def terminal(file=Unset, /, colorful=False):
    """
    build a rich console writing to file (stderr when Unset).

    color is only emitted when colorful is True, so output written to files and
    buffers is plain text.
    """
    return Console(
        file=file if file is not Unset else None,
        stderr=file is Unset,
        color_system="standard" if colorful else None,
        force_terminal=colorful or None,
        highlight=False,
        emoji=False,
    )


def report(fault, /, file=Unset, *, colorful=False):
    """
    print a fault with the given rendering options.

    contract
    - fault must be a FlagsError; its options are merged with colorful before rendering.
    - file defaults to stderr; color is only emitted when colorful is True.
    """
    if not isinstance(fault, FlagsError):
        raise TypeError("report() argument must be a pennant fault")
    terminal(file, colorful).print(fault.replace(colorful=colorful), soft_wrap=True)


__all__ = (
    "FaultCode",
    "FlagsError",
    "StructError",
    "OptionTypeError",
    "TagError",
    "DuplicateFlagError",
    "VarError",
    "ParseError",
    "UndefinedFlagError",
    "InvalidValueError",
    "MissingValueError",
    "report",
)
