"""
Pennant tag grammar.

A tag is the short text attached to a dataclass field (under the "flag" metadata
key) that names its flag, its parameter placeholder and its help:

    --name=PARAM help text...
    -n=PARAM help text...
    --name -- -help text that starts with a dash

Grammar (whitespace-delimited tokens, left to right)
- "--name" is a long name, "-n" a short one-character name; "=PARAM" may be
  attached to either.
- at most one name and one parameter per tag.
- the first token without a leading dash starts the help text.
- a token that is exactly "--" or "-" ends the option tokens: everything after it
  is help, kept verbatim (leading dashes included).
- "", "-" and "--" carry no descriptor at all (parse_tag returns None).

The whole-tag value "-" (EXCLUDE) marks a field as not bindable; the walker
checks it before parsing, so a lone "-" token among others is always a help
terminator.
"""
from typing import final

from .faults import TagError

EXCLUDE = "-"
"""Whole-tag sentinel excluding a field from registration and help."""


@final
class Tag:
    """
    Parsed tag: flag name (without dashes), long/short spelling, parameter
    placeholder and help text. Immutable and compared by value.
    """
    __slots__ = ("_name", "_long", "_param", "_help")

    def __init__(self, name="", /, long=False, param="", help=""):
        for label, object in (("name", name), ("param", param), ("help", help)):
            if not isinstance(object, str):
                raise TypeError(f"tag {label} must be a string")
        self._name = name
        self._long = bool(long)
        self._param = param
        self._help = help

    @property
    def name(self):
        return self._name

    @property
    def long(self):
        return self._long

    @property
    def param(self):
        return self._param

    @property
    def help(self):
        return self._help

    def _key(self):
        return self._name, self._long, self._param, self._help

    def __eq__(self, other):
        if not isinstance(other, Tag):
            return NotImplemented
        return self._key() == other._key()

    def __hash__(self):
        return hash(self._key())

    def __repr__(self):
        return f"Tag({self._name!r}, long={self._long!r}, param={self._param!r}, help={self._help!r})"

    def __str__(self):
        parts = ["{"]
        if self._name:
            parts.append(("--" if self._long else "-") + self._name)
        if self._param:
            parts.append("=" + self._param)
        if self._help:
            parts.append(f'"{self._help}"')
        parts.append("}")
        return " ".join(parts)


def prefix(token, /):
    """
    return the dash prefix of a token: "--", "-" or "".
    """
    if token.startswith("--"):
        return "--"
    if token.startswith("-"):
        return "-"
    return ""


def parse_tag(text, /):
    """
    Parse tag text into a Tag.

    Returns None when the text carries no descriptor ("", "-", "--"); the field
    then gets a name derived from its attribute.

    Raises
    - TagError("tag has too many names") on a second name token.
    - TagError("tag has multiple parameter names") on a second parameter.
    - TagError("tag short name must be a single character") for "-ab".
    - TagError("tag missing option name") when no token names the flag, or the
      only name token has an empty name ("--=PARAM").
    """
    if not isinstance(text, str):
        raise TypeError("parse_tag() argument must be a string")

    tokens = text.split()
    if not tokens or tokens in (["-"], ["--"]):
        return None

    name = param = None
    long = False
    help = []

    for index, token in enumerate(tokens):
        if token in ("-", "--"):
            help = tokens[index + 1:]
            break
        if not (dashes := prefix(token)):
            help = tokens[index:]
            break

        body, equals, value = token[len(dashes):].partition("=")
        # the parameter is checked first: "--a=X -b=Y" is a parameter clash
        if equals:
            if param is not None:
                raise TagError("tag has multiple parameter names", tag=text)
            param = value
        if name is not None:
            raise TagError("tag has too many names", tag=text)
        if dashes == "-" and len(body) > 1:
            raise TagError("tag short name must be a single character", tag=text)
        name = body
        long = dashes == "--"

    if not name:
        raise TagError("tag missing option name", tag=text)

    return Tag(name, long=long, param=param or "", help=" ".join(help))


__all__ = (
    "EXCLUDE",
    "Tag",
    "prefix",
    "parse_tag",
)
