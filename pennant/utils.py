"""
Pennant utilities (internal helpers, carefully exposed)

Scope
- Small building blocks shared by the tag, binding, registry and usage layers.

Overview
- UnsetType / Unset
  • Singleton sentinel to represent “value not provided” without conflating with None
    or with the empty string (an empty program name is meaningful to the help renderer).
  • Falsey (bool(Unset) is False), printable as "Unset", and non-subclassable.

- coalesce(value, default=None)
  • Replace Unset with a concrete default, but preserve legitimate falsey values like None/0/""/[].

- host(name, default)
  • Read an override published by the host application in __main__ (e.g. __prog__,
    __styles__, __codes__).

- program()
  • Resolve the program name: __prog__ from __main__, else the basename of sys.argv[0].

Quick examples
    >>> coalesce(Unset, "fallback")
    'fallback'
    >>> coalesce("", "fallback")
    ''
"""
import functools
import os.path
import sys
from typing import final


@final
class UnsetType:
    """
    Internal sentinel type representing a value that was not provided.

    Characteristics
    - Boolean-false: bool(Unset) is False, but it is distinct from None and "".
    - Printable: repr(Unset) -> "Unset" for friendly diagnostics.
    - Non-subclassable: this type is sealed; do not subclass.
    - Singleton per process: UnsetType() always yields the same instance.
    """

    def __or__(self, other, /):
        """
        Support PEP 604 unions in annotations (e.g., str | UnsetType).
        """
        try:
            return other | type(self)
        except TypeError:
            return NotImplemented

    def __ror__(self, other, /):
        """
        Support reversed PEP 604 unions when UnsetType appears on the right.
        """
        try:
            return other | type(self)
        except TypeError:
            return NotImplemented

    @functools.cache
    def __new__(cls):
        return super().__new__(cls)

    def __bool__(self):
        return False

    def __repr__(self):
        return "Unset"

    def __init_subclass__(cls, **options):
        raise TypeError("type 'UnsetType' is not an acceptable base type")


def coalesce(object, default=None, /):
    """
    Resolve the Unset sentinel to a concrete default.

    Returns the given object unless it is Unset, in which case the provided
    default is returned. Falsey values like None, 0, "" or [] are preserved.
    """
    return object if object is not Unset else default


def host(name, default=None, /):
    """
    Return an attribute published by the host application in __main__.

    Recognised names
    - __prog__: program name used in error headers and as the default flag-set name.
    - __styles__: palette overrides for colorful help and error rendering.
    - __codes__: labels replacing numeric fault codes.
    """
    return getattr(sys.modules.get("__main__"), name, default)


def program():
    """
    Return the program name (host __prog__, else the basename of sys.argv[0]).
    """
    if name := host("__prog__"):
        return name
    return os.path.basename(sys.argv[0]) if sys.argv and sys.argv[0] else ""


Unset = UnsetType()
"""
Internal sentinel for “not provided”.

Use Unset as a default when None or "" is a valid, user-meaningful value but you
still need to distinguish “no input” from an explicit value.
"""


__all__ = (
    # Functions
    "coalesce",
    "host",
    "program",

    # Types
    "UnsetType",

    # Constants
    "Unset",
)
