"""
Pennant bound values (field-to-flag binding).

Overview
- Value: the capability a flag set needs from a slot: set(text) to parse command-line
  text into it (raising ValueError on malformed input) and str() for its canonical text.
- Bound adapters alias one field of a caller's dataclass instance. They own no
  storage: set() writes through setattr and str() reads the field's current value,
  so after a parse pass the caller's instance holds the parsed values.
  • BoolValue, IntValue, FloatValue, TextValue, DurationValue: scalar kinds.
  • StringsValue: repeatable flag; each set() appends to the existing list.
  • GenericValue: delegates to a field object that implements Value itself.
- bind(instance, name, hint): select the adapter for a field from its annotation.
- setvar(flagset, value, name, help): insert an adapter through the flag set's var().

Supported annotations
- bool, int, float, str, datetime.timedelta
- Int64, Uint, Uint64 (NewTypes over int with Go's ranges)
- str subclasses and NewTypes over str (string-like types)
- list[str], typing.List[str] and list[str] subclasses
- any type implementing Value
"""
import inspect
import re
import typing
from datetime import timedelta
from typing import NewType, Protocol, runtime_checkable

from .durations import *
from .faults import OptionTypeError, VarError

Int64 = NewType("Int64", int)
Uint = NewType("Uint", int)
Uint64 = NewType("Uint64", int)

_INTEGERS = {
    int: (None, None),
    Int64: (-(1 << 63), (1 << 63) - 1),
    Uint: (0, (1 << 64) - 1),
    Uint64: (0, (1 << 64) - 1),
}

_TRUE = frozenset(("1", "t", "true", "y", "yes", "on"))
_FALSE = frozenset(("0", "f", "false", "n", "no", "off"))


@runtime_checkable
class Value(Protocol):
    """
    A settable/gettable flag value.

    Implementations parse text with set() (raising ValueError when the text is
    malformed) and produce their canonical text with __str__. A value may also
    define is_bool_flag() returning True to be used without an argument.
    """

    def set(self, text, /): ...

    def __str__(self): ...


def typename(hint, /):
    """
    return a readable name for an annotation ("int", "Uint", "list[int]", "Optional[str]").
    """
    if isinstance(hint, (type, NewType)):
        return hint.__name__
    return repr(hint).replace("typing.", "")


class Bound:
    """
    Base adapter aliasing the field `name` of `instance`.
    """
    __slots__ = ("_instance", "_name")

    scalar = True

    def __init__(self, instance, name, /):
        self._instance = instance
        self._name = name

    @property
    def name(self):
        return self._name

    def get(self):
        return getattr(self._instance, self._name)

    def set(self, text, /):
        setattr(self._instance, self._name, self.convert(text))

    def convert(self, text, /):
        raise NotImplementedError

    def render(self, object, /):
        return "" if object is None else str(object)

    def is_bool_flag(self):
        return False

    def __str__(self):
        return self.render(self.get())

    def __repr__(self):
        return f"{type(self).__name__}({type(self._instance).__name__}.{self._name}={str(self)!r})"


class BoolValue(Bound):
    __slots__ = ()

    def convert(self, text, /):
        if (lowered := text.strip().lower()) in _TRUE:
            return True
        if lowered in _FALSE:
            return False
        raise ValueError("parse error")

    def render(self, object, /):
        return "true" if object else "false"

    def is_bool_flag(self):
        return True


class IntValue(Bound):
    __slots__ = ("_lower", "_upper")

    def __init__(self, instance, name, /, lower=None, upper=None):
        super().__init__(instance, name)
        self._lower = lower
        self._upper = upper

    def convert(self, text, /):
        try:
            # Go reads a leading zero as octal; Python's base 0 rejects it
            if re.fullmatch(r"[-+]?0[0-7_]+", text):
                value = int(text, 8)
            else:
                value = int(text, 0)
        except ValueError:
            raise ValueError("parse error") from None
        if (self._lower is not None and value < self._lower) or (self._upper is not None and value > self._upper):
            raise ValueError("value out of range")
        return value


class FloatValue(Bound):
    __slots__ = ()

    def convert(self, text, /):
        try:
            return float(text)
        except ValueError:
            raise ValueError("parse error") from None

    def render(self, object, /):
        if object is None:
            return ""
        text = repr(float(object))
        return text[:-2] if text.endswith(".0") else text


class TextValue(Bound):
    """
    str and string-like fields; parsed text is converted back into the declared type.
    """
    __slots__ = ("_kind",)

    def __init__(self, instance, name, /, kind=str):
        super().__init__(instance, name)
        self._kind = kind

    def convert(self, text, /):
        return self._kind(text)


class DurationValue(Bound):
    __slots__ = ()

    def convert(self, text, /):
        return parse_duration(text)

    def render(self, object, /):
        return "" if object is None else format_duration(object)


class StringsValue(Bound):
    """
    Repeatable string flag: every occurrence appends to the field's list in place.
    """
    __slots__ = ("_kind",)

    scalar = False

    def __init__(self, instance, name, /, kind=list):
        super().__init__(instance, name)
        self._kind = kind

    def set(self, text, /):
        if (items := self.get()) is None:
            setattr(self._instance, self._name, items := self._kind())
        items.append(text)

    def render(self, object, /):
        return "[" + " ".join(object or ()) + "]"


class GenericValue(Bound):
    """
    Delegates to a field object implementing Value; a None field is filled with
    kind() on first set().
    """
    __slots__ = ("_kind",)

    scalar = False

    def __init__(self, instance, name, /, kind=None):
        super().__init__(instance, name)
        self._kind = kind

    def set(self, text, /):
        if (object := self.get()) is None:
            setattr(self._instance, self._name, object := self._kind())
        object.set(text)

    def is_bool_flag(self):
        if (check := getattr(self.get(), "is_bool_flag", None)) is None:
            return False
        return bool(check())


def _supertype(hint, /):
    """
    unwrap NewType chains down to the underlying type.
    """
    while isinstance(hint, NewType):
        hint = hint.__supertype__
    return hint


def _textual(hint, /):
    return isinstance(base := _supertype(hint), type) and issubclass(base, str)


def _strings(hint, /):
    """
    return the list type to create for a sequence-of-string annotation, or None.
    """
    if typing.get_origin(hint) is list:
        return list if typing.get_args(hint) == (str,) else None
    if isinstance(hint, type) and issubclass(hint, list):
        for base in getattr(hint, "__orig_bases__", ()):
            if typing.get_origin(base) is list and typing.get_args(base) == (str,):
                return hint
    return None


def _settable(hint, /):
    return isinstance(hint, type) and callable(getattr(hint, "set", None))


def bind(instance, name, hint, /):
    """
    Return the bound adapter for field `name` of `instance` annotated with `hint`.

    The field's current value is the flag's default; nothing is written here.

    Raises
    - OptionTypeError("invalid option type: <type>") for unsupported annotations.
    """
    current = getattr(instance, name)

    # the capability wins over the kind: a str subclass with set() keeps its own parsing
    if (current is not None and isinstance(current, Value) and not isinstance(current, type)) or (
            current is None and _settable(hint)):
        return GenericValue(instance, name, hint)

    if hint is bool:
        return BoolValue(instance, name)
    if hint in _INTEGERS:
        return IntValue(instance, name, *_INTEGERS[hint])
    if hint is float:
        return FloatValue(instance, name)
    if hint is timedelta:
        return DurationValue(instance, name)
    if _textual(hint):
        return TextValue(instance, name, hint)
    if kind := _strings(hint):
        return StringsValue(instance, name, kind)

    raise OptionTypeError(f"invalid option type: {typename(hint)}", field=name)


def setvar(flagset, value, name, help, /):
    """
    Insert `value` into `flagset` under `name` by calling flagset.var(value, name, help).

    The flag set is duck-typed: any object whose var() accepts those three
    arguments works.

    Raises
    - VarError("type <T> missing var method") when there is no callable var.
    - VarError("type <T> has the wrong signature for var") when var cannot take
      (value, name, help).
    """
    kind = type(flagset).__qualname__
    if not callable(method := getattr(flagset, "var", None)):
        raise VarError(f"type {kind} missing var method")
    try:
        inspect.signature(method).bind(value, name, help)
    except TypeError:
        raise VarError(f"type {kind} has the wrong signature for var") from None
    except ValueError:
        # builtins without a signature are trusted
        pass
    method(value, name, help)


__all__ = (
    "Int64",
    "Uint",
    "Uint64",
    "Value",
    "Bound",
    "BoolValue",
    "IntValue",
    "FloatValue",
    "TextValue",
    "DurationValue",
    "StringsValue",
    "GenericValue",
    "typename",
    "bind",
    "setvar",
)
