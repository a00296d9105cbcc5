"""
Pennant registry: dataclass fields to flag-set entries.

Overview
- Every entry point walks the fields of a dataclass instance in declaration order,
  skipping private fields (leading underscore) and fields tagged "-", parses each
  tag, resolves the flag name (tag name, else the lower-cased attribute name) and
  binds the field through pennant.values.bind().
- The walk is shared: check() returns the first fault, validate() raises it,
  register*() raise it before anything is inserted.

Entry points
- check(object) / validate(object)
- register(object, flagset=Unset)          -> into flagset, or the process-wide set
- register_new(object, name=Unset)         -> FlagSet
- register_dup(object, name=Unset)         -> (copy, FlagSet)
- dup(object)                              -> copy with excluded fields reset
- parse(args=Unset)                        -> leftovers of the process-wide set
- register_and_parse(object, args=Unset)   -> leftovers
- sub_register_and_parse(object, args)     -> leftovers of args[1:]
- lookup(object, name, default=None)       -> current field value
- reset(flagset=Unset)                     -> previous process-wide set
- usage(output=Unset)                      -> help for the process-wide dataclass

Process-wide state
- command_line is the default FlagSet and defaults the dataclass last registered
  into it. They assume registration happens once, at start-up, on one thread;
  tests swap them with reset().
"""
import copy
import dataclasses
import functools
import sys
import typing
from collections import namedtuple
from datetime import timedelta

from .faults import *
from .flagset import FlagSet
from .tags import *
from .utils import *
from .values import *
from .values import _INTEGERS, _strings, _supertype

KEY = "flag"
"""Dataclass metadata key holding a field's tag."""


class Entry(namedtuple("Entry", ("field", "hint", "tag", "name"))):
    """
    one bindable field: the dataclass field, its resolved annotation, its parsed
    tag (or None) and its flag name.
    """
    __slots__ = ()

    @property
    def help(self):
        return self.tag.help if self.tag else ""

    @property
    def param(self):
        return self.tag.param if self.tag else ""


def flag(tag="", /, **options):
    """
    Build a dataclass field carrying a tag.

        @dataclass
        class Options:
            level: str = flag("--level=LEVEL logging level", default="info")
            private: str = flag("-", default="")

    options are forwarded to dataclasses.field(); an existing metadata mapping
    is merged with the tag.
    """
    if not isinstance(tag, str):
        raise TypeError("flag() tag must be a string")
    return dataclasses.field(metadata={**options.pop("metadata", {}), KEY: tag}, **options)


def _typename(object, /):
    if isinstance(object, type):
        return f"type[{object.__qualname__}]"
    return type(object).__qualname__


def _struct(object, /):
    """
    raise StructError unless object is a writable dataclass instance.
    """
    if not dataclasses.is_dataclass(object) or isinstance(object, type):
        raise StructError(f"{_typename(object)} is not a pointer to a struct")
    if type(object).__dataclass_params__.frozen:
        raise StructError(f"{_typename(object)} is not a pointer to a struct (frozen dataclass)")


def _hints(cls, /):
    try:
        return typing.get_type_hints(cls)
    except (NameError, TypeError):
        # unresolvable forward references: fall back to each field's raw annotation
        return {}


def _walk(object, /):
    """
    Yield an Entry for each bindable field of object, in declaration order.

    Raises StructError, TagError and DuplicateFlagError as they are met.
    """
    _struct(object)
    hints = _hints(type(object))
    seen = set()

    for field in dataclasses.fields(object):
        if field.name.startswith("_"):
            continue
        if (text := field.metadata.get(KEY, "")) == EXCLUDE:
            continue
        try:
            tag = parse_tag(text)
        except TagError as error:
            raise error.replace(field=field.name) from None

        name = tag.name if tag else field.name.lower()
        if name in seen:
            raise DuplicateFlagError(f"flag redefined: {name}", field=field.name, flag=name)
        seen.add(name)

        yield Entry(field, hints.get(field.name, field.type), tag, name)


def _bind(object, /):
    """
    walk object and bind every field; return [(entry, value)].
    """
    return [(entry, bind(object, entry.field.name, entry.hint)) for entry in _walk(object)]


def check(object, /):
    """
    Validate object's declarations and return the fault, or None when they are
    sound. Nothing is registered and object is left untouched.
    """
    try:
        _bind(object)
    except FlagsError as error:
        return error
    return None


def validate(object, /):
    """
    Validate object's declarations, raising the first fault.
    """
    if (error := check(object)) is not None:
        raise error


def _register(object, flagset, /):
    # bind everything first: a bad field leaves the flag set untouched
    for entry, value in _bind(object):
        setvar(flagset, value, entry.name, entry.help)
    return flagset


def _help(flagset, object, /):
    # deferred import: pennant.helptext walks dataclasses through this module
    from .helptext import print_help

    print_help(flagset.output, flagset.name, "", object)


def register(object, /, flagset=Unset):
    """
    Register object's fields into flagset, or into the process-wide set when
    flagset is Unset (object then becomes the default dataclass for usage()).
    """
    global defaults
    if flagset is Unset:
        _register(object, command_line)
        defaults = object
        return
    _register(object, flagset)


def register_new(object, /, name=Unset):
    """
    Register object into a new FlagSet named name (the program name by default)
    and return it.
    """
    flagset = _register(object, FlagSet(coalesce(name, program())))
    flagset.usage = functools.partial(_help, flagset, object)
    return flagset


def _zero(hint, /):
    """
    return the zero value of an annotation.
    """
    if hint is bool:
        return False
    if hint in _INTEGERS:
        return 0
    if hint is float:
        return 0.0
    if hint is timedelta:
        return timedelta(0)
    if isinstance(base := _supertype(hint), type) and issubclass(base, str):
        return ""
    if kind := _strings(hint):
        return kind()
    return None


def dup(object, /):
    """
    Return a deep copy of object whose excluded fields ("-" tags) hold their
    type's zero value instead of the source's.
    """
    _struct(object)
    hints = _hints(type(object))
    # the walk validates the tags of every other field
    for _ in _walk(object):
        pass

    duplicate = copy.deepcopy(object)
    for field in dataclasses.fields(object):
        if field.metadata.get(KEY, "") == EXCLUDE:
            setattr(duplicate, field.name, _zero(hints.get(field.name, field.type)))
    return duplicate


def register_dup(object, /, name=Unset):
    """
    Duplicate object with dup() and register the copy into a new FlagSet.

    Returns (copy, flagset); repeated calls yield independent option sets.
    """
    duplicate = dup(object)
    return duplicate, register_new(duplicate, name)


def parse(args=Unset, /):
    """
    Parse args (sys.argv[1:] by default) with the process-wide flag set and
    return the leftover positional arguments.

    Raises ParseError on bad input.
    """
    return command_line.parse(coalesce(args, sys.argv[1:]))


def register_and_parse(object, /, args=Unset):
    """
    register(object) into the process-wide set, then parse(args).
    """
    register(object)
    return parse(args)


def sub_register_and_parse(object, args, /):
    """
    Treat args[0] as a sub-command name: register object into a new set named
    after it and parse args[1:]. Empty args register nothing and return [].
    """
    if isinstance(args, str):
        raise TypeError("sub_register_and_parse() args must be a list of strings, not a string")
    if not (args := list(args)):
        return []
    return register_new(object, args[0]).parse(args[1:])


def lookup(object, name, /, default=None):
    """
    Return the current value of the field bound to flag name, or default when
    object is not a dataclass instance, no field answers to name, or a
    malformed tag precedes it.
    """
    try:
        for entry in _walk(object):
            if entry.name == name:
                return getattr(object, entry.field.name)
    except FlagsError:
        pass
    return default


def reset(flagset=Unset, /):
    """
    Replace the process-wide flag set (with a fresh one by default) and forget
    the default dataclass. Return the previous set.
    """
    global command_line, defaults
    previous = command_line
    if flagset is Unset:
        flagset = FlagSet(program())
        flagset.usage = usage
    command_line = flagset
    defaults = None
    return previous


def usage(output=Unset, /):
    """
    Print help for the process-wide dataclass to output (the process-wide set's
    output by default).
    """
    from .helptext import print_help

    print_help(coalesce(output, command_line.output), command_line.name, "", defaults)


command_line = FlagSet(program())
command_line.usage = usage
defaults = None


__all__ = (
    "KEY",
    "flag",
    "check",
    "validate",
    "register",
    "register_new",
    "register_dup",
    "dup",
    "parse",
    "register_and_parse",
    "sub_register_and_parse",
    "lookup",
    "reset",
    "usage",
)
