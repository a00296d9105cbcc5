"""
Pennant flag sets.

A FlagSet is a named collection of flags, each backed by a Value adapter, with a
parse pass over an argument list. The parsing itself is argparse's; this module
only shapes it the way the binder expects:

- every flag answers to "-name" and "--name"; "--name=value" and "--name value"
  both work; abbreviations are off.
- the token after a value-taking flag is its value, whatever it looks like
  ("--wait -1s", "--name -bob").
- bool-like values (is_bool_flag() is True) never consume the next token; they
  take "--debug" for true or an attached value ("--debug=false").
- parsing stops at the first positional argument or after "--"; that argument
  and everything after it are returned unconsumed.
- failures raise ParseError subclasses after printing the error and the set's
  usage to its output.

    >>> flagset = FlagSet("tool")
    >>> flagset.var(value, "name", "who to greet")
    >>> flagset.parse(["--name", "bob", "a", "b"])
    ['a', 'b']
"""
import argparse
import sys
from collections import namedtuple

from rich.text import Text

from .faults import *
from .faults import terminal
from .tags import prefix
from .utils import *
from .values import Value


class Flag(namedtuple("Flag", ("name", "help", "value", "default"))):
    """
    one flag-set entry: name (without dashes), help text, the bound value and
    the text form of that value when the flag was inserted.
    """
    __slots__ = ()


class _ArgumentParser(argparse.ArgumentParser):
    def error(self, message):
        raise ParseError(message)


class _Assign(argparse.Action):
    """
    forwards the flag's text to value.set(); switches receive const ("true")
    when no value is attached.
    """

    def __init__(self, option_strings, dest, value, **options):
        super().__init__(option_strings, dest, **options)
        self.value = value

    def __call__(self, parser, namespace, values, option_string=None):
        try:
            self.value.set(values)
        except ValueError as error:
            raise InvalidValueError(
                f'invalid value "{values}" for flag {option_string}: {error}',
                flag=option_string
            ) from None


class FlagSet:
    """
    A named set of flags.

    Parameters
    - name: used in the default usage header ("Usage of <name>:").
    - output: text sink for error and usage output; stderr when Unset.

    The usage attribute is the callable run after a failed parse; registries
    replace it with a help renderer for their dataclass.
    """

    def __init__(self, name="", /, output=Unset):
        if not isinstance(name, str):
            raise TypeError("flag set name must be a string")
        self._name = name
        self._output = output
        self._flags = {}
        self._args = []
        self._parsed = False
        self.usage = self.defaults
        self._parser = _ArgumentParser(
            prog=name or None,
            add_help=False,
            allow_abbrev=False,
            exit_on_error=False,
        )

    @property
    def name(self):
        return self._name

    @property
    def output(self):
        return sys.stderr if self._output is Unset else self._output

    @output.setter
    def output(self, output):
        self._output = output

    @property
    def args(self):
        """
        leftover positional arguments of the last parse.
        """
        return list(self._args)

    @property
    def parsed(self):
        return self._parsed

    def var(self, value, name, help):
        """
        Insert value under name.

        Raises
        - DuplicateFlagError("flag redefined: <name>") if name is already taken.
        """
        if not isinstance(value, Value):
            raise TypeError("flag value must implement set() and __str__()")
        if not isinstance(name, str) or not name:
            raise TypeError("flag name must be a non-empty string")
        if name in self._flags:
            raise DuplicateFlagError(f"flag redefined: {name}", flag=name)

        self._parser.add_argument(
            "-" + name,
            "--" + name,
            action=_Assign,
            nargs="?" if self._switch(value) else None,
            const="true" if self._switch(value) else None,
            dest="flag:" + name,
            default=argparse.SUPPRESS,
            value=value,
        )
        self._flags[name] = Flag(name, help, value, str(value))

    @staticmethod
    def _switch(value, /):
        return callable(check := getattr(value, "is_bool_flag", None)) and bool(check())

    def lookup(self, name, /):
        """
        return the Flag registered under name, or None.
        """
        return self._flags.get(name)

    def visit_all(self, visitor, /):
        """
        call visitor(flag) for every flag, in name order.
        """
        for flag in self:
            visitor(flag)

    def __iter__(self):
        return iter(sorted(self._flags.values(), key=lambda flag: flag.name))

    def __len__(self):
        return len(self._flags)

    def __contains__(self, name):
        return name in self._flags

    def __repr__(self):
        return f"FlagSet({self._name!r}, flags={sorted(self._flags)!r})"

    def parse(self, arguments, /):
        """
        Run one parse pass over arguments and return the leftover positionals.

        Raises
        - UndefinedFlagError for a flag that is not in the set.
        - InvalidValueError when a value rejects its text.
        - MissingValueError when a flag lacks its argument.
        """
        if isinstance(arguments, str):
            raise TypeError("parse() argument must be a list of strings, not a string")
        arguments = list(arguments)
        self._parsed = True

        try:
            flags, args = self._split(arguments)
            self._parser.parse_args(flags)
        except argparse.ArgumentError as error:
            fault = self._translate(error, arguments)
        except ParseError as error:
            fault = error
        else:
            fault = None

        if fault is not None:
            self.failure(fault)
            raise fault

        self._args = args
        return self.args

    def _split(self, arguments, /):
        """
        Split arguments into flag tokens, each folded to "spelling[=value]",
        and the leftover positionals.

        A value-taking flag without "=" takes the next token verbatim; an
        unknown flag or a flag missing its value raises here, naming the flag
        as typed.
        """
        flags = []
        index = 0
        while index < len(arguments):
            token = arguments[index]
            if token == "--":
                index += 1
                break
            if len(token) < 2 or not token.startswith("-"):
                break

            spelling, equals, _ = token.partition("=")
            name = spelling[len(prefix(spelling)):]
            if not name or name.startswith("-"):
                raise ParseError(f"bad flag syntax: {token}", flag=token)
            if (flag := self._flags.get(name)) is None:
                raise UndefinedFlagError(f"flag provided but not defined: {spelling}", flag=spelling)

            index += 1
            if not equals and not self._switch(flag.value):
                if index == len(arguments):
                    raise MissingValueError(f"flag needs an argument: {spelling}", flag=spelling)
                token = f"{spelling}={arguments[index]}"
                index += 1
            flags.append(token)

        return flags, arguments[index:]

    def _translate(self, error, arguments, /):
        # argparse names an entry by all its option strings; report the one typed
        options = (error.argument_name or "").split("/")
        spelling = next(
            (spelling for token in arguments if (spelling := token.partition("=")[0]) in options),
            options[0]
        )
        return InvalidValueError(f"{spelling}: {error.message}" if spelling else error.message, flag=spelling)

    def failure(self, fault, /):
        """
        print fault and the usage to the output.
        """
        report(fault, self.output)
        self.usage()

    def defaults(self):
        """
        Default usage: a header and one entry per flag with its help and
        non-zero default.
        """
        lines = [Text(f"Usage of {self._name}:" if self._name else "Usage:")]
        for flag in self:
            lines.append(Text("  " + ("-" if len(flag.name) == 1 else "--") + flag.name))
            help = flag.help
            if flag.default not in ("", "0", "false", "0s", "[]"):
                help = f"{help} (default {flag.default})".strip()
            if help:
                lines.append(Text("        " + help))
        terminal(self.output).print(Text("\n").join(lines), soft_wrap=True)


__all__ = (
    "Flag",
    "FlagSet",
)
