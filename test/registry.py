"""
Registry tests (struct walk, validation, registration, parsing entry points,
dup, lookup and the process-wide flag set).

Conventions
- Test method names follow CamelCase per project convention.
- Tests touching the process-wide flag set swap it with reset() and restore it.
- Dataclasses live at module level so their annotations resolve.
"""
import io
import unittest
from dataclasses import dataclass, field
from datetime import timedelta
from unittest import TestCase

import pennant.registry
from pennant.faults import *
from pennant.flagset import FlagSet
from pennant.registry import *
from pennant.values import Int64, Uint, Uint64


class Strings(list[str]):
    pass


@dataclass
class All:
    list1: Strings = field(default_factory=Strings)
    list2: list[str] = field(default_factory=list)
    duration: timedelta = timedelta(0)
    string: str = ""
    integer: int = flag("--int", default=0)
    int64: Int64 = 0
    uint: Uint = 0
    uint64: Uint64 = 0
    real: float = flag("--float", default=0.0)
    boolean: bool = flag("--bool", default=False)


@dataclass
class Named:
    value: str = flag("--the_name=VALUE help", default="bob")


@dataclass
class Multi:
    value: list[str] = flag("--multi=VALUE help", default_factory=list)
    items: list[str] = flag("--list=VALUE help", default_factory=list)


@dataclass
class Lookups:
    ignore: bool = flag("-", default=False)
    option: str = flag("--option=A_VERY_LONG_NAME some flag", default="value")
    lazy: str = "lazy"


@dataclass
class BadTagFirst:
    invalid: str = flag("invalid tag", default="")
    option: str = flag("--option", default="value")
    lazy: str = ""


@dataclass
class Narrow:
    n: complex = 0j


@dataclass
class Empty:
    pass


@dataclass
class Private:
    public: str = "public"
    private: str = flag("-", default="private")
    _hidden: int = 3
    wait: timedelta = flag("-", default=timedelta(seconds=5))
    names: list[str] = flag("-", default_factory=lambda: ["x"])


@dataclass
class Clash:
    name: str = ""
    other: str = flag("--name", default="")


@dataclass
class Greeting:
    name: str = flag("--name a name", default="")


@dataclass
class Toggles:
    debug: bool = flag("--debug print internals", default=True)
    delay: timedelta = timedelta(0)


@dataclass(frozen=True)
class Frozen:
    name: str = ""


class TestValidate(TestCase):
    """check() and validate()."""

    def testNotAStruct(self):
        for object, message in (
                ("foo", "str is not a pointer to a struct"),
                (3, "int is not a pointer to a struct"),
                (All, "type[All] is not a pointer to a struct"),
                (None, "NoneType is not a pointer to a struct"),
        ):
            with self.subTest(object=object):
                with self.assertRaises(StructError) as context:
                    validate(object)
                self.assertEqual(str(context.exception), message)
                self.assertEqual(str(check(object)), message)

    def testFrozenIsNotAStruct(self):
        self.assertIsInstance(check(Frozen()), StructError)

    def testInvalidOptionType(self):
        error = check(Narrow())
        self.assertIsInstance(error, OptionTypeError)
        self.assertEqual(str(error), "invalid option type: complex")

    def testMalformedTag(self):
        error = check(BadTagFirst())
        self.assertIsInstance(error, TagError)
        self.assertEqual(error.options["field"], "invalid")

    def testDuplicateName(self):
        error = check(Clash())
        self.assertIsInstance(error, DuplicateFlagError)
        self.assertEqual(str(error), "flag redefined: name")

    def testSound(self):
        for object in (All(), Named(), Lookups(), Empty(), Private()):
            with self.subTest(object=type(object).__name__):
                self.assertIsNone(check(object))
                validate(object)

    def testCheckLeavesObjectUntouched(self):
        object = Named()
        check(object)
        self.assertEqual(object, Named())


class TestRegister(TestCase):
    """register() and register_new()."""

    def testRegisterIntoSet(self):
        options = Named()
        flagset = FlagSet("", output=io.StringIO())
        register(options, flagset)
        self.assertEqual([flag.name for flag in flagset], ["the_name"])
        self.assertEqual(flagset.lookup("the_name").default, "bob")
        flagset.parse(["--the_name", "fred"])
        self.assertEqual(options.value, "fred")
        self.assertEqual(str(flagset.lookup("the_name").value), "fred")

    def testRegisterFaultInsertsNothing(self):
        flagset = FlagSet("")
        with self.assertRaises(OptionTypeError):
            register(Narrow(), flagset)
        with self.assertRaises(StructError):
            register("a", flagset)
        self.assertEqual(len(flagset), 0)

    def testPrivateAndExcludedFieldsAreSkipped(self):
        flagset = register_new(Private(), "private")
        self.assertEqual([flag.name for flag in flagset], ["public"])

    def testRegisterNewAll(self):
        options = All()
        flagset = register_new(options, "all")
        self.assertEqual(flagset.name, "all")
        leftovers = flagset.parse([
            "--list1", "a", "--list1", "b", "--list2", "c", "--list2", "d",
            "--duration", "1.2s", "--string", "str", "--int", "-42", "--int64", "17",
            "--uint", "7", "--uint64", "13", "--float", "1.425", "--bool",
        ])
        self.assertEqual(leftovers, [])
        self.assertEqual(options, All(
            list1=Strings(["a", "b"]),
            list2=["c", "d"],
            duration=timedelta(milliseconds=1200),
            string="str",
            integer=-42,
            int64=17,
            uint=7,
            uint64=13,
            real=1.425,
            boolean=True,
        ))
        self.assertIsInstance(options.list1, Strings)

    def testRegisterNewUsageRendersHelp(self):
        output = io.StringIO()
        flagset = register_new(Named(), "named")
        flagset.output = output
        with self.assertRaises(UndefinedFlagError):
            flagset.parse(["--nope"])
        text = output.getvalue()
        self.assertIn("flag provided but not defined: --nope", text)
        self.assertIn("Usage: named [--the_name=VALUE]\n", text)
        self.assertIn("  --the_name=VALUE    help [bob]\n", text)


class TestDup(TestCase):
    """dup() and register_dup()."""

    def testExcludedFieldsAreZeroed(self):
        source = Private()
        copy = dup(source)
        self.assertIsNot(copy, source)
        self.assertEqual(copy.public, "public")
        self.assertEqual(copy.private, "")
        self.assertEqual(copy.wait, timedelta(0))
        self.assertEqual(copy.names, [])
        self.assertEqual(copy._hidden, 3)
        self.assertEqual(source.private, "private")

    def testDeepCopy(self):
        source = Multi(value=["a"])
        copy = dup(source)
        copy.value.append("b")
        self.assertEqual(source.value, ["a"])

    def testFaults(self):
        with self.assertRaises(StructError):
            dup("a")
        with self.assertRaises(StructError):
            dup(3)
        with self.assertRaises(TagError):
            dup(BadTagFirst())

    def testRegisterDupIsIndependent(self):
        source = Named()
        first, one = register_dup(source, "one")
        second, two = register_dup(source, "two")
        one.parse(["--the_name=fred"])
        two.parse(["--the_name=alice"])
        self.assertEqual((source.value, first.value, second.value), ("bob", "fred", "alice"))
        self.assertEqual(one.name, "one")


class TestSubRegisterAndParse(TestCase):

    def testCases(self):
        for args, value, leftovers in (
                (["name"], "bob", []),
                (["name", "--the_name=fred"], "fred", []),
                (["name", "--the_name=fred", "a", "b", "c"], "fred", ["a", "b", "c"]),
                ([], "bob", []),
        ):
            with self.subTest(args=args):
                options = Named()
                self.assertEqual(sub_register_and_parse(options, args), leftovers)
                self.assertEqual(options.value, value)

    def testMultiString(self):
        options = Multi()
        sub_register_and_parse(options, [
            "name", "--multi", "value1", "--multi", "value2", "--list", "item1", "--list", "item2"
        ])
        self.assertEqual(options.value, ["value1", "value2"])
        self.assertEqual(options.items, ["item1", "item2"])

    def testSwitchTurnedOff(self):
        options = Toggles()
        self.assertEqual(sub_register_and_parse(options, ["c", "--debug=false", "--delay", "-2m", "x"]), ["x"])
        self.assertFalse(options.debug)
        self.assertEqual(options.delay, -timedelta(minutes=2))

    def testInvalidOptionType(self):
        with self.assertRaises(OptionTypeError) as context:
            sub_register_and_parse(Narrow(), ["c"])
        self.assertEqual(str(context.exception), "invalid option type: complex")

    def testUndefinedFlag(self):
        flagset = register_new(Empty(), "c")
        flagset.output = io.StringIO()
        with self.assertRaises(UndefinedFlagError) as context:
            flagset.parse(["-v"])
        self.assertEqual(str(context.exception), "flag provided but not defined: -v")
        self.assertIn("Usage: c\n", flagset.output.getvalue())

    def testRejectsString(self):
        with self.assertRaises(TypeError):
            sub_register_and_parse(Named(), "name --the_name=x")


class TestLookup(TestCase):

    def testFound(self):
        options = Lookups()
        self.assertEqual(lookup(options, "option"), "value")
        self.assertEqual(lookup(options, "lazy"), "lazy")

    def testNotFound(self):
        options = Lookups()
        self.assertIsNone(lookup("a", "a"))
        self.assertIsNone(lookup(3, "a"))
        self.assertIsNone(lookup(options, "missing"))
        self.assertIsNone(lookup(options, "ignore"))
        self.assertEqual(lookup(options, "missing", "fallback"), "fallback")

    def testStopsAtMalformedTag(self):
        self.assertIsNone(lookup(BadTagFirst(), "option"))

    def testSeesParsedValues(self):
        options = Named()
        register_new(options, "x").parse(["--the_name", "zed"])
        self.assertEqual(lookup(options, "the_name"), "zed")


class TestCommandLine(TestCase):
    """register(), parse() and register_and_parse() on the process-wide set."""

    def setUp(self):
        self.output = io.StringIO()
        self.previous = reset(FlagSet("test", output=self.output))
        pennant.registry.command_line.usage = usage

    def tearDown(self):
        reset(self.previous)

    def testParse(self):
        options = Greeting()
        register(options)
        self.assertEqual(parse(["--name", "bob", "arg"]), ["arg"])
        self.assertEqual(options.name, "bob")

    def testParseFault(self):
        register(Greeting())
        with self.assertRaises(ParseError):
            parse(["--foo"])
        text = self.output.getvalue()
        self.assertIn("flag provided but not defined: --foo", text)
        self.assertIn("Usage: test [--name=VALUE]\n", text)
        self.assertIn("  --name=VALUE    a name\n", text)

    def testRegisterAndParse(self):
        for args, value, leftovers in (
                ([], "", []),
                (["a", "b"], "", ["a", "b"]),
                (["--name", "bob", "a", "b"], "bob", ["a", "b"]),
        ):
            with self.subTest(args=args):
                reset(FlagSet("test", output=self.output))
                options = Greeting()
                self.assertEqual(register_and_parse(options, args), leftovers)
                self.assertEqual(options.name, value)

    def testUsage(self):
        register(Greeting())
        output = io.StringIO()
        usage(output)
        self.assertEqual(output.getvalue(), "Usage: test [--name=VALUE]\n  --name=VALUE    a name\n")

    def testResetReturnsPrevious(self):
        current = pennant.registry.command_line
        previous = reset()
        self.assertIs(previous, current)
        self.assertIsNot(pennant.registry.command_line, current)
        self.assertIsNone(pennant.registry.defaults)


if __name__ == "__main__":
    unittest.main()
