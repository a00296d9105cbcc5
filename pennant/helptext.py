"""
Pennant usage rendering.

Layout (plain text; colors only when colorful=True)

    Usage: xyzzy [--alpha=LEVEL] [--beta=N] [-v] ...
      --alpha=LEVEL    set the alpha level [foo]
      --beta=N         set beta to N
       -v              be verbose

- the usage line lists every flag in declaration order, then the positional label;
  it is printed only when a program name is given.
- one help row per bindable field: two spaces, one more for single-character
  names, the flag spelling padded to the widest spelling of at most NAME_WIDTH
  columns, four spaces, then the help text word-wrapped to WIDTH columns.
- a spelling wider than NAME_WIDTH puts its help on a continuation line.
- non-zero scalar defaults are appended to the help as " [value]".

Palette keys (override through __styles__ in __main__)
- usage-label, program-name, option-name, flag-name, metavar, positional-label,
  argument-description, default
"""
from collections import defaultdict, namedtuple

from rich.text import Text

from .faults import FlagsError, OptionTypeError, terminal
from .registry import _walk
from .utils import *
from .values import bind

NAME_WIDTH = 20
WIDTH = 80

_INDENT = 2
_GAP = 4


class FieldInfo(namedtuple("FieldInfo", ("name", "param", "help", "default"))):
    """
    what the help renderer knows about one field: flag name, placeholder,
    help text and the text of its non-zero default (else "").
    """
    __slots__ = ()

    @property
    def short(self):
        return len(self.name) == 1

    @property
    def spelling(self):
        spelling = ("-" if self.short else "--") + self.name
        return spelling + "=" + self.param if self.param else spelling


def fields(object, /):
    """
    Return a FieldInfo per bindable field of object, in declaration order.

    Anything that is not a dataclass instance, or a dataclass with a malformed
    tag, yields [].
    """
    try:
        entries = list(_walk(object))
    except FlagsError:
        return []

    infos = []
    for entry in entries:
        try:
            value = bind(object, entry.field.name, entry.hint)
        except OptionTypeError:
            value = None

        param = entry.param
        if not param and not (value is not None and value.is_bool_flag()):
            param = "VALUE"

        default = ""
        if value is not None and value.scalar and value.get():
            default = str(value)

        infos.append(FieldInfo(entry.name, param, entry.help, default))
    return infos


def usage_line(program, label, object, /):
    """
    Return "program [--flag=PARAM] [-f] ... label", skipping empty parts.
    """
    parts = [program, *(f"[{info.spelling}]" for info in fields(object)), label]
    return " ".join(part for part in parts if part)


def print_help(output, program, label, object, /, *, colorful=False):
    """
    Write the usage line (when program is non-empty) and the help rows for
    object to output. object may be None, meaning no flags.
    """
    console = terminal(output, colorful)
    styles = defaultdict(str, {
        "usage-label": "bold #00E6FF",  # CYAN → signature info color
        "program-name": "bold #FF4D94",  # MAGENTA-PINK → brand pop
        "option-name": "bold #00E6FF",  # CYAN for value-bearing flags
        "flag-name": "bold #22C55E",  # GREEN for switches
        "metavar": "bold #FFD600",  # AMBER for parameters
        "positional-label": "bold #36C5F0",  # SKY-BLUE
        "argument-description": "#9CA3AF",  # Muted gray
        "default": "italic #737373",  # Dim gray
    } | host("__styles__", {}))

    def styler(style):
        return styles[style] if colorful else ""

    def spelling(info):
        style = "option-name" if info.param else "flag-name"
        text = Text(("-" if info.short else "--") + info.name, styler(style))
        if info.param:
            text.append("=").append(info.param, styler("metavar"))
        return text

    infos = fields(object)
    renders = []

    if program:
        usage = Text()
        usage.append("Usage", styler("usage-label")).append(": ")
        usage.append(program, styler("program-name"))
        for info in infos:
            usage.append(" [").append_text(spelling(info)).append("]")
        if label:
            usage.append(" ").append(label, styler("positional-label"))
        renders.append(usage)

    lefts = [(" " if info.short else "") + info.spelling for info in infos]
    width = max((len(left) for left in lefts if len(left) <= NAME_WIDTH), default=0)
    column = _INDENT + width + _GAP

    for info, left in zip(infos, lefts):
        row = Text(" " * (_INDENT + info.short)).append_text(spelling(info))

        help = Text(info.help, styler("argument-description"))
        if info.default:
            help.append(" [" if info.help else "[").append(info.default, styler("default")).append("]")

        if help:
            if len(left) > width:
                row.append("\n" + " " * column)
            else:
                row.append(" " * (column - _INDENT - len(left)))
            for index, line in enumerate(help.wrap(console, max(WIDTH - column, NAME_WIDTH))):
                line.rstrip()
                if index:
                    row.append("\n" + " " * column)
                row.append_text(line)
        renders.append(row)

    if renders:
        console.print(Text("\n").join(renders), soft_wrap=True)


__all__ = (
    "NAME_WIDTH",
    "WIDTH",
    "FieldInfo",
    "fields",
    "usage_line",
    "print_help",
)
