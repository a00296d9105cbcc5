"""
Duration text in Go syntax, for timedelta fields.

    >>> parse_duration("1h30m")
    datetime.timedelta(seconds=5400)
    >>> format_duration(timedelta(milliseconds=1200))
    '1.2s'

Accepted input is a signed sequence of decimal numbers, each with an optional
fraction and a unit: "ns", "us" (or "µs"), "ms", "s", "m", "h". "0" alone is
allowed. Resolution is one microsecond (timedelta's), so nanoseconds round.
"""
import re
from datetime import timedelta

_UNITS = {
    "ns": 0.001,
    "us": 1,
    "µs": 1,  # U+00B5 micro sign
    "μs": 1,  # U+03BC greek mu
    "ms": 1_000,
    "s": 1_000_000,
    "m": 60_000_000,
    "h": 3_600_000_000,
}

_SEGMENT = re.compile(r"(\d+\.?\d*|\.\d+)(ns|us|µs|μs|ms|s|m|h)")


def parse_duration(text, /):
    """
    Parse Go duration text ("300ms", "-1.5h", "2h45m") into a timedelta.

    Raises ValueError on malformed input.
    """
    if not isinstance(text, str):
        raise TypeError("parse_duration() argument must be a string")

    body = text
    sign = 1
    if body[:1] in ("-", "+"):
        sign = -1 if body[0] == "-" else 1
        body = body[1:]

    if body == "0":
        return timedelta(0)
    if not body:
        raise ValueError(f"invalid duration {text!r}")

    microseconds = 0.0
    index = 0
    while index < len(body):
        if not (match := _SEGMENT.match(body, index)):
            if re.match(r"\d*\.?\d*$", body[index:]):
                raise ValueError(f"missing unit in duration {text!r}")
            raise ValueError(f"invalid duration {text!r}")
        number, unit = match.groups()
        microseconds += float(number) * _UNITS[unit]
        index = match.end()

    return timedelta(microseconds=sign * round(microseconds))


def _decimal(value, digits, /):
    """
    render an integer scaled by 10**digits, dropping trailing zeros.
    """
    whole, fraction = divmod(value, 10 ** digits)
    if fraction := f"{fraction:0{digits}d}".rstrip("0") if digits else "":
        return f"{whole}.{fraction}"
    return str(whole)


def format_duration(value, /):
    """
    Render a timedelta the way Go's Duration.String does ("1h0m0s", "1.2s", "150ms").
    """
    if not isinstance(value, timedelta):
        raise TypeError("format_duration() argument must be a timedelta")

    total = (value.days * 86_400 + value.seconds) * 1_000_000 + value.microseconds
    if total == 0:
        return "0s"

    sign = "-" if total < 0 else ""
    total = abs(total)

    # sub-second values use the largest unit that keeps a non-zero integer part
    if total < 1_000:
        return f"{sign}{total}µs"
    if total < 1_000_000:
        return f"{sign}{_decimal(total, 3)}ms"

    hours, total = divmod(total, 3_600_000_000)
    minutes, total = divmod(total, 60_000_000)
    seconds = _decimal(total, 6) + "s"

    if hours:
        return f"{sign}{hours}h{minutes}m{seconds}"
    if minutes:
        return f"{sign}{minutes}m{seconds}"
    return f"{sign}{seconds}"


__all__ = (
    "parse_duration",
    "format_duration",
)
