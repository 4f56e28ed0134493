"""printf-style message formatting shared by every sink.

``format_message(template, *args)`` interpolates positional arguments into
*template* using these placeholders:

=======  ==============================================
``%s``   ``str(arg)``
``%d``   numeric value, ``3.0`` as ``3`` (``NaN`` when not numeric)
``%i``   integer value, truncated (``NaN`` when not numeric)
``%f``   float value (``NaN`` when not numeric)
``%j``   JSON encoding of the argument
``%o``   ``repr(arg)``
``%O``   ``repr(arg)``
``%%``   a literal ``%`` (only when arguments are given)
=======  ==============================================

A placeholder with no argument left is kept verbatim.  Arguments left over
after the template is consumed are appended, separated by single spaces.
"""

from __future__ import annotations

import json
import re
from collections.abc import Callable
from typing import Any

_PLACEHOLDER = re.compile(r"%[sdifjoO%]")


def _as_number(arg: Any, convert: Callable[[Any], Any]) -> str:
    if isinstance(arg, bool):
        return str(int(arg))
    try:
        return str(convert(arg))
    except (TypeError, ValueError, OverflowError):
        return "NaN"


def _number(arg: Any) -> float | int:
    if isinstance(arg, int):
        return arg
    value = float(arg)
    if value.is_integer():
        return int(value)
    return value


def _integer(arg: Any) -> int:
    if isinstance(arg, int):
        return arg
    return int(float(arg))


def _as_json(arg: Any) -> str:
    try:
        return json.dumps(arg, default=str)
    except ValueError:
        # Circular structures
        return "[Circular]"


def _render(conversion: str, arg: Any) -> str:
    if conversion == "s":
        return str(arg)
    if conversion == "d":
        return _as_number(arg, _number)
    if conversion == "i":
        return _as_number(arg, _integer)
    if conversion == "f":
        return _as_number(arg, float)
    if conversion == "j":
        return _as_json(arg)
    return repr(arg)


def _render_extra(arg: Any) -> str:
    return arg if isinstance(arg, str) else repr(arg)


def format_message(template: str, *args: Any) -> str:
    """Interpolate *args* into *template*.

    Examples
    --------
    >>> format_message("hi %s", "x")
    'hi x'
    >>> format_message("%d items", 3.0)
    '3 items'
    >>> format_message("done", 1, "two")
    'done 1 two'
    """
    if not args:
        return template

    remaining = list(args)

    def _substitute(match: re.Match[str]) -> str:
        conversion = match.group()[1]
        if conversion == "%":
            return "%"
        if not remaining:
            return match.group()
        return _render(conversion, remaining.pop(0))

    formatted = _PLACEHOLDER.sub(_substitute, template)
    if remaining:
        formatted = " ".join([formatted, *(_render_extra(arg) for arg in remaining)])
    return formatted
