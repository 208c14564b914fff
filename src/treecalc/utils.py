from __future__ import annotations

import logging
import math
import os as _os
import sys
from typing import Union

DEFAULT_HISTORY_LIMIT = 1000
DISPLAY_DECIMALS = 12


def debug_py_trace_enabled() -> bool:
    """Check whether Python tracebacks should accompany reported errors."""
    return _os.environ.get("TREECALC_DEBUG_PY_TRACE", "") not in ("", "0")


def history_limit() -> int:
    """Capacity of the calculation history, from TREECALC_HISTORY_LIMIT."""
    raw = _os.environ.get("TREECALC_HISTORY_LIMIT")
    if raw is None:
        return DEFAULT_HISTORY_LIMIT

    try:
        limit = int(raw)
    except ValueError:
        return DEFAULT_HISTORY_LIMIT

    return limit if limit > 0 else DEFAULT_HISTORY_LIMIT


def configure_logging() -> None:
    """Attach a stderr handler at the level named by TREECALC_LOG_LEVEL."""
    level_name = _os.environ.get("TREECALC_LOG_LEVEL", "WARNING").upper()
    level = logging.getLevelName(level_name)
    if not isinstance(level, int):
        level = logging.WARNING

    logging.basicConfig(
        stream=sys.stderr,
        level=level,
        format="%(levelname)s %(name)s: %(message)s",
    )


def format_number(value: Union[int, float]) -> str:
    """Render a result for display.

    Floats are rounded to twelve decimals so ``0.1 + 0.2`` shows as ``0.3``;
    integral floats drop their fractional part.
    """
    if isinstance(value, bool) or isinstance(value, int):
        try:
            return str(int(value))
        except ValueError:
            # past the interpreter's int-to-str digit limit
            return _scientific(int(value))

    if math.isnan(value) or math.isinf(value):
        return str(value)

    if value.is_integer() and abs(value) < 2 ** 63:
        return str(int(value))

    text = f"{value:.{DISPLAY_DECIMALS}f}".rstrip("0").rstrip(".")
    if text in ("-0", ""):
        return "0"
    return text


def _scientific(value: int) -> str:
    """Mantissa/exponent form of an int too long to print in full.

    The mantissa keeps twelve decimals and is truncated, not rounded.
    """
    sign = "-" if value < 0 else ""
    magnitude = abs(value)
    exponent = int(math.log10(magnitude))

    head = magnitude // 10 ** (exponent - DISPLAY_DECIMALS)
    # log10 of a huge int can land one off either side of the true exponent
    while head >= 10 ** (DISPLAY_DECIMALS + 1):
        exponent += 1
        head //= 10
    while head < 10 ** DISPLAY_DECIMALS:
        exponent -= 1
        head = magnitude // 10 ** (exponent - DISPLAY_DECIMALS)

    digits = str(head)
    mantissa = f"{digits[0]}.{digits[1:]}".rstrip("0").rstrip(".")
    return f"{sign}{mantissa}e+{exponent}"
