"""Lenient value coercion used when turning raw form/config values into inputs."""
import math
from typing import Any, Iterable, Mapping, Optional

_TRUE_WORDS = {"true", "yes", "y", "on", "1"}
_FALSE_WORDS = {"false", "no", "n", "off", "0", ""}


def get_nested(d: Mapping[str, Any], path: Iterable[str], default: Any = None) -> Any:
    """Safely get nested mapping value using a sequence of keys."""
    result: Any = d
    for key in path:
        if not isinstance(result, Mapping) or key not in result:
            return default
        result = result[key]
    return result


def as_float(v: Any, default: Optional[float] = None) -> Optional[float]:
    """Safely convert value to float with fallback.

    Blank strings count as missing, so a cleared form field falls back to the
    default instead of failing. So do NaN and infinities.
    """
    if v is None or isinstance(v, bool):
        return default
    if isinstance(v, str) and not v.strip():
        return default
    try:
        f = float(v)
    except (ValueError, TypeError, OverflowError):
        return default
    return f if math.isfinite(f) else default


def as_bool(v: Any, default: bool = False) -> bool:
    """Interpret switches written as bools, numbers or words ("yes", "off")."""
    if v is None:
        return default
    if isinstance(v, bool):
        return v
    if isinstance(v, (int, float)):
        return v != 0
    word = str(v).strip().lower()
    if word in _TRUE_WORDS:
        return True
    if word in _FALSE_WORDS:
        return False
    return default
