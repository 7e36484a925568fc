# cell_numbers.py
from __future__ import annotations
import math
from typing import Any


def clean_label(s: Any) -> str:
    if s is None:
        return ""
    if isinstance(s, float) and math.isnan(s):
        return ""
    return str(s).strip()


def parse_number(x: Any) -> float:
    """
    Cell value -> finite float, never raises.

    Empty, "-" and anything unparseable become 0. "(1,234)" is -1234 and
    thousands separators are dropped.
    """
    if x is None or isinstance(x, bool):
        return 0.0
    if isinstance(x, (int, float)):
        v = float(x)
        return v if math.isfinite(v) else 0.0
    s = clean_label(x)
    if s == "" or s == "-":
        return 0.0
    neg = False
    if len(s) >= 2 and s.startswith("(") and s.endswith(")"):
        neg = True
        s = s[1:-1]
    s = s.replace(",", "").strip()
    # float() would accept "1_000"
    if "_" in s:
        return 0.0
    try:
        v = float(s)
    except ValueError:
        return 0.0
    if not math.isfinite(v):
        return 0.0
    return -v if neg else v
