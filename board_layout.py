# board_layout.py
from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

from board_config import DAY_LABELS, DAY_SPAN, METRIC_FIELDS, MetricRow, ModuleKey
from board_models import BoardResult, Grid, ModuleBundle
from cell_numbers import clean_label, parse_number

_METRIC_BY_LABEL: Dict[str, MetricRow] = {m.value: m for m in MetricRow}


def match_module(label: str) -> Optional[ModuleKey]:
    # headers may carry qualifiers after the name, e.g. "TOSA Level (Line 2)"
    for key in ModuleKey:
        if label.startswith(key.value):
            return key
    return None


def match_metric(label: str) -> Optional[MetricRow]:
    return _METRIC_BY_LABEL.get(label)


def find_day_anchor(row: Sequence[Any]) -> Optional[int]:
    """Column where Mon..Sun start, contiguous and in order, or None."""
    labels = [clean_label(c) for c in row]
    for i in range(len(labels) - DAY_SPAN + 1):
        if tuple(labels[i:i + DAY_SPAN]) == DAY_LABELS:
            return i
    return None


def _read_series(row: Sequence[Any], start: int) -> List[float]:
    return [parse_number(row[start + i] if start + i < len(row) else None) for i in range(DAY_SPAN)]


@dataclass
class _BoardScan:
    current_module: Optional[ModuleKey] = None
    day_anchor: Optional[int] = None
    found: Dict[ModuleKey, Dict[str, List[Any]]] = field(default_factory=dict)

    def select(self, key: ModuleKey) -> None:
        self.current_module = key
        # a repeated header re-selects the module, it never clears it
        self.found.setdefault(key, {"days": [], "input": [], "output": [], "gap": [], "wip": []})

    def anchor(self, idx: int, row: Sequence[Any]) -> None:
        self.day_anchor = idx
        if self.current_module is not None:
            self.found[self.current_module]["days"] = [clean_label(c) for c in row[idx:idx + DAY_SPAN]]

    def metric(self, which: MetricRow, row: Sequence[Any]) -> None:
        if self.current_module is None or self.day_anchor is None:
            return
        self.found[self.current_module][METRIC_FIELDS[which]] = _read_series(row, self.day_anchor)

    def bundles(self) -> Dict[ModuleKey, ModuleBundle]:
        return {key: ModuleBundle(**{k: tuple(v) for k, v in parts.items()})
                for key, parts in self.found.items()}


def extract_board(grid: Grid) -> Optional[BoardResult]:
    """
    Scan a board-style sheet top to bottom.

    Module header rows select the active module, a Mon..Sun row fixes the
    day columns, and the four named metric rows below it are read through
    parse_number. Returns None when no module ended up with input, output
    or gap data, so the caller can fall back to the tall-row layout.
    """
    scan = _BoardScan()
    for row in grid or []:
        if not row:
            continue
        first = clean_label(row[0])
        key = match_module(first)
        if key is not None:
            scan.select(key)
            continue
        idx = find_day_anchor(row)
        if idx is not None:
            scan.anchor(idx, row)
            continue
        which = match_metric(first)
        if which is not None:
            scan.metric(which, row)
    modules = scan.bundles()
    if not any(b.has_data() for b in modules.values()):
        return None
    return BoardResult(modules=modules)
