# tall_rows.py
from __future__ import annotations
from typing import Any, Dict, List, Optional, Sequence

from board_models import FlatRecord, Grid
from cell_numbers import clean_label, parse_number

NAME_HEADERS = ("name", "day")


def is_blank_row(row: Optional[Sequence[Any]]) -> bool:
    return not row or all(clean_label(c) == "" for c in row)


def _header_index(header: Sequence[Any]) -> Dict[str, int]:
    idx: Dict[str, int] = {}
    for i, c in enumerate(header):
        k = clean_label(c).lower()
        if k and k not in idx:
            idx[k] = i
    return idx


def _cell(row: Sequence[Any], col: Optional[int]) -> Any:
    if col is None or col >= len(row):
        return None
    return row[col]


def extract_flat(grid: Grid) -> List[FlatRecord]:
    rows = [r for r in (grid or []) if not is_blank_row(r)]
    if not rows:
        return []
    cols = _header_index(rows[0])
    name_col = next((cols[h] for h in NAME_HEADERS if h in cols), None)
    input_col = cols.get("input")
    output_col = cols.get("output")
    gap_col = cols.get("gap")
    out: List[FlatRecord] = []
    for n, row in enumerate(rows[1:], start=1):
        name = clean_label(_cell(row, name_col)) or f"Row {n}"
        inp = parse_number(_cell(row, input_col))
        outp = parse_number(_cell(row, output_col))
        gap = parse_number(_cell(row, gap_col)) if gap_col is not None else inp - outp
        out.append(FlatRecord(name=name, input=inp, output=outp, gap=gap))
    return out
