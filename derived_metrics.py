# derived_metrics.py
from __future__ import annotations
import re
from dataclasses import replace
from datetime import date, datetime
from typing import Any, Dict, Iterable, List, Optional, Sequence, Union

import numpy as np
from dateutil import parser as dateparser

from board_config import CARD_TOLERANCE, ROW_TOLERANCE, ModuleKey
from board_models import (
    BoardResult, BucketMode, DayRow, DaySeries, DerivedTotals, EmptyResult, ExtractionResult,
    FlatRecord, FlatResult, MetricLine, ModuleBundle, ModuleView, Status, SummaryCard, Trend,
)

_WEEK_RE = re.compile(r"WK\s*(\d+)", re.IGNORECASE)
WEEKS_PER_QUARTER = 13


# -----------------------------
# Series helpers
# -----------------------------
def _pad(a: Sequence[float], b: Sequence[float]):
    n = max(len(a), len(b))
    x = np.zeros(n, dtype=float)
    y = np.zeros(n, dtype=float)
    x[:len(a)] = a
    y[:len(b)] = b
    return x, y


def gap_series(inp: Sequence[float], out: Sequence[float]) -> DaySeries:
    x, y = _pad(inp, out)
    return tuple(float(v) for v in x - y)


def wip_series(bundle: ModuleBundle) -> DaySeries:
    if bundle.wip:
        return tuple(bundle.wip)
    x, y = _pad(bundle.input, bundle.output)
    return tuple(float(v) for v in np.maximum(0.0, x - y))


def module_totals(bundle: ModuleBundle) -> DerivedTotals:
    s_in = float(sum(bundle.input))
    s_out = float(sum(bundle.output))
    gap = float(sum(bundle.gap)) if bundle.gap else float(sum(gap_series(bundle.input, bundle.output)))
    wip = float(sum(bundle.wip)) if bundle.wip else max(0.0, s_in - s_out)
    return DerivedTotals(input=s_in, output=s_out, gap=gap, wip=wip)


def record_totals(records: Iterable[Union[FlatRecord, DayRow]]) -> DerivedTotals:
    s_in = s_out = s_gap = 0.0
    for r in records:
        s_in += float(r.input or 0)
        s_out += float(r.output or 0)
        s_gap += float(r.gap or 0)
    return DerivedTotals(input=s_in, output=s_out, gap=s_gap, wip=max(0.0, s_in - s_out))


summary_totals = record_totals


def module_view(bundle: ModuleBundle) -> ModuleView:
    count = max(len(bundle.days), len(bundle.input), len(bundle.output)) or 1
    return ModuleView(
        days=tuple(bundle.days),
        input=tuple(bundle.input),
        output=tuple(bundle.output),
        gap=gap_series(bundle.input, bundle.output),
        wip=wip_series(bundle),
        totals=module_totals(bundle),
        count=count,
    )


# -----------------------------
# Classification
# -----------------------------
def trend(series: Sequence[float]) -> Trend:
    vals = list(series or [])
    if len(vals) < 2:
        return Trend.FLAT
    window = vals[-3:]
    delta = window[-1] - window[0]
    if delta > 0:
        return Trend.RISING
    if delta < 0:
        return Trend.FALLING
    return Trend.FLAT


def status(actual: float, target: float, reverse_good: bool = False,
           tolerance: float = ROW_TOLERANCE) -> Status:
    diff = (actual - target) / (target or 1)
    good = diff <= 0 if reverse_good else diff >= 0
    if good:
        return Status.GOOD
    if abs(diff) <= tolerance:
        return Status.CAUTION
    return Status.CRITICAL


# -----------------------------
# Periods + buckets
# -----------------------------
def as_mode(mode: Union[str, BucketMode]) -> BucketMode:
    if isinstance(mode, BucketMode):
        return mode
    return BucketMode(str(mode).strip().lower())


def week_id(value: Any) -> str:
    if isinstance(value, datetime):
        d = value.date()
    elif isinstance(value, date):
        d = value
    else:
        d = dateparser.parse(str(value)).date()
    return f"WK{d.isocalendar()[1]}"


def period_label(mode: Union[str, BucketMode], week: str) -> str:
    mode = as_mode(mode)
    if mode is not BucketMode.QUARTERLY:
        return week
    m = _WEEK_RE.search(week or "")
    if not m:
        return week
    q = min(4, (max(int(m.group(1)), 1) - 1) // WEEKS_PER_QUARTER + 1)
    return week[:m.start()] + f"Q{q}" + week[m.end():]


def aggregate(rows: Sequence[DayRow], mode: Union[str, BucketMode], period: str) -> List[DayRow]:
    """Daily passes rows through; weekly/quarterly sum everything into one bucket."""
    mode = as_mode(mode)
    if mode is BucketMode.DAILY:
        return list(rows)
    t = record_totals(rows)
    return [DayRow(name=period_label(mode, period), input=t.input, output=t.output, gap=t.gap)]


def scaled_target(base: Optional[float], count: int, mode: Union[str, BucketMode]) -> float:
    if base is None:
        return 0.0
    if as_mode(mode) is BucketMode.DAILY:
        return float(base)
    return float(base) * (count or 1)


# -----------------------------
# Consumer views
# -----------------------------
def chart_rows(result: ExtractionResult, module: Optional[ModuleKey] = None) -> List[DayRow]:
    if isinstance(result, BoardResult):
        key = module if module in result.modules else result.default_module
        if key is None:
            return []
        v = module_view(result.modules[key])
        names = [v.days[i] if i < len(v.days) else f"Day {i + 1}" for i in range(len(v.gap))]
        x, y = _pad(v.input, v.output)
        return [DayRow(name=n, input=float(a), output=float(b), gap=g)
                for n, a, b, g in zip(names, x, y, v.gap)]
    if isinstance(result, FlatResult):
        return [DayRow(name=r.name, input=r.input, output=r.output, gap=r.gap) for r in result.records]
    if isinstance(result, EmptyResult):
        return []
    raise TypeError(f"Unknown extraction result: {result!r}")


def card_totals(result: ExtractionResult, module: Optional[ModuleKey] = None,
                mode: Union[str, BucketMode] = BucketMode.DAILY, period: str = "") -> DerivedTotals:
    """
    Top-line totals for the summary cards.

    Input, output and gap come from the (bucketed) chart rows. For a board the
    WIP figure follows the active module, so a captured WIP row wins over the
    clamped input - output difference.
    """
    t = summary_totals(aggregate(chart_rows(result, module), mode, period))
    if isinstance(result, BoardResult):
        key = module if module in result.modules else result.default_module
        if key is not None:
            return replace(t, wip=module_totals(result.modules[key]).wip)
    return t


def module_metric_rows(view: ModuleView, mode: Union[str, BucketMode],
                       targets: Dict[str, float]) -> List[MetricLine]:
    t = view.totals

    def line(name, target, actual, series, reverse_good=False, hide=False):
        return MetricLine(
            name=name,
            target=target,
            actual=actual,
            series=tuple(series),
            trend=trend(series),
            status=status(actual, target, reverse_good=reverse_good, tolerance=ROW_TOLERANCE),
            reverse_good=reverse_good,
            hide_target_actual=hide,
        )

    return [
        line("Daily Input", scaled_target(targets.get("input"), view.count, mode), t.input, view.input),
        line("Daily Output", scaled_target(targets.get("output"), view.count, mode), t.output, view.output),
        line("Accumulated Gap", 0.0, t.gap, view.gap, reverse_good=True, hide=True),
        line("WIP Level", float(targets.get("wip") or 0), t.wip, view.wip, reverse_good=True),
    ]


def summary_cards(totals: DerivedTotals, mode: Union[str, BucketMode], count: int,
                  targets: Dict[str, float]) -> List[SummaryCard]:
    specs = [
        ("Total Input", totals.input, scaled_target(targets.get("input"), count, mode), False),
        ("Total Output", totals.output, scaled_target(targets.get("output"), count, mode), False),
        ("Accumulated Gap", totals.gap, float(targets.get("gap") or 0), True),
        ("WIP", totals.wip, float(targets.get("wip") or 0), True),
    ]
    return [
        SummaryCard(label=label, value=value, target=target, reverse_good=rev,
                    status=status(value, target, reverse_good=rev, tolerance=CARD_TOLERANCE))
        for label, value, target, rev in specs
    ]
