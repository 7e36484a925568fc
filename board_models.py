# board_models.py
from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Literal, Optional, Sequence, Tuple, Union

from board_config import ModuleKey

Grid = Sequence[Sequence[Any]]
DaySeries = Tuple[float, ...]


class Status(str, Enum):
    GOOD = "good"
    CAUTION = "caution"
    CRITICAL = "critical"


class Trend(str, Enum):
    RISING = "rising"
    FALLING = "falling"
    FLAT = "flat"


class BucketMode(str, Enum):
    DAILY = "daily"
    WEEKLY = "weekly"
    QUARTERLY = "quarterly"


@dataclass(frozen=True)
class ModuleBundle:
    # a metric row never seen leaves its series empty, not zero-filled
    days: Tuple[str, ...] = ()
    input: DaySeries = ()
    output: DaySeries = ()
    gap: DaySeries = ()
    wip: DaySeries = ()

    def has_data(self) -> bool:
        return bool(self.input or self.output or self.gap)


@dataclass(frozen=True)
class FlatRecord:
    name: str
    input: float
    output: float
    gap: float


@dataclass(frozen=True)
class BoardResult:
    modules: Dict[ModuleKey, ModuleBundle]
    kind: Literal["board"] = "board"

    @property
    def default_module(self) -> Optional[ModuleKey]:
        return next(iter(self.modules), None)


@dataclass(frozen=True)
class FlatResult:
    records: Tuple[FlatRecord, ...]
    kind: Literal["flat"] = "flat"


@dataclass(frozen=True)
class EmptyResult:
    kind: Literal["empty"] = "empty"


ExtractionResult = Union[BoardResult, FlatResult, EmptyResult]


@dataclass(frozen=True)
class DerivedTotals:
    input: float = 0.0
    output: float = 0.0
    gap: float = 0.0
    wip: float = 0.0


@dataclass(frozen=True)
class DayRow:
    name: str
    input: float
    output: float
    gap: float


@dataclass(frozen=True)
class ModuleView:
    days: Tuple[str, ...]
    input: DaySeries
    output: DaySeries
    gap: DaySeries
    wip: DaySeries
    totals: DerivedTotals
    count: int


@dataclass(frozen=True)
class MetricLine:
    name: str
    target: float
    actual: float
    series: DaySeries
    trend: Trend
    status: Status
    reverse_good: bool = False
    hide_target_actual: bool = False

    @property
    def gap_to_target(self) -> float:
        return self.actual - self.target


@dataclass(frozen=True)
class SummaryCard:
    label: str
    value: float
    target: float
    status: Status
    reverse_good: bool = False
