# board_config.py
from __future__ import annotations
import json
import logging
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Optional, Tuple


class ModuleKey(str, Enum):
    TOSA = "TOSA Level"
    PCBA_ASSY = "Module PCBA Assy"
    INTERNAL = "Module internal"
    FG = "FG Level"


class MetricRow(str, Enum):
    INPUT = "Daily Actual Input"
    OUTPUT = "Actual Output"
    GAP = "Accumulate gap"
    WIP = "WIP"


# canonical order of the day-anchor row
DAY_LABELS: Tuple[str, ...] = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")
DAY_SPAN = len(DAY_LABELS)

# bundle field fed by each metric row
METRIC_FIELDS: Dict[MetricRow, str] = {
    MetricRow.INPUT: "input",
    MetricRow.OUTPUT: "output",
    MetricRow.GAP: "gap",
    MetricRow.WIP: "wip",
}

ROW_TOLERANCE = 0.05
CARD_TOLERANCE = 0.03

DEFAULT_TARGETS_PATH = Path("board_targets.json")

# per-day base targets; WIP is a level and never scaled
MODULE_TARGETS: Dict[ModuleKey, Dict[str, float]] = {
    ModuleKey.TOSA: {"input": 765, "output": 758, "wip": 12665},
    ModuleKey.PCBA_ASSY: {"input": 950, "output": 940, "wip": 15000},
    ModuleKey.INTERNAL: {"input": 800, "output": 820, "wip": 11000},
    ModuleKey.FG: {"input": 500, "output": 500, "wip": 20000},
}
SUMMARY_TARGETS: Dict[str, float] = {"input": 765, "output": 758, "gap": 0, "wip": 12665}

UPLOAD_ERROR_MESSAGE = (
    "Could not read the file. Check that it has name,input,output,gap columns "
    "or uses the production board template."
)


def _merge_target_block(base: Dict[str, float], override: Any) -> Dict[str, float]:
    out = dict(base)
    if not isinstance(override, dict):
        return out
    for k, v in override.items():
        if k not in out:
            continue
        try:
            out[k] = float(v)
        except (TypeError, ValueError):
            continue
    return out


def parse_targets(data: Dict[str, Any], logger: Optional[logging.Logger] = None
                  ) -> Tuple[Dict[ModuleKey, Dict[str, float]], Dict[str, float]]:
    """
    Merge a target override document onto the defaults:

        {"modules": {"TOSA Level": {"input": 800}}, "summary": {"wip": 12000}}

    Unknown module names and non-numeric values are skipped.
    """
    modules = {k: dict(v) for k, v in MODULE_TARGETS.items()}
    blocks = data.get("modules") or {}
    if not isinstance(blocks, dict):
        if logger:
            logger.warning(f"[config] 'modules' must be an object, got {type(blocks).__name__}; ignored")
        blocks = {}
    for name, block in blocks.items():
        try:
            key = ModuleKey(str(name).strip())
        except ValueError:
            if logger:
                logger.warning(f"[config] unknown module '{name}' ignored")
            continue
        modules[key] = _merge_target_block(modules[key], block)
    summary = _merge_target_block(SUMMARY_TARGETS, data.get("summary"))
    return modules, summary


def load_targets(path: Optional[str | Path] = None, logger: Optional[logging.Logger] = None
                 ) -> Tuple[Dict[ModuleKey, Dict[str, float]], Dict[str, float]]:
    p = Path(path) if path else DEFAULT_TARGETS_PATH
    if not p.exists():
        if path:
            raise FileNotFoundError(f"Targets config not found: {p}")
        return parse_targets({}, logger)
    with open(p, "r", encoding="utf-8") as f:
        data = json.load(f)
    if not isinstance(data, dict):
        raise ValueError(f"Targets config must be a JSON object: {p}")
    return parse_targets(data, logger)
