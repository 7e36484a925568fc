# collect_board.py
from __future__ import annotations
import argparse
import csv
import logging
import os
import sys
from datetime import datetime
from typing import Any, Dict, List, Optional

from board_config import load_targets
from board_models import BoardResult, BucketMode, EmptyResult, ExtractionResult, FlatResult
from derived_metrics import (
    aggregate, card_totals, chart_rows, module_metric_rows, module_view, period_label, summary_cards,
    week_id,
)
from extraction import DecodeFailure, decode_grid, extract

HEADERS = ["source_kind", "module", "day", "input", "output", "gap", "wip"]


def setup_logging(log_path: Optional[str] = "board_metrics.log") -> logging.Logger:
    logger = logging.getLogger("board_metrics")
    logger.setLevel(logging.INFO)
    fmt = logging.Formatter("%(asctime)s | %(levelname)s | %(message)s")
    if not logger.handlers:
        if log_path:
            fh = logging.FileHandler(log_path, encoding="utf-8")
            fh.setFormatter(fmt)
            fh.setLevel(logging.INFO)
            logger.addHandler(fh)
        ch = logging.StreamHandler(sys.stdout)
        ch.setFormatter(fmt)
        ch.setLevel(logging.INFO)
        logger.addHandler(ch)
    return logger


def _fmt(v: float) -> Any:
    return int(v) if float(v).is_integer() else round(float(v), 4)


def build_rows(result: ExtractionResult, mode: BucketMode, period: str) -> List[Dict[str, Any]]:
    rows: List[Dict[str, Any]] = []
    if isinstance(result, BoardResult):
        for key, bundle in result.modules.items():
            view = module_view(bundle)
            if mode is BucketMode.DAILY:
                for i, r in enumerate(chart_rows(result, key)):
                    wip = view.wip[i] if i < len(view.wip) else 0.0
                    rows.append({"source_kind": result.kind, "module": key.value, "day": r.name,
                                 "input": _fmt(r.input), "output": _fmt(r.output),
                                 "gap": _fmt(r.gap), "wip": _fmt(wip)})
            else:
                bucket = aggregate(chart_rows(result, key), mode, period)[0]
                rows.append({"source_kind": result.kind, "module": key.value, "day": bucket.name,
                             "input": _fmt(bucket.input), "output": _fmt(bucket.output),
                             "gap": _fmt(bucket.gap), "wip": _fmt(view.totals.wip)})
    elif isinstance(result, FlatResult):
        for r in aggregate(chart_rows(result), mode, period):
            rows.append({"source_kind": result.kind, "module": "", "day": r.name,
                         "input": _fmt(r.input), "output": _fmt(r.output), "gap": _fmt(r.gap),
                         "wip": _fmt(max(0.0, r.input - r.output))})
    elif isinstance(result, EmptyResult):
        pass
    return rows


def log_summary(logger: logging.Logger, result: ExtractionResult, mode: BucketMode,
                module_targets, summary_targets) -> None:
    if isinstance(result, BoardResult):
        for key, bundle in result.modules.items():
            view = module_view(bundle)
            lines = module_metric_rows(view, mode, module_targets[key])
            detail = " | ".join(f"{m.name}={_fmt(m.actual)}/{_fmt(m.target)} {m.status.value} {m.trend.value}"
                                for m in lines)
            logger.info(f"[{key.value}] days={view.count} | {detail}")
    # top-line cards follow the default module, as on the dashboard
    rows = chart_rows(result)
    cards = summary_cards(card_totals(result), mode, len(rows) or 1, summary_targets)
    logger.info("[summary] " + " | ".join(f"{c.label}={_fmt(c.value)} {c.status.value}" for c in cards))


def main():
    p = argparse.ArgumentParser(description="Normalize a production board workbook (.xlsx/.xlsm/.xlsb/.xls/.csv) into per-module daily series.")
    p.add_argument("workbook", help="Path to the board workbook or tall CSV")
    p.add_argument("--out", help="CSV output path", default="board_series.csv")
    p.add_argument("--config", help="Path to board_targets.json with target overrides")
    p.add_argument("--mode", choices=[m.value for m in BucketMode], default=BucketMode.DAILY.value,
                   help="daily keeps one row per day; weekly/quarterly sum into one bucket")
    p.add_argument("--week", help="Period id used to label buckets, e.g. WK6")
    p.add_argument("--date", help="Any date inside the period; the week id is derived from it")
    p.add_argument("--log", help="Log file path", default="board_metrics.log")
    args = p.parse_args()
    logger = setup_logging(args.log)
    if not os.path.exists(args.workbook):
        print(f"Workbook not found: {args.workbook}", file=sys.stderr)
        sys.exit(2)
    try:
        module_targets, summary_targets = load_targets(args.config, logger=logger)
    except Exception as e:
        print(f"Failed to read config '{args.config}': {e}", file=sys.stderr)
        sys.exit(2)
    mode = BucketMode(args.mode)
    if args.week:
        week = args.week.strip()
    else:
        try:
            week = week_id(args.date) if args.date else week_id(datetime.now())
        except (ValueError, OverflowError) as e:
            print(f"Could not parse --date '{args.date}': {e}", file=sys.stderr)
            sys.exit(2)
    start = datetime.now()
    logger.info(f"[collect] START | file={os.path.basename(args.workbook)} | mode={mode.value} | period={period_label(mode, week)}")
    with open(args.workbook, "rb") as f:
        data = f.read()
    try:
        grid = decode_grid(data, args.workbook)
    except DecodeFailure as e:
        logger.error(f"[collect] FAIL | {e}")
        sys.exit(1)
    result = extract(grid, logger=logger)
    rows = build_rows(result, mode, week)
    if not rows:
        logger.warning("[collect] no module series or records found (check layout/column names)")
    else:
        log_summary(logger, result, mode, module_targets, summary_targets)
    with open(args.out, "w", newline="", encoding="utf-8") as f:
        w = csv.DictWriter(f, fieldnames=HEADERS)
        w.writeheader()
        for r in rows:
            w.writerow({h: r.get(h, "") for h in HEADERS})
    logger.info(f"[collect] DONE | kind={result.kind} | rows={len(rows)} -> {args.out} | elapsed={datetime.now() - start}")


if __name__ == "__main__":
    main()
