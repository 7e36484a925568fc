# extraction.py
from __future__ import annotations
import csv
import io
import logging
import math
import os
from typing import Any, List, Optional, Tuple

import pandas as pd
from openpyxl import load_workbook

from board_config import UPLOAD_ERROR_MESSAGE
from board_layout import extract_board
from board_models import EmptyResult, ExtractionResult, FlatResult, Grid
from tall_rows import extract_flat

ACCEPTED_EXTENSIONS = (".xlsx", ".xlsm", ".xlsb", ".xls", ".csv")


class DecodeFailure(RuntimeError):
    """Raw bytes could not be turned into a grid."""


def _is_empty_cell(v: Any) -> bool:
    if v is None:
        return True
    if isinstance(v, float) and math.isnan(v):
        return True
    return isinstance(v, str) and v.strip() == ""


def _trim_row(row) -> List[Any]:
    vals = [None if (isinstance(v, float) and math.isnan(v)) else v for v in row]
    while vals and _is_empty_cell(vals[-1]):
        vals.pop()
    return vals


def _rows_from_xlsx(data: bytes) -> List[List[Any]]:
    wb = load_workbook(io.BytesIO(data), data_only=True, read_only=True)
    try:
        ws = wb.worksheets[0]
        return [_trim_row(r) for r in ws.iter_rows(values_only=True)]
    finally:
        wb.close()


def _rows_from_pandas(data: bytes, engine: Optional[str]) -> List[List[Any]]:
    df = pd.read_excel(io.BytesIO(data), sheet_name=0, header=None, engine=engine)
    return [_trim_row(r) for r in df.itertuples(index=False, name=None)]


def _rows_from_csv(data: bytes) -> List[List[Any]]:
    text = data.decode("utf-8-sig")
    return [_trim_row(r) for r in csv.reader(io.StringIO(text))]


def decode_grid(data: bytes, filename: str) -> Grid:
    """
    Decode the first sheet of an uploaded file into a list of rows.

    The reader is picked from the file extension alone; anything that is not
    a known workbook extension is read as delimited text.
    """
    ext = os.path.splitext(filename or "")[1].lower()
    try:
        if ext in (".xlsx", ".xlsm"):
            return _rows_from_xlsx(data)
        if ext == ".xlsb":
            return _rows_from_pandas(data, engine="pyxlsb")
        if ext == ".xls":
            return _rows_from_pandas(data, engine=None)
        return _rows_from_csv(data)
    except Exception as e:
        raise DecodeFailure(f"Could not decode '{filename}': {e}") from e


def extract(grid: Grid, logger: Optional[logging.Logger] = None) -> ExtractionResult:
    try:
        board = extract_board(grid)
    except Exception as e:
        if logger:
            logger.warning(f"[extract] board scan failed, using tall rows: {e}")
        board = None
    if board is not None:
        if logger:
            logger.info(f"[extract] board layout | modules={[k.value for k in board.modules]}")
        return board
    records = extract_flat(grid)
    if logger:
        logger.info(f"[extract] tall-row layout | records={len(records)}")
    return FlatResult(records=tuple(records))


def load_upload(data: bytes, filename: str, logger: Optional[logging.Logger] = None
                ) -> Tuple[ExtractionResult, Optional[str]]:
    """Bytes in, (result, user-facing error or None) out. Never raises for bad files."""
    try:
        grid = decode_grid(data, filename)
    except DecodeFailure as e:
        if logger:
            logger.error(f"[upload] {e}")
        return EmptyResult(), UPLOAD_ERROR_MESSAGE
    return extract(grid, logger=logger), None
