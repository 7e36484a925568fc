import io
import logging

import numpy as np
import pandas as pd
import pytest
from openpyxl import Workbook

from board_config import UPLOAD_ERROR_MESSAGE, ModuleKey
from board_models import BoardResult, EmptyResult, FlatResult
from extraction import ACCEPTED_EXTENSIONS, DecodeFailure, decode_grid, extract, load_upload


def _xlsx_bytes(rows, extra_sheet=None):
    wb = Workbook()
    ws = wb.active
    for r in rows:
        ws.append(r)
    if extra_sheet:
        other = wb.create_sheet("Other")
        for r in extra_sheet:
            other.append(r)
    buf = io.BytesIO()
    wb.save(buf)
    return buf.getvalue()


class TestExtract:
    def test_board_layout_wins(self, board_grid):
        result = extract(board_grid)
        assert isinstance(result, BoardResult)
        assert result.kind == "board"

    def test_falls_back_to_tall_rows(self, tall_grid):
        result = extract(tall_grid)
        assert isinstance(result, FlatResult)
        assert len(result.records) == 2

    def test_unrecognized_grid_still_flat(self):
        result = extract([["hello"], ["world"]])
        assert isinstance(result, FlatResult)
        assert result.records[0].name == "Row 1"

    def test_blank_grid_is_empty_flat(self):
        assert extract([]) == FlatResult(records=())
        result = extract([[None, ""], []])
        assert isinstance(result, FlatResult)
        assert result.records == ()

    def test_board_scan_errors_fall_back(self, monkeypatch, tall_grid, caplog):
        import extraction

        def boom(grid):
            raise IndexError("bad row")

        monkeypatch.setattr(extraction, "extract_board", boom)
        with caplog.at_level(logging.WARNING, logger="test_extract"):
            result = extract(tall_grid, logger=logging.getLogger("test_extract"))
        assert isinstance(result, FlatResult)
        assert "board scan failed" in caplog.text

    def test_same_grid_same_result(self, board_grid, tall_grid):
        assert extract(board_grid) == extract(board_grid)
        assert extract(tall_grid) == extract(tall_grid)


class TestDecodeGrid:
    def test_xlsx_first_sheet_only(self):
        data = _xlsx_bytes(
            [["TOSA Level"], [None, "Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"],
             ["Daily Actual Input", 710, 998, 1000, 1047, 0, 0, 0]],
            extra_sheet=[["FG Level"]],
        )
        grid = decode_grid(data, "board.xlsx")
        assert grid[0] == ["TOSA Level"]
        assert grid[2][1] == 710
        assert all(row[0] != "FG Level" for row in grid if row)

    def test_xlsx_round_trip_through_extract(self):
        data = _xlsx_bytes([
            ["TOSA Level"],
            [None, "Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"],
            ["Daily Actual Input", 710, 998, 1000, 1047, 0, 0, 0],
            ["Actual Output", 914, 1363, 990, 817, 0, 0, 0],
        ])
        result = extract(decode_grid(data, "Board.XLSX"))
        assert list(result.modules[ModuleKey.TOSA].output) == [914, 1363, 990, 817, 0, 0, 0]

    def test_uploader_extensions_all_decode_as_workbooks(self):
        assert ACCEPTED_EXTENSIONS == (".xlsx", ".xlsm", ".xlsb", ".xls", ".csv")
        data = _xlsx_bytes([["TOSA Level"], ["Daily Actual Input", 710]])
        assert decode_grid(data, "macro_board.xlsm") == [["TOSA Level"], ["Daily Actual Input", 710]]

    def test_csv_trailing_cells_trimmed(self):
        data = "\ufeffname,input,output,gap\nMon,710,914,,\n".encode("utf-8")
        grid = decode_grid(data, "rows.csv")
        assert grid[0] == ["name", "input", "output", "gap"]
        assert grid[1] == ["Mon", "710", "914"]

    @pytest.mark.parametrize("filename, engine", [("board.xlsb", "pyxlsb"), ("old.XLS", None)])
    def test_pandas_readers_drop_nan_cells(self, monkeypatch, filename, engine):
        import extraction
        seen = {}

        def fake_read_excel(buf, sheet_name, header, engine):
            seen.update(sheet_name=sheet_name, header=header, engine=engine)
            return pd.DataFrame([
                ["TOSA Level", np.nan, np.nan],
                ["Daily Actual Input", 710.0, np.nan],
                [np.nan, np.nan, np.nan],
            ])

        monkeypatch.setattr(extraction.pd, "read_excel", fake_read_excel)
        grid = decode_grid(b"ignored", filename)
        assert seen == {"sheet_name": 0, "header": None, "engine": engine}
        assert grid == [["TOSA Level"], ["Daily Actual Input", 710.0], []]

    def test_pandas_reader_errors_become_decode_failure(self, monkeypatch):
        import extraction

        def broken(*args, **kwargs):
            raise ValueError("File is not a recognized excel file")

        monkeypatch.setattr(extraction.pd, "read_excel", broken)
        with pytest.raises(DecodeFailure):
            decode_grid(b"junk", "board.xlsb")

    def test_corrupt_workbook_raises_decode_failure(self):
        with pytest.raises(DecodeFailure):
            decode_grid(b"not a zip file", "board.xlsx")

    def test_undecodable_text(self):
        with pytest.raises(DecodeFailure):
            decode_grid(b"\xff\xfe\xfa\x00bad", "rows.csv")


class TestLoadUpload:
    def test_decode_failure_becomes_message(self):
        result, error = load_upload(b"garbage", "board.xlsx")
        assert result == EmptyResult()
        assert error == UPLOAD_ERROR_MESSAGE

    def test_good_upload_has_no_error(self):
        result, error = load_upload(b"name,input,output\nMon,1,2\n", "rows.csv")
        assert error is None
        assert isinstance(result, FlatResult)
        assert result.records[0].gap == -1
