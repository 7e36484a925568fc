import pytest

DAYS = ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]


@pytest.fixture
def tosa_grid():
    """Single-module board with the anchor row starting at column 2."""
    return [
        ["TOSA Level"],
        ["", "Metric", *DAYS],
        ["Daily Actual Input", "", 710, 998, 1000, 1047, 0, 0, 0],
        ["Actual Output", "", 914, 1363, 990, 817, 0, 0, 0],
    ]


@pytest.fixture
def board_grid():
    """Two modules, text cells the way a formatted export writes them."""
    return [
        ["Weekly production board", None, "WK6"],
        [],
        ["TOSA Level (Line 1)"],
        ["Item", "Target", *DAYS, "Total"],
        ["Daily Actual Input", "765", "710", "998", "1,000", "1,047", "-", "-", "-", "3,755"],
        ["Actual Output", "758", "914", "1,363", "990", "817", "", "", "", "4,084"],
        ["Accumulate gap", "", "(3,317)", "(2,868)", "(2,636)", "(2,577)", "(3,335)", "(4,093)", "(4,851)"],
        ["WIP", "", "10,763", "10,398", "10,408", "10,638", "10,638", "10,638", "10,638"],
        ["remark: line stop Thu night shift"],
        ["Module PCBA Assy"],
        ["Item", "Target", *DAYS],
        ["Daily Actual Input", "950", "650", "700", "800", "950", "980", "1,020", "998"],
        ["Actual Output", "940", "600", "720", "760", "900", "1,000", "1,200", "1,363"],
    ]


@pytest.fixture
def tall_grid():
    return [
        ["name", "input", "output", "gap"],
        ["Mon", 710, 914, -3317],
        ["Tue", "998", "1,363", "(2,868)"],
    ]
