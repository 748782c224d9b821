import math
from datetime import date, datetime

import numpy as np
import pandas as pd
import pytest

from rowdriven.loaders.normalize import normalize_cell, normalize_number, normalize_value


class TestNormalizeNumber:
    @pytest.mark.parametrize(
        "value, expected",
        [(4.0, "4"), (4, "4"), (10.0, "10"), (0.0, "0"), (-3.0, "-3"), (2.5, 2.5)],
    )
    def test_trailing_point_zero_is_stripped(self, value, expected):
        assert normalize_number(value) == expected

    def test_idempotent(self):
        once = normalize_number(4.0)
        assert once == "4"
        assert normalize_number(once) == "4"

    def test_large_float_is_kept(self):
        assert normalize_number(1e20) == 1e20


class TestNormalizeValue:
    def test_absent(self):
        assert normalize_value(None) is None
        assert normalize_value(float("nan")) is None
        assert normalize_value(pd.NaT) is None

    def test_empty_string_is_not_absent(self):
        assert normalize_value("") == ""

    def test_text_as_authored(self):
        assert normalize_value("  batman ") == "  batman "
        assert normalize_value("4.0") == "4.0"

    def test_booleans(self):
        assert normalize_value(True) is True
        assert normalize_value(np.bool_(False)) is False

    def test_numpy_numbers(self):
        assert normalize_value(np.int64(4)) == "4"
        assert normalize_value(np.float64(2.5)) == 2.5

    def test_dates(self):
        assert normalize_value(date(2020, 1, 2)) == datetime(2020, 1, 2)
        assert normalize_value(datetime(2020, 1, 2, 3, 4)) == datetime(2020, 1, 2, 3, 4)

    def test_date_formatted_number(self):
        # Excel serial 43831 is 2020-01-01
        assert normalize_value(43831, is_date=True) == datetime(2020, 1, 1)

    def test_timestamp_becomes_datetime(self):
        result = normalize_value(pd.Timestamp("2021-05-06"))
        assert type(result) is datetime
        assert result == datetime(2021, 5, 6)


class FakeCell:
    def __init__(self, value, is_date=False):
        self.value = value
        self.is_date = is_date


class TestNormalizeCell:
    def test_blank_cell(self):
        assert normalize_cell(None) is None
        assert normalize_cell(FakeCell(None)) is None

    def test_formula_result_is_classified(self):
        # data_only workbooks hand back the cached result of a formula
        assert normalize_cell(FakeCell(6.0)) == "6"
        assert normalize_cell(FakeCell(False)) is False
        assert normalize_cell(FakeCell("ok")) == "ok"

    def test_date_cell(self):
        assert normalize_cell(FakeCell(datetime(2020, 1, 1), is_date=True)) == datetime(2020, 1, 1)

    def test_nan_float_cell(self):
        assert normalize_cell(FakeCell(math.nan)) is None
