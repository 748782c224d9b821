"""Cell normalization: native spreadsheet/database values to stable row values.

Rules:

* blank cell (``None``, NaN, NaT) -> absent (``None``)
* text -> as authored
* boolean -> ``bool``
* date-formatted numeric -> ``datetime``
* other numeric -> number, or its text form without a trailing ``".0"``
* formula -> its evaluated result, classified by the rules above

The ``".0"`` stripping is string based and lossy: a value meant as the text
``"10.0"`` also comes back as ``"10"``. It is kept so that integer-looking
spreadsheet numbers compare equal to string expectations such as ``"4"``.
"""

from datetime import date, datetime
from numbers import Number
from typing import Any

import pandas as pd
from openpyxl.utils.datetime import from_excel

from rowdriven.model import Value


def normalize_number(value) -> Value:
    """Return ``value`` as a number, or as text when its float form ends in ``.0``.

    >>> normalize_number(4.0)
    '4'
    >>> normalize_number(2.5)
    2.5
    >>> normalize_number("4")
    '4'
    """
    if isinstance(value, str):
        return value[:-2] if value.endswith(".0") else value
    text = repr(float(value))
    if text.endswith(".0"):
        return text[:-2]
    return value


def normalize_value(value: Any, is_date: bool = False) -> Value:
    """Normalize a raw cell value (no formatting information beyond ``is_date``)."""
    if value is None:
        return None
    # numpy scalars (pandas results) collapse to plain python values first
    if hasattr(value, "dtype") and hasattr(value, "item"):
        value = value.item()
    if isinstance(value, str):
        return value
    if _is_null(value):
        return None
    if isinstance(value, bool):
        return value
    if isinstance(value, datetime):
        return value.to_pydatetime() if isinstance(value, pd.Timestamp) else value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    if isinstance(value, Number):
        if is_date:
            return _serial_to_datetime(value)
        return normalize_number(value)
    return value


def normalize_cell(cell) -> Value:
    """Normalize an openpyxl cell.

    Workbooks are opened with ``data_only=True``, so formula cells already
    carry their evaluated result and go through the same classification.
    """
    if cell is None or cell.value is None:
        return None
    return normalize_value(cell.value, is_date=bool(getattr(cell, "is_date", False)))


def _serial_to_datetime(serial) -> datetime:
    result = from_excel(serial)
    if not isinstance(result, datetime) and isinstance(result, date):
        return datetime(result.year, result.month, result.day)
    return result


def _is_null(value) -> bool:
    try:
        return bool(pd.isna(value))
    except (TypeError, ValueError):
        return False
