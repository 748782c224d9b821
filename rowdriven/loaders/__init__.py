"""Tabular source adapters and their registry."""

from .base import Loader, parse_blocks
from .csv_loader import CsvLoader
from .excel import ExcelLoader
from .sql import SqlLoader
from .registry import LoaderType, register_loader, resolve, resolve_loader, infer_kind

__all__ = [
    "Loader",
    "parse_blocks",
    "CsvLoader",
    "ExcelLoader",
    "SqlLoader",
    "LoaderType",
    "register_loader",
    "resolve",
    "resolve_loader",
    "infer_kind",
]
