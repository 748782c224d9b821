"""Loader registration and lookup by source kind."""

from enum import Enum
from pathlib import Path
from typing import Callable, Dict, List, Optional, Union

from rowdriven.exceptions import ConfigurationError, LoaderNotFoundError
from rowdriven.logging_config import get_logger
from .base import Loader
from .csv_loader import CsvLoader
from .excel import ExcelLoader
from .sql import SqlLoader

logger = get_logger("loaders")


class LoaderType(Enum):
    """Kind of a test data source.

    XML is a placeholder with no built-in adapter. CUSTOM means the caller
    supplies the adapter instance.
    """

    CSV = "csv"
    EXCEL = "excel"
    XML = "xml"
    SQL = "sql"
    CUSTOM = "custom"


LoaderFactory = Callable[[], Loader]

# Internal registry: kind -> factory producing a fresh adapter
_REGISTRY: Dict[LoaderType, LoaderFactory] = {}

_EXTENSIONS = {
    ".xlsx": LoaderType.EXCEL,
    ".xlsm": LoaderType.EXCEL,
    ".csv": LoaderType.CSV,
    ".txt": LoaderType.CSV,
    ".xml": LoaderType.XML,
}


def _as_kind(kind: Union[LoaderType, str]) -> LoaderType:
    if isinstance(kind, LoaderType):
        return kind
    try:
        return LoaderType(str(kind).lower())
    except ValueError:
        raise ConfigurationError(
            f"Unknown loader kind '{kind}'. Known kinds: {[k.value for k in LoaderType]}"
        )


def register_loader(kind: Union[LoaderType, str], factory: LoaderFactory) -> None:
    """Register (or replace) the adapter factory for a source kind."""
    kind = _as_kind(kind)
    if kind is LoaderType.CUSTOM:
        raise ConfigurationError("CUSTOM sources take an adapter instance, not a registered factory")
    _REGISTRY[kind] = factory
    logger.debug(f"Registered loader for kind '{kind.value}'", extra={"kind": kind.value})


def unregister_loader(kind: Union[LoaderType, str]) -> None:
    _REGISTRY.pop(_as_kind(kind), None)


def resolve(kind: Union[LoaderType, str]) -> Optional[Loader]:
    """Return a fresh adapter for ``kind``, or None when none is registered."""
    factory = _REGISTRY.get(_as_kind(kind))
    return factory() if factory is not None else None


def resolve_loader(kind: Union[LoaderType, str, None] = None, custom: Optional[Loader] = None) -> Loader:
    """Adapter for a test case's source declaration.

    A caller-supplied ``custom`` adapter always wins. Otherwise the kind is
    looked up; a missing adapter is a configuration error.
    """
    if custom is not None:
        logger.info(f"Using caller-supplied loader {type(custom).__name__}")
        return custom

    if kind is None:
        raise ConfigurationError("No loader kind and no custom loader given for the data source")

    kind = _as_kind(kind)
    if kind is LoaderType.CUSTOM:
        raise ConfigurationError(
            "Loader kind CUSTOM requires a loader instance (pass loader=... to the data source)"
        )

    loader = resolve(kind)
    if loader is None:
        raise LoaderNotFoundError(
            f"The loader kind '{kind.value}' is not supported. Provide your own adapter with "
            f"loader=... or register one with register_loader()."
        )
    return loader


def infer_kind(path) -> Optional[LoaderType]:
    """Loader kind guessed from a file extension."""
    return _EXTENSIONS.get(Path(str(path)).suffix.lower())


def list_kinds() -> List[Dict[str, str]]:
    """List all kinds and the adapter registered for each."""
    result = []
    for kind in LoaderType:
        factory = _REGISTRY.get(kind)
        result.append(
            {
                "kind": kind.value,
                "loader": getattr(factory, "__name__", repr(factory)) if factory else None,
            }
        )
    return result


register_loader(LoaderType.CSV, CsvLoader)
register_loader(LoaderType.EXCEL, ExcelLoader)
register_loader(LoaderType.SQL, SqlLoader)
