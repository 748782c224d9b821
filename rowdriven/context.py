"""Per-test-case data context and data source declarations."""

from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union

from rowdriven.exceptions import ConfigurationError
from rowdriven.loaders.base import Loader
from rowdriven.loaders.registry import LoaderType, infer_kind, resolve_loader
from rowdriven.logging_config import get_logger
from rowdriven.model import DataRow, DataSet

logger = get_logger("runner")


@dataclass(frozen=True)
class DataSource:
    """Where a test case's rows come from.

    Args:
        paths: One or more source locations, loaded in order
        kind: Loader kind; inferred from the first path's extension when omitted
        loader: Adapter instance; takes precedence over ``kind``
        write_results: Write actual results/statuses back after the run
    """

    paths: Tuple[str, ...]
    kind: Optional[Union[LoaderType, str]] = None
    loader: Optional[Loader] = None
    write_results: bool = False

    def __init__(
        self,
        paths: Union[str, Path, Sequence[Union[str, Path]]],
        kind: Optional[Union[LoaderType, str]] = None,
        loader: Optional[Loader] = None,
        write_results: bool = False,
    ):
        if isinstance(paths, (str, Path)):
            paths = [paths]
        object.__setattr__(self, "paths", tuple(str(p) for p in paths))
        object.__setattr__(self, "kind", kind)
        object.__setattr__(self, "loader", loader)
        object.__setattr__(self, "write_results", write_results)
        if not self.paths:
            raise ConfigurationError("A data source needs at least one location")

    def resolve_loader(self) -> Loader:
        kind = self.kind
        if kind is None and self.loader is None:
            kind = infer_kind(self.paths[0])
            if kind is None:
                raise ConfigurationError(
                    f"Cannot infer the loader kind of '{self.paths[0]}'; pass kind=... or loader=..."
                )
        return resolve_loader(kind, custom=self.loader)


@dataclass
class DataContext:
    """Active data for one test case.

    Built right before the test case runs and handed explicitly to slot
    resolution and execution, so concurrently running test cases never share
    mutable state. The DataSet itself is treated as read-only.
    """

    data_set: DataSet
    test_case: str
    source: Optional[DataSource] = None
    loader: Optional[Loader] = None
    extra: Dict[str, Any] = field(default_factory=dict)

    def rows(self) -> List[DataRow]:
        """Rows of the active test case, in source order (empty if it has none)."""
        return list(self.data_set.get(self.test_case, []))

    def with_test_case(self, test_case: str) -> "DataContext":
        return replace(self, test_case=test_case, extra=dict(self.extra))


def load_context(source: Optional[DataSource], test_case: str) -> DataContext:
    """Resolve the adapter, load every location and build the context for ``test_case``.

    A test case without a data source gets an empty context (fixed slots only).
    """
    if source is None:
        return DataContext(data_set={}, test_case=test_case)

    loader = source.resolve_loader()
    data_set = loader.load(list(source.paths))
    logger.info(
        f"Loaded {len(data_set.get(test_case, []))} row(s) for test case '{test_case}'",
        extra={"test_case": test_case, "sources": list(source.paths)},
    )
    if test_case not in data_set:
        logger.warning(
            f"No test data block named '{test_case}' in {list(source.paths)}",
            extra={"test_case": test_case},
        )
    return DataContext(data_set=data_set, test_case=test_case, source=source, loader=loader)
