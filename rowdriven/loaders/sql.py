"""Database adapter: test data blocks stored in a table or returned by a query."""

from typing import Any, Dict, Optional

import pandas as pd
from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from rowdriven.config import build_db_url
from rowdriven.exceptions import ConfigurationError, SourceReadError
from rowdriven.loaders.base import Loader, Location, parse_blocks
from rowdriven.loaders.normalize import normalize_value
from rowdriven.logging_config import get_logger
from rowdriven.model import DataSet

logger = get_logger("loaders")


def make_engine(db_url: str, echo: bool = False) -> Engine:
    """Create SQLAlchemy engine."""
    return create_engine(db_url, future=True, echo=echo, pool_pre_ping=True)


def fetch_dataframe(engine: Engine, sql: str, params: Optional[Dict[str, Any]] = None) -> pd.DataFrame:
    """Execute SQL and return results as pandas DataFrame."""
    return pd.read_sql_query(text(sql), engine, params=params)


class SqlLoader(Loader):
    """Reads the block layout from a database.

    A source location is either a table name (``schema.table``), read in
    its natural order, or a ``SELECT`` statement that should carry its own
    ``ORDER BY``. Column positions matter, column names do not.

    Example:
        >>> loader = SqlLoader(db_url="sqlite:///testdata.db")
        >>> loader.load(["SELECT * FROM lookup_data ORDER BY line"])
    """

    kind = "sql"

    def __init__(self, engine: Optional[Engine] = None, db_url: Optional[str] = None, echo: bool = False):
        self._engine = engine
        self._owns_engine = engine is None
        self._db_url = db_url
        self._echo = echo

    @property
    def engine(self) -> Engine:
        if self._engine is None:
            url = self._db_url or build_db_url()
            if not url:
                raise ConfigurationError(
                    "Missing DB URL for the SQL loader (pass db_url, set ROWDRIVEN_DB_URL or DB_* variables)"
                )
            self._engine = make_engine(url, echo=self._echo)
        return self._engine

    def close(self) -> None:
        """Dispose an engine this loader created itself; a supplied engine stays open."""
        if self._owns_engine and self._engine is not None:
            self._engine.dispose()
            self._engine = None

    def load(self, paths) -> DataSet:
        try:
            return super().load(paths)
        finally:
            self.close()

    @staticmethod
    def query_for(location: Location) -> str:
        location = str(location).strip()
        if location.lower().startswith(("select", "with")):
            return location
        return f"SELECT * FROM {location}"

    def load_source(self, path: Location) -> DataSet:
        sql = self.query_for(path)
        try:
            df = fetch_dataframe(self.engine, sql)
        except (SQLAlchemyError, pd.errors.DatabaseError) as e:
            raise SourceReadError(f"Query for {path} failed: {e}") from e

        rows = ([normalize_value(v) for v in record] for record in df.itertuples(index=False, name=None))
        return parse_blocks(rows, source=str(path))
