import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

from sqlalchemy import insert, select, text
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import SQLAlchemyError

from app.importer.errors import ConfigurationError
from app.models import Team, Player, Match, PlayerMatchStat, PlayerMatchAssignment

logger = logging.getLogger(__name__)

UPSERT_DIALECTS = {
    'sqlite': sqlite_insert,
    'postgresql': pg_insert,
}


@dataclass
class StoreResult:
    count: int = 0
    error: Optional[str] = None

    @property
    def ok(self):
        return self.error is None


class RecordStore(ABC):
    """The query-and-mutate surface the import pipeline needs from a database."""

    @abstractmethod
    def check_connection(self):
        """Raise ConfigurationError if the store cannot be used."""

    @abstractmethod
    def fetch_references(self, table, key_field='name', scope_field=None):
        """Return ``[{'id': ..., key_field: ...}, ...]`` ordered by id.

        Rows also carry ``scope_field`` when one is given.
        """

    @abstractmethod
    def upsert(self, table, rows, conflict_target=None, ignore_duplicates=False) -> StoreResult:
        """Write ``rows`` as one atomic operation.

        With a ``conflict_target`` rows clashing on it are skipped
        (``ignore_duplicates``) or updated in place; without one this is a
        plain insert. Failures come back as ``StoreResult.error``.
        """


class SQLAlchemyStore(RecordStore):
    tables = {
        'teams': Team,
        'players': Player,
        'matches': Match,
        'player_match_stats': PlayerMatchStat,
        'player_match_assignments': PlayerMatchAssignment,
    }

    def __init__(self, session):
        self.session = session

    def _model(self, table):
        try:
            return self.tables[table]
        except KeyError:
            raise ConfigurationError(f"Unknown table: {table}") from None

    @property
    def dialect(self):
        return self.session.get_bind().dialect.name

    def check_connection(self):
        try:
            self.session.execute(text('SELECT 1'))
            dialect = self.dialect
        except SQLAlchemyError as e:
            self.session.rollback()
            raise ConfigurationError(f"Database is not reachable: {e}") from e
        if dialect not in UPSERT_DIALECTS:
            raise ConfigurationError(f"Database dialect '{dialect}' does not support upserts")

    def fetch_references(self, table, key_field='name', scope_field=None):
        model = self._model(table)
        fields = [key_field] + ([scope_field] if scope_field else [])
        stmt = select(model.id, *(getattr(model, f) for f in fields)).order_by(model.id)
        return [dict(zip(['id'] + fields, row)) for row in self.session.execute(stmt)]

    def upsert(self, table, rows, conflict_target=None, ignore_duplicates=False):
        if not rows:
            return StoreResult()
        model = self._model(table)

        if conflict_target:
            stmt = UPSERT_DIALECTS[self.dialect](model.__table__).values(rows)
            if ignore_duplicates:
                stmt = stmt.on_conflict_do_nothing(index_elements=list(conflict_target))
            else:
                stmt = stmt.on_conflict_do_update(
                    index_elements=list(conflict_target),
                    set_={c: stmt.excluded[c] for c in rows[0] if c not in conflict_target},
                )
        else:
            stmt = insert(model.__table__).values(rows)

        try:
            self.session.execute(stmt)
            self.session.commit()
        except SQLAlchemyError as e:
            self.session.rollback()
            message = str(getattr(e, 'orig', None) or e)
            logger.warning("Write of %s rows to %s failed: %s", len(rows), table, message)
            return StoreResult(error=message)
        return StoreResult(count=len(rows))
