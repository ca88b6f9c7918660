import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from app.importer.errors import RowIssue
from app.importer.parser import RawRecord

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Reference:
    """A CSV column holding a natural key that must become a foreign-key id.

    With a ``scope_field`` the key is only unique within that column of the
    target table (a player name within a team). The record must already hold
    the resolved value for it, so scoped references resolve after the rest.
    """
    source_field: str
    target_field: str
    entity: str
    table: str
    key_field: str = 'name'
    scope_field: Optional[str] = None


@dataclass
class ProcessedRecord:
    row_number: int
    values: Dict[str, object] = field(default_factory=dict)

    def get(self, name, default=''):
        return self.values.get(name, default)


def normalize_key(value):
    return (value or '').strip().lower()


def build_reference_table(rows, key_field='name', id_field='id', scope_field=None):
    """Map normalized natural keys to ids; the first row wins on a collision.

    Keys are ``(key, scope)`` tuples when ``scope_field`` is given.
    """
    table = {}
    for row in rows:
        key = normalize_key(row.get(key_field))
        if not key:
            continue
        if scope_field:
            key = (key, row.get(scope_field))
        if key in table:
            logger.debug("Ignoring duplicate reference key %r (id %s)", key, row.get(id_field))
            continue
        table[key] = row.get(id_field)
    return table


def resolve_record(record: RawRecord, references, tables) -> Tuple[Optional[ProcessedRecord], Optional[RowIssue]]:
    """Resolve one record. Returns (processed, None) or (None, issue)."""
    values = dict(record.values)
    for ref in sorted(references, key=lambda r: r.scope_field is not None):
        raw = values.get(ref.source_field) or ''
        if not raw:
            return None, RowIssue(record.row_number, f"missing {ref.source_field}")
        key = normalize_key(raw)
        if ref.scope_field:
            key = (key, values.get(ref.scope_field))
        target = tables[ref.table].get(key)
        if target is None:
            return None, RowIssue(record.row_number, _not_found(ref, raw, references, values))
        values[ref.target_field] = target
    return ProcessedRecord(record.row_number, values), None


def _not_found(ref, raw, references, values):
    scope = next((r for r in references if ref.scope_field and r.target_field == ref.scope_field), None)
    if scope:
        return f"{ref.entity} '{raw}' not found in {scope.entity} '{values.get(scope.source_field)}'"
    return f"{ref.entity} '{raw}' not found"


def resolve_records(records: List[RawRecord], references, tables) -> Tuple[List[ProcessedRecord], List[RowIssue]]:
    processed = []
    issues = []
    for record in records:
        result, issue = resolve_record(record, references, tables)
        if issue:
            issues.append(issue)
        else:
            processed.append(result)
    return processed, issues
