# tests/helpers.py

from collections import defaultdict

from app.importer import ConfigurationError, RecordStore, StoreResult


class FakeStore(RecordStore):
    """In-memory store that keeps rows per table and can reject chosen writes.

    ``failures`` holds ``(table, n)`` pairs: the n-th write to ``table``
    (1-based) comes back with an error and changes nothing.
    """

    def __init__(self, references=None, failures=(), reachable=True):
        self.references = references or {}
        self.rows = defaultdict(list)
        self.calls = []
        self.failures = set(failures)
        self.reachable = reachable
        self.reference_fetches = []

    def check_connection(self):
        if not self.reachable:
            raise ConfigurationError('Missing database credentials')

    def fetch_references(self, table, key_field='name', scope_field=None):
        self.reference_fetches.append(table)
        fields = [key_field] + ([scope_field] if scope_field else [])
        return [dict({f: r.get(f) for f in fields}, id=r['id']) for r in self.references.get(table, [])]

    def upsert(self, table, rows, conflict_target=None, ignore_duplicates=False):
        self.calls.append((table, list(rows), conflict_target, ignore_duplicates))
        attempt = sum(1 for call in self.calls if call[0] == table)
        if (table, attempt) in self.failures:
            return StoreResult(error='duplicate key value violates unique constraint')

        for row in rows:
            if conflict_target:
                key = tuple(row[c] for c in conflict_target)
                existing = [r for r in self.rows[table] if tuple(r[c] for c in conflict_target) == key]
                if existing:
                    if not ignore_duplicates:
                        existing[0].update(row)
                    continue
            self.rows[table].append(dict(row))
        return StoreResult(count=len(rows))


TEAMS = [
    {'id': 1, 'name': 'FCB United'},
    {'id': 2, 'name': 'Red'},
    {'id': 3, 'name': 'Light Blue'},
]


def csv_text(*lines):
    return '\n'.join(lines) + '\n'
