import logging
from dataclasses import dataclass, field
from typing import List

from app.importer.errors import BatchError

logger = logging.getLogger(__name__)

DEFAULT_BATCH_SIZE = 100


@dataclass
class BatchReport:
    imported: int = 0
    batches: int = 0
    errors: List[BatchError] = field(default_factory=list)


def chunked(rows, size):
    for start in range(0, len(rows), size):
        yield rows[start:start + size]


def import_batches(store, table, rows, batch_size=DEFAULT_BATCH_SIZE,
                   skip_duplicates=True, conflict_target=None):
    """Apply ``rows`` to ``store`` in consecutive batches, one call per batch.

    A rejected batch is recorded and the remaining batches still run.
    """
    if batch_size < 1:
        raise ValueError('batch_size must be at least 1')

    report = BatchReport()
    for number, batch in enumerate(chunked(rows, batch_size), start=1):
        report.batches += 1
        result = store.upsert(
            table,
            batch,
            conflict_target=conflict_target if skip_duplicates else None,
            ignore_duplicates=skip_duplicates,
        )
        if result.error:
            logger.warning("Batch %s of %s rows into %s failed: %s", number, len(batch), table, result.error)
            report.errors.append(BatchError(number, result.error))
        else:
            logger.info("Batch %s: wrote %s rows into %s", number, len(batch), table)
            report.imported += len(batch)
    return report


def import_assignments(store, stat_rows):
    """Create the player-match assignments implied by a set of stat rows."""
    unique = {}
    for row in stat_rows:
        key = (row['player_id'], row['match_id'])
        unique.setdefault(key, {
            'player_id': row['player_id'],
            'match_id': row['match_id'],
            'team_id': row['team_id'],
        })
    if not unique:
        return None

    result = store.upsert(
        'player_match_assignments',
        list(unique.values()),
        conflict_target=('player_id', 'match_id'),
        ignore_duplicates=True,
    )
    if result.error:
        return BatchError(0, f"Failed to create player-match assignments: {result.error}")
    return None
