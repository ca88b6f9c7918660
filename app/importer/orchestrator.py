import enum
import logging
from dataclasses import dataclass, field
from typing import List, Optional

from app.importer.batch import DEFAULT_BATCH_SIZE, import_assignments, import_batches
from app.importer.errors import BatchError, ParseError, RowIssue
from app.importer.parser import parse_records
from app.importer.resolver import build_reference_table, resolve_records
from app.importer.validator import coerce_record, drop_key_clashes, get_schema, validate_record

logger = logging.getLogger(__name__)


class ImportState(enum.Enum):
    IDLE = 'idle'
    PARSING = 'parsing'
    RESOLVING = 'resolving'
    VALIDATING = 'validating'
    DRY_RUN_COMPLETE = 'dry_run_complete'
    IMPORTING = 'importing'
    DONE = 'done'
    FAILED = 'failed'


@dataclass
class ImportOptions:
    dry_run: bool = False
    skip_duplicates: bool = True
    batch_size: int = DEFAULT_BATCH_SIZE

    def __post_init__(self):
        if isinstance(self.batch_size, bool) or not isinstance(self.batch_size, int) or self.batch_size < 1:
            raise ValueError(f"batchSize must be a positive integer, got {self.batch_size!r}")


@dataclass
class ImportSummary:
    kind: str
    total_rows: int = 0
    records_processed: int = 0
    records_imported: int = 0
    dry_run: bool = False
    advisory: Optional[str] = None
    row_issues: List[RowIssue] = field(default_factory=list)
    batch_errors: List[BatchError] = field(default_factory=list)
    message: str = ''

    @property
    def errors(self):
        messages = [self.advisory] if self.advisory else []
        messages += [str(issue) for issue in self.row_issues]
        messages += [str(error) for error in self.batch_errors]
        return messages

    @property
    def rows_excluded(self):
        return self.total_rows - self.records_processed

    def to_dict(self):
        data = {
            'message': self.message,
            'recordsProcessed': self.records_processed,
            'recordsImported': self.records_imported,
        }
        errors = self.errors
        if errors:
            data['errors'] = errors
        return data


class ImportOrchestrator:
    """Run one CSV import: parse, resolve, validate, then import or stop at a dry run.

    Only a structurally broken input (``ParseError``) or an unusable store
    (``ConfigurationError``) aborts; everything else lands in the summary.
    """

    def __init__(self, store, comment_prefix='#'):
        self.store = store
        self.comment_prefix = comment_prefix
        self.state = ImportState.IDLE

    def run(self, kind, text, options=None):
        options = options or ImportOptions()
        schema = get_schema(kind)
        summary = ImportSummary(kind=kind, dry_run=options.dry_run)

        self.store.check_connection()

        self.state = ImportState.PARSING
        try:
            records = parse_records(text, comment_prefix=self.comment_prefix)
        except ParseError:
            self.state = ImportState.FAILED
            raise
        summary.total_rows = len(records)
        logger.info("Importing %s: %s rows parsed (dry_run=%s)", kind, len(records), options.dry_run)

        if not records:
            self.state = ImportState.DRY_RUN_COMPLETE if options.dry_run else ImportState.DONE
            summary.message = 'No records found in the provided data.'
            return summary

        self.state = ImportState.RESOLVING
        processed = self._resolve(schema, records, summary)

        self.state = ImportState.VALIDATING
        pairs = []
        for record in processed:
            issues = validate_record(record, schema)
            if issues:
                for issue in issues:
                    logger.debug("%s import: %s", kind, issue)
                summary.row_issues.extend(issues)
            else:
                pairs.append((record.row_number, coerce_record(record, schema)))
        if schema.unique_key and pairs:
            existing = self.store.fetch_references(schema.table, schema.unique_key)
            pairs, clashes = drop_key_clashes(pairs, schema.unique_key, existing)
            summary.row_issues.extend(clashes)
        rows = [row for _, row in pairs]
        summary.row_issues.sort(key=lambda issue: issue.row_number)
        summary.records_processed = len(rows)

        if options.dry_run:
            self.state = ImportState.DRY_RUN_COMPLETE
            summary.message = f"Dry run completed. {len(rows)} {kind} would be imported."
            return summary

        self.state = ImportState.IMPORTING
        if rows:
            self._import(schema, rows, options, summary)
        self.state = ImportState.DONE
        summary.message = f"Import completed with {summary.records_imported} {kind} imported."
        logger.info("Import of %s finished: %s of %s rows imported, %s errors",
                    kind, summary.records_imported, summary.total_rows, len(summary.errors))
        return summary

    def _resolve(self, schema, records, summary):
        tables = {}
        for ref in schema.references:
            if ref.table in tables:
                continue
            rows = self.store.fetch_references(ref.table, ref.key_field, scope_field=ref.scope_field)
            if not rows:
                logger.warning("No %s in the store; %s import cannot resolve %s", ref.table, schema.kind, ref.source_field)
                summary.advisory = f"No {ref.table} found - create some first"
                return []
            tables[ref.table] = build_reference_table(rows, key_field=ref.key_field, scope_field=ref.scope_field)

        processed, issues = resolve_records(records, schema.references, tables)
        summary.row_issues.extend(issues)
        return processed

    def _import(self, schema, rows, options, summary):
        if schema.kind == 'player_stats':
            error = import_assignments(self.store, rows)
            if error:
                summary.batch_errors.append(error)

        report = import_batches(
            self.store,
            schema.table,
            rows,
            batch_size=options.batch_size,
            skip_duplicates=options.skip_duplicates,
            conflict_target=schema.conflict_target,
        )
        summary.records_imported = report.imported
        summary.batch_errors.extend(report.errors)


def run_import(store, kind, text, dry_run=False, skip_duplicates=True,
               batch_size=DEFAULT_BATCH_SIZE, comment_prefix='#'):
    options = ImportOptions(dry_run=dry_run, skip_duplicates=skip_duplicates, batch_size=batch_size)
    return ImportOrchestrator(store, comment_prefix=comment_prefix).run(kind, text, options)
