from app.importer.errors import (
    DataImportError, ParseError, StructuralParseError, ConfigurationError, RowIssue, BatchError,
)
from app.importer.orchestrator import ImportOrchestrator, ImportOptions, ImportSummary, ImportState, run_import
from app.importer.store import RecordStore, SQLAlchemyStore, StoreResult
from app.importer.validator import SCHEMAS, get_schema
