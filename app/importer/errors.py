from dataclasses import dataclass


class DataImportError(Exception):
    """Base class for errors that abort an import run."""


class ParseError(DataImportError):
    """The input is structurally unreadable: no header or a ragged row."""


StructuralParseError = ParseError


class ConfigurationError(DataImportError):
    """The store is missing or unreachable; raised before any row is read."""


@dataclass(frozen=True)
class RowIssue:
    row_number: int
    message: str

    def __str__(self):
        return f"Row {self.row_number}: {self.message}"


@dataclass(frozen=True)
class BatchError:
    batch_number: int
    message: str

    def __str__(self):
        if self.batch_number == 0:
            return self.message
        return f"Batch import error ({self.batch_number}): {self.message}"
