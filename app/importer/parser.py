import csv
import io
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from app.importer.errors import ParseError


@dataclass
class RawRecord:
    row_number: int
    values: Dict[str, str] = field(default_factory=dict)

    def get(self, name, default=''):
        return self.values.get(name, default)


def _uncommented_lines(text, comment_prefix):
    # Whole lines, before csv quoting applies: a quote in a comment opens no field.
    for line in io.StringIO(text or ''):
        if comment_prefix and line.lstrip().startswith(comment_prefix):
            continue
        yield line


def parse_records(text: str, comment_prefix: Optional[str] = '#') -> List[RawRecord]:
    """Parse comma-separated text with a header row into RawRecords.

    Every field is trimmed. Blank lines and lines starting with
    ``comment_prefix`` are skipped and do not count as rows.
    """
    reader = csv.reader(_uncommented_lines(text, comment_prefix), skipinitialspace=True)

    header = None
    records = []
    try:
        for row in reader:
            cells = [cell.strip() for cell in row]
            if not any(cells):
                continue

            if header is None:
                if '' in cells:
                    raise ParseError(f"Header has an empty column name at position {cells.index('') + 1}")
                duplicates = sorted({c for c in cells if cells.count(c) > 1})
                if duplicates:
                    raise ParseError(f"Duplicate column(s) in header: {', '.join(duplicates)}")
                header = cells
                continue

            row_number = len(records) + 1
            if len(cells) != len(header):
                raise ParseError(
                    f"Row {row_number}: expected {len(header)} columns, got {len(cells)}"
                )
            records.append(RawRecord(row_number, dict(zip(header, cells))))
    except csv.Error as e:
        raise ParseError(f"Unreadable CSV at line {reader.line_num}: {e}") from e

    if header is None:
        raise ParseError('Missing header row')
    return records
