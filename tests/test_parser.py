# tests/test_parser.py

import pytest

from app.importer.errors import ParseError
from app.importer.parser import parse_records
from tests.helpers import csv_text


class TestParseRecords:
    """Tests for turning CSV text into RawRecords."""

    def test_trims_fields_and_keeps_row_order(self):
        text = csv_text(
            ' name , team_type ',
            '  FCB United ,internal',
            'Red,  club  ',
        )
        records = parse_records(text)

        assert [r.row_number for r in records] == [1, 2]
        assert records[0].values == {'name': 'FCB United', 'team_type': 'internal'}
        assert records[1].get('team_type') == 'club'

    def test_skips_blank_lines(self):
        text = csv_text('name,team_type', '', 'Red,club', ' , ', '', 'Black,internal')
        records = parse_records(text)

        assert [r.get('name') for r in records] == ['Red', 'Black']
        assert [r.row_number for r in records] == [1, 2]

    def test_comment_lines_are_not_rows(self):
        text = csv_text(
            '# teams template',
            'name,team_type',
            '# an example row follows',
            'Red,club',
        )
        records = parse_records(text)

        assert len(records) == 1
        assert records[0].row_number == 1
        assert records[0].get('name') == 'Red'

    def test_custom_comment_prefix(self):
        text = csv_text('name,team_type', '// skipped', 'Red,club')
        records = parse_records(text, comment_prefix='//')
        assert [r.get('name') for r in records] == ['Red']

    def test_comment_prefix_can_be_disabled(self):
        text = csv_text('name,team_type', '#Red,club')
        records = parse_records(text, comment_prefix=None)
        assert records[0].get('name') == '#Red'

    def test_hash_inside_a_later_cell_is_kept(self):
        text = csv_text('name,primary_shirt_color', 'Red,#FF6188')
        assert parse_records(text)[0].get('primary_shirt_color') == '#FF6188'

    def test_quoted_commas(self):
        text = csv_text('name,notes', 'Red,"wet pitch, late kick-off"')
        assert parse_records(text)[0].get('notes') == 'wet pitch, late kick-off'

    def test_header_only_gives_no_records(self):
        assert parse_records(csv_text('name,team_type')) == []

    @pytest.mark.parametrize('text', ['', '\n\n', '# only a comment\n'])
    def test_missing_header(self, text):
        with pytest.raises(ParseError, match='Missing header'):
            parse_records(text)

    def test_row_with_too_few_columns(self):
        text = csv_text('name,team_type', 'Red,club', 'Black')
        with pytest.raises(ParseError, match='Row 2: expected 2 columns, got 1'):
            parse_records(text)

    def test_row_with_too_many_columns(self):
        text = csv_text('name,team_type', 'Red,club,extra')
        with pytest.raises(ParseError, match='expected 2 columns, got 3'):
            parse_records(text)

    def test_duplicate_header_column(self):
        with pytest.raises(ParseError, match='Duplicate column'):
            parse_records(csv_text('name,name', 'a,b'))

    def test_empty_header_column(self):
        with pytest.raises(ParseError, match='empty column name'):
            parse_records(csv_text('name,,team_type', 'a,b,c'))

    def test_quote_inside_a_comment_does_not_swallow_rows(self):
        text = csv_text(
            'name,team_type',
            '# note, "draft',
            'FCB United,internal',
            'Red,club',
        )
        records = parse_records(text)

        assert [r.get('name') for r in records] == ['FCB United', 'Red']
        assert [r.row_number for r in records] == [1, 2]

    def test_indented_comment_before_header(self):
        text = csv_text('   # "quoted, heading', 'name,team_type', 'Red,club')
        assert parse_records(text)[0].values == {'name': 'Red', 'team_type': 'club'}
