# tests/test_validator.py

import datetime

import pytest

from app.importer.resolver import ProcessedRecord
from app.importer.validator import (
    DEFAULT_TEAM_COLOR, ImportSchema, SCHEMAS, coerce_record, drop_key_clashes, get_schema, validate_record,
)


def _record(row_number=1, **values):
    return ProcessedRecord(row_number, values)


class TestValidateRecord:

    def test_valid_team(self):
        assert validate_record(_record(name='FCB United', team_type='internal'), SCHEMAS['teams']) == []

    def test_invalid_choice_embeds_the_value(self):
        issues = validate_record(_record(2, name='Red Team', team_type='bogus'), SCHEMAS['teams'])

        assert len(issues) == 1
        assert str(issues[0]) == "Row 2: invalid team_type 'bogus'. Must be one of: internal, external, club"

    def test_choices_ignore_case(self):
        assert validate_record(_record(name='Red', team_type='Club'), SCHEMAS['teams']) == []

    def test_reports_every_missing_required_field(self):
        schema = ImportSchema(kind='t', table='t', fields=('a', 'b', 'c'), conflict_target=('a',),
                              required=('a', 'b', 'c'), numeric=('c',))
        issues = validate_record(_record(5, a='', b='  ', c='x'), schema)

        assert [str(i) for i in issues] == [
            "Row 5: missing required field 'a'",
            "Row 5: missing required field 'b'",
        ]

    def test_non_numeric_is_distinct_from_missing(self):
        schema = SCHEMAS['players']
        missing = validate_record(_record(name='Alex', jersey_number=''), schema)
        bad = validate_record(_record(name='Alex', jersey_number='nine'), schema)

        assert missing == []
        assert [i.message for i in bad] == ["'jersey_number' must be a whole number, got 'nine'"]

    def test_decimal_is_not_a_whole_number(self):
        issues = validate_record(_record(name='Alex', height_cm='180.5'), SCHEMAS['players'])
        assert 'height_cm' in issues[0].message

    def test_first_failing_check_wins(self):
        record = _record(name='Alex', jersey_number='x', dominant_foot='middle')
        issues = validate_record(record, SCHEMAS['players'])

        assert len(issues) == 1
        assert 'jersey_number' in issues[0].message

    def test_invalid_date(self):
        issues = validate_record(_record(match_date='31/02/2024'), SCHEMAS['matches'])
        assert issues[0].message == "'match_date' is not a valid date, got '31/02/2024'"

    def test_invalid_boolean(self):
        issues = validate_record(_record(clean_sheet='maybe'), SCHEMAS['player_stats'])
        assert issues[0].message.startswith("invalid clean_sheet 'maybe'")

    def test_does_not_mutate_the_record(self):
        record = _record(name='Red', team_type='bogus')
        validate_record(record, SCHEMAS['teams'])
        assert record.values == {'name': 'Red', 'team_type': 'bogus'}

    def test_missing_field_key_counts_as_missing(self):
        issues = validate_record(_record(team_type='club'), SCHEMAS['teams'])
        assert [i.message for i in issues] == ["missing required field 'name'"]


class TestCoerceRecord:

    def test_team_defaults(self):
        row = coerce_record(_record(name='FCB United'), SCHEMAS['teams'])

        assert row['team_type'] == 'internal'
        assert row['primary_shirt_color'] == '#5050f0'
        assert row['external_id'] == 'fcb-united'
        assert row['is_active'] is True
        assert row['logo_url'] is None

    def test_unknown_team_gets_default_colour(self):
        row = coerce_record(_record(name='Green Wanderers'), SCHEMAS['teams'])
        assert row['primary_shirt_color'] == DEFAULT_TEAM_COLOR

    def test_player_types(self):
        record = _record(name='Alex', team_id=2, jersey_number='7', height_cm='',
                         position='goalkeeper', date_of_birth='12/04/1995', is_active='no')
        row = coerce_record(record, SCHEMAS['players'])

        assert row['team_id'] == 2
        assert row['jersey_number'] == 7
        assert row['height_cm'] is None
        assert row['position'] == 'Goalkeeper'
        assert row['date_of_birth'] == datetime.date(1995, 4, 12)
        assert row['is_active'] is False
        assert 'team_name' not in row

    def test_match_external_id_from_date_and_names(self):
        record = _record(match_date='2024-05-04', home_team='FCB United', away_team='Red',
                         home_team_id=1, away_team_id=2, home_score='3')
        row = coerce_record(record, SCHEMAS['matches'])

        assert row['external_id'] == '2024-05-04-fcb-united-vs-red'
        assert row['home_score'] == 3
        assert row['away_score'] is None
        assert row['venue'] == 'Unknown'
        assert row['match_type'] == 'friendly'

    def test_stat_defaults(self):
        row = coerce_record(_record(player_id=1, match_id=2, team_id=3, goals='2'), SCHEMAS['player_stats'])
        assert row['goals'] == 2
        assert row['assists'] == 0
        assert row['clean_sheet'] is False


class TestGetSchema:

    def test_known_kinds(self):
        assert set(SCHEMAS) == {'teams', 'players', 'matches', 'player_stats'}

    def test_unknown_kind(self):
        with pytest.raises(ValueError, match='Invalid import kind: coaches'):
            get_schema('coaches')

    def test_template_columns_use_names_not_ids(self):
        columns = SCHEMAS['players'].template_columns
        assert columns[0] == 'team_name'
        assert 'team_id' not in columns


class TestDropKeyClashes:

    def test_case_variant_of_a_stored_name(self):
        pairs = [(1, {'name': 'red'}), (2, {'name': 'Black'})]
        kept, issues = drop_key_clashes(pairs, 'name', [{'id': 1, 'name': 'Red'}])

        assert kept == [(2, {'name': 'Black'})]
        assert [str(i) for i in issues] == ["Row 1: name 'red' already exists as 'Red'"]

    def test_exact_stored_spelling_is_kept(self):
        pairs = [(1, {'name': 'Red'})]
        kept, issues = drop_key_clashes(pairs, 'name', [{'id': 1, 'name': 'Red'}])

        assert kept == pairs
        assert issues == []

    def test_repeat_within_the_input(self):
        pairs = [(1, {'name': 'Red'}), (2, {'name': 'RED'}), (3, {'name': 'Red'})]
        kept, issues = drop_key_clashes(pairs, 'name', [])

        assert kept == [(1, {'name': 'Red'})]
        assert [str(i) for i in issues] == [
            "Row 2: name 'RED' duplicates row 1",
            "Row 3: name 'Red' duplicates row 1",
        ]
