from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Tuple

from app.importer.errors import RowIssue
from app.importer.resolver import ProcessedRecord, Reference, normalize_key
from app.models import TEAM_TYPES, PLAYER_POSITIONS, DOMINANT_FEET, MATCH_TYPES
from app.utils import parse_bool, parse_date_safe, parse_int_safe, slugify, TRUE_VALUES, FALSE_VALUES

# Shirt colours for the club's own sides; anything else falls back to grey.
TEAM_COLORS = {
    'light blue': '#79DBFB',
    'red': '#FF6188',
    'black': '#000000',
    'fcb united': '#5050f0',
}
DEFAULT_TEAM_COLOR = '#808080'


@dataclass(frozen=True)
class ImportSchema:
    kind: str
    table: str
    fields: Tuple[str, ...]
    conflict_target: Tuple[str, ...]
    required: Tuple[str, ...] = ()
    numeric: Tuple[str, ...] = ()
    dates: Tuple[str, ...] = ()
    booleans: Tuple[str, ...] = ()
    choices: Dict[str, Tuple[str, ...]] = field(default_factory=dict)
    defaults: Dict[str, object] = field(default_factory=dict)
    references: Tuple[Reference, ...] = ()
    unique_key: Optional[str] = None
    finalize: Optional[Callable[[dict, ProcessedRecord], dict]] = None

    @property
    def template_columns(self):
        columns = [ref.source_field for ref in self.references]
        columns += [f for f in self.fields if f not in {r.target_field for r in self.references}]
        return columns


def _finalize_team(row, record):
    if not row.get('primary_shirt_color'):
        row['primary_shirt_color'] = TEAM_COLORS.get(row['name'].strip().lower(), DEFAULT_TEAM_COLOR)
    if not row.get('external_id'):
        row['external_id'] = slugify(row['name'])
    return row


def _finalize_match(row, record):
    if not row.get('external_id'):
        row['external_id'] = '{}-{}-vs-{}'.format(
            row['match_date'].isoformat(),
            slugify(record.get('home_team')),
            slugify(record.get('away_team')),
        )
    return row


TEAM_REF = 'teams'

SCHEMAS = {
    'teams': ImportSchema(
        kind='teams',
        table='teams',
        fields=('name', 'team_type', 'primary_shirt_color', 'secondary_shirt_color',
                'logo_url', 'external_id', 'is_active'),
        conflict_target=('name',),
        unique_key='name',
        required=('name',),
        booleans=('is_active',),
        choices={'team_type': TEAM_TYPES},
        defaults={'team_type': 'internal', 'is_active': True},
        finalize=_finalize_team,
    ),
    'players': ImportSchema(
        kind='players',
        table='players',
        fields=('name', 'position', 'team_id', 'jersey_number', 'height_cm', 'weight_kg',
                'dominant_foot', 'date_of_birth', 'external_id', 'is_active'),
        conflict_target=('name', 'team_id'),
        required=('name',),
        numeric=('jersey_number', 'height_cm', 'weight_kg'),
        dates=('date_of_birth',),
        booleans=('is_active',),
        choices={'position': PLAYER_POSITIONS, 'dominant_foot': DOMINANT_FEET},
        defaults={'is_active': True},
        references=(Reference('team_name', 'team_id', 'team', TEAM_REF),),
    ),
    'matches': ImportSchema(
        kind='matches',
        table='matches',
        fields=('match_date', 'home_team_id', 'away_team_id', 'home_score', 'away_score',
                'venue', 'match_type', 'notes', 'external_id'),
        conflict_target=('match_date', 'home_team_id', 'away_team_id'),
        required=('match_date',),
        numeric=('home_score', 'away_score'),
        dates=('match_date',),
        choices={'match_type': MATCH_TYPES},
        defaults={'venue': 'Unknown', 'match_type': 'friendly'},
        references=(
            Reference('home_team', 'home_team_id', 'team', TEAM_REF),
            Reference('away_team', 'away_team_id', 'team', TEAM_REF),
        ),
        finalize=_finalize_match,
    ),
    'player_stats': ImportSchema(
        kind='player_stats',
        table='player_match_stats',
        fields=('player_id', 'match_id', 'team_id', 'goals', 'assists', 'own_goals',
                'minutes_played', 'yellow_cards', 'red_cards', 'clean_sheet', 'external_id'),
        conflict_target=('player_id', 'match_id'),
        numeric=('goals', 'assists', 'own_goals', 'minutes_played', 'yellow_cards', 'red_cards'),
        booleans=('clean_sheet',),
        defaults={'goals': 0, 'assists': 0, 'own_goals': 0, 'minutes_played': 0,
                  'yellow_cards': 0, 'red_cards': 0, 'clean_sheet': False},
        references=(
            Reference('player_name', 'player_id', 'player', 'players', scope_field='team_id'),
            Reference('team_name', 'team_id', 'team', TEAM_REF),
            Reference('match_external_id', 'match_id', 'match', 'matches', key_field='external_id'),
        ),
    ),
}


def get_schema(kind):
    try:
        return SCHEMAS[kind]
    except KeyError:
        raise ValueError(f"Invalid import kind: {kind}. Must be one of: {', '.join(SCHEMAS)}") from None


def _canonical_choice(value, allowed):
    for option in allowed:
        if option.lower() == value.strip().lower():
            return option
    return None


def validate_record(record: ProcessedRecord, schema: ImportSchema) -> List[RowIssue]:
    """Return the issues for one record; an empty list means it is importable.

    Every missing required field is reported. Past that, the first failing
    check is the only issue for the row.
    """
    row = record.row_number
    missing = [f for f in schema.required if not str(record.get(f) or '').strip()]
    if missing:
        return [RowIssue(row, f"missing required field '{f}'") for f in missing]

    for name in schema.numeric:
        value = record.get(name)
        if value and parse_int_safe(value) is None:
            return [RowIssue(row, f"'{name}' must be a whole number, got '{value}'")]

    for name in schema.dates:
        value = record.get(name)
        if value and parse_date_safe(value) is None:
            return [RowIssue(row, f"'{name}' is not a valid date, got '{value}'")]

    for name in schema.booleans:
        value = record.get(name)
        if value and parse_bool(value) is None:
            allowed = ', '.join(TRUE_VALUES + FALSE_VALUES)
            return [RowIssue(row, f"invalid {name} '{value}'. Must be one of: {allowed}")]

    for name, allowed in schema.choices.items():
        value = record.get(name)
        if value and _canonical_choice(value, allowed) is None:
            return [RowIssue(row, f"invalid {name} '{value}'. Must be one of: {', '.join(allowed)}")]

    return []


def coerce_record(record: ProcessedRecord, schema: ImportSchema) -> dict:
    """Build the typed store row for a record that passed validation."""
    row = {}
    for name in schema.fields:
        value = record.get(name)
        if value == '' or value is None:
            value = schema.defaults.get(name)
        elif name in schema.numeric:
            value = parse_int_safe(value)
        elif name in schema.dates:
            value = parse_date_safe(value)
        elif name in schema.booleans:
            value = parse_bool(value)
        elif name in schema.choices:
            value = _canonical_choice(value, schema.choices[name])
        row[name] = value
    if schema.finalize:
        row = schema.finalize(row, record)
    return row


def drop_key_clashes(pairs, key_field, existing_rows):
    """Drop rows whose ``key_field`` matches another row or a stored row ignoring case.

    ``pairs`` are ``(row_number, row)``. A row spelled exactly like the stored
    one is kept. A case-only variant of it, or a second row with the same key
    in the input, becomes an issue.
    """
    stored = {}
    for row in existing_rows:
        stored.setdefault(normalize_key(row.get(key_field)), row.get(key_field))

    seen = {}
    kept = []
    issues = []
    for row_number, row in pairs:
        value = row[key_field]
        key = normalize_key(value)
        if key in seen:
            issues.append(RowIssue(row_number, f"{key_field} '{value}' duplicates row {seen[key]}"))
        elif key in stored and stored[key] != value:
            issues.append(RowIssue(row_number, f"{key_field} '{value}' already exists as '{stored[key]}'"))
        else:
            seen[key] = row_number
            kept.append((row_number, row))
    return kept, issues
