import logging

from flask import Blueprint, current_app, jsonify, request
from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError

from app.extensions import db
from app.models import Team, Player, Match, PlayerMatchAssignment
from app.utils import admin_required, parse_bool, parse_int_safe
from app.services import find_potential_duplicates
from app.importer import (
    ConfigurationError, ImportOrchestrator, ImportOptions, ParseError, SCHEMAS, SQLAlchemyStore, get_schema,
)
from app.importer.batch import import_assignments
from app.importer.resolver import ProcessedRecord
from app.importer.validator import coerce_record, validate_record

logger = logging.getLogger(__name__)

bp = Blueprint('admin', __name__, url_prefix='/admin')

def _form_errors(values, kind):
    """Run the import rules for ``kind`` over a JSON payload."""
    record = ProcessedRecord(0, {k: '' if v is None else str(v) for k, v in values.items()})
    schema = get_schema(kind)
    issues = validate_record(record, schema)
    if issues:
        return [issue.message for issue in issues], None
    return [], coerce_record(record, schema)

def _commit(message, status=200, **extra):
    try:
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        logger.warning("Admin write failed: %s", e)
        return jsonify({'error': f'Database error: {e}'}), 400
    body = {'message': message}
    body.update(extra)
    return jsonify(body), status

# --- Teams ---

@bp.route('/teams', methods=['GET'])
@admin_required
def list_teams():
    teams = Team.query.order_by(Team.name).all()
    return jsonify([t.to_dict() for t in teams])

@bp.route('/teams', methods=['POST'])
@admin_required
def create_team():
    payload = request.get_json(silent=True) or {}
    errors, row = _form_errors(payload, 'teams')
    if errors:
        return jsonify({'errors': errors}), 400
    if Team.query.filter(func.lower(Team.name) == row['name'].lower()).first():
        return jsonify({'errors': [f"Team '{row['name']}' already exists"]}), 400

    team = Team(**row)
    db.session.add(team)
    db.session.flush()
    return _commit('Team created successfully.', 201, team=team.to_dict())

@bp.route('/teams/<int:team_id>', methods=['PUT'])
@admin_required
def update_team(team_id):
    team = db.get_or_404(Team, team_id)
    values = team.to_dict()
    values.update(request.get_json(silent=True) or {})
    errors, row = _form_errors(values, 'teams')
    if errors:
        return jsonify({'errors': errors}), 400
    for key, value in row.items():
        setattr(team, key, value)
    return _commit('Team updated successfully.', team=team.to_dict())

@bp.route('/teams/<int:team_id>', methods=['DELETE'])
@admin_required
def delete_team(team_id):
    team = db.get_or_404(Team, team_id)
    in_use = Match.query.filter((Match.home_team_id == team_id) | (Match.away_team_id == team_id)).count()
    if in_use:
        return jsonify({'error': f'Team is used by {in_use} match(es) and cannot be deleted.'}), 400
    Player.query.filter_by(team_id=team_id).update({'team_id': None})
    db.session.delete(team)
    return _commit('Team deleted successfully.')

# --- Players ---

@bp.route('/players', methods=['GET'])
@admin_required
def list_players():
    query = Player.query.order_by(Player.name)
    team_id = request.args.get('team_id', type=int)
    if team_id:
        query = query.filter_by(team_id=team_id)
    return jsonify([p.to_dict() for p in query.all()])

def _player_row(values):
    errors, row = _form_errors(values, 'players')
    if errors:
        return errors, None
    team_id = parse_int_safe(values.get('team_id'))
    if values.get('team_id') not in (None, '') and (team_id is None or db.session.get(Team, team_id) is None):
        return [f"team {values.get('team_id')} not found"], None
    row['team_id'] = team_id
    return [], row

@bp.route('/players', methods=['POST'])
@admin_required
def create_player():
    payload = request.get_json(silent=True) or {}
    errors, row = _player_row(payload)
    if errors:
        return jsonify({'errors': errors}), 400

    # Near-miss names are usually typos of an existing player.
    if not parse_bool(payload.get('confirm'), False):
        all_player_names_in_db = [p.name for p in Player.query.all()]
        fuzzy_errors = find_potential_duplicates([row['name']], all_player_names_in_db)
        if fuzzy_errors:
            return jsonify({'errors': fuzzy_errors}), 409

    player = Player(**row)
    db.session.add(player)
    try:
        db.session.flush()
    except SQLAlchemyError:
        db.session.rollback()
        return jsonify({'errors': [f"Player '{row['name']}' already exists in that team"]}), 400
    return _commit('Player created successfully.', 201, player=player.to_dict())

@bp.route('/players/<int:player_id>', methods=['PUT'])
@admin_required
def update_player(player_id):
    player = db.get_or_404(Player, player_id)
    values = player.to_dict()
    values.update(request.get_json(silent=True) or {})
    errors, row = _player_row(values)
    if errors:
        return jsonify({'errors': errors}), 400
    for key, value in row.items():
        setattr(player, key, value)
    return _commit('Player updated successfully.', player=player.to_dict())

@bp.route('/players/<int:player_id>', methods=['DELETE'])
@admin_required
def delete_player(player_id):
    player = db.get_or_404(Player, player_id)
    PlayerMatchAssignment.query.filter_by(player_id=player_id).delete()
    db.session.delete(player)
    return _commit('Player deleted successfully.')

# --- Matches ---

@bp.route('/matches', methods=['GET'])
@admin_required
def list_matches():
    matches = Match.query.order_by(Match.match_date.desc()).all()
    return jsonify([m.to_dict() for m in matches])

def _match_row(values):
    home_id = parse_int_safe(values.get('home_team_id'))
    away_id = parse_int_safe(values.get('away_team_id'))
    home = db.session.get(Team, home_id) if home_id is not None else None
    away = db.session.get(Team, away_id) if away_id is not None else None
    if home is None or away is None:
        return ['home_team_id and away_team_id must name existing teams'], None
    if home.id == away.id:
        return ['A team cannot play itself'], None

    values = dict(values, home_team=home.name, away_team=away.name)
    errors, row = _form_errors(values, 'matches')
    if errors:
        return errors, None
    row['home_team_id'] = home.id
    row['away_team_id'] = away.id
    return [], row

@bp.route('/matches', methods=['POST'])
@admin_required
def create_match():
    errors, row = _match_row(request.get_json(silent=True) or {})
    if errors:
        return jsonify({'errors': errors}), 400
    match = Match(**row)
    db.session.add(match)
    try:
        db.session.flush()
    except SQLAlchemyError:
        db.session.rollback()
        return jsonify({'errors': ['A match between these teams on that date already exists']}), 400
    return _commit('Match added successfully.', 201, match=match.to_dict())

@bp.route('/matches/<int:match_id>', methods=['PUT'])
@admin_required
def update_match(match_id):
    match = db.get_or_404(Match, match_id)
    values = match.to_dict()
    values.update(request.get_json(silent=True) or {})
    errors, row = _match_row(values)
    if errors:
        return jsonify({'errors': errors}), 400
    for key, value in row.items():
        setattr(match, key, value)
    return _commit('Match updated successfully.', match=match.to_dict())

@bp.route('/matches/<int:match_id>', methods=['DELETE'])
@admin_required
def delete_match(match_id):
    match = db.get_or_404(Match, match_id)
    db.session.delete(match)
    return _commit('Match deleted successfully.')

@bp.route('/matches/<int:match_id>/stats', methods=['GET'])
@admin_required
def match_stats(match_id):
    match = db.get_or_404(Match, match_id)
    return jsonify({'match': match.to_dict(), 'stats': [s.to_dict() for s in match.stats]})

@bp.route('/matches/<int:match_id>/stats', methods=['POST'])
@admin_required
def save_match_stats(match_id):
    match = db.get_or_404(Match, match_id)
    entries = (request.get_json(silent=True) or {}).get('stats') or []

    rows = []
    errors = []
    for i, entry in enumerate(entries, start=1):
        player = db.session.get(Player, parse_int_safe(entry.get('player_id')) or 0)
        if player is None:
            errors.append(f"Entry {i}: player {entry.get('player_id')} not found")
            continue
        team_id = parse_int_safe(entry.get('team_id')) or player.team_id
        if team_id not in (match.home_team_id, match.away_team_id):
            errors.append(f"Entry {i}: team {team_id} did not play in this match")
            continue
        entry_errors, row = _form_errors(dict(entry, player_id=player.id, team_id=team_id), 'player_stats')
        if entry_errors:
            errors.extend(f"Entry {i}: {e}" for e in entry_errors)
            continue
        row.update(player_id=player.id, match_id=match.id, team_id=team_id)
        rows.append(row)

    if errors:
        return jsonify({'errors': errors}), 400

    store = SQLAlchemyStore(db.session)
    assignment_error = import_assignments(store, rows)
    if assignment_error:
        return jsonify({'error': str(assignment_error)}), 400
    result = store.upsert('player_match_stats', rows, conflict_target=('player_id', 'match_id'))
    if result.error:
        return jsonify({'error': f'Error saving stats: {result.error}'}), 400
    return jsonify({'message': f'Saved stats for {result.count} player(s).'})

# --- CSV import ---

@bp.route('/import', methods=['GET'])
@admin_required
def import_kinds():
    """Columns each import kind expects, in template order."""
    return jsonify({kind: schema.template_columns for kind, schema in SCHEMAS.items()})

def _flag(payload, name, default):
    value = payload.get(name)
    if value is None or value == '':
        return default
    result = parse_bool(value)
    if result is None:
        raise ValueError(f"{name} must be true or false, got {value!r}")
    return result

def _import_request():
    """Pull csv text and options from a JSON body or a multipart upload."""
    if request.files.get('file'):
        payload = request.form
        text = request.files['file'].read().decode('utf-8-sig')
    else:
        payload = request.get_json(silent=True) or {}
        text = payload.get('data')

    batch_size = payload.get('batchSize', current_app.config.get('IMPORT_BATCH_SIZE', 100))
    if isinstance(batch_size, str):
        batch_size = parse_int_safe(batch_size)
    options = ImportOptions(
        dry_run=_flag(payload, 'dryRun', False),
        skip_duplicates=_flag(payload, 'skipDuplicates', True),
        batch_size=batch_size,
    )
    return text, options

@bp.route('/import/<kind>', methods=['POST'])
@admin_required
def import_data(kind):
    try:
        get_schema(kind)
        text, options = _import_request()
    except ValueError as e:
        return jsonify({'error': str(e)}), 400
    if not text:
        return jsonify({'error': 'No data provided'}), 400

    orchestrator = ImportOrchestrator(
        SQLAlchemyStore(db.session),
        comment_prefix=current_app.config.get('IMPORT_COMMENT_PREFIX', '#'),
    )
    try:
        summary = orchestrator.run(kind, text, options)
    except ParseError as e:
        return jsonify({'error': f'Could not read CSV: {e}'}), 400
    except ConfigurationError as e:
        logger.error("Import of %s aborted: %s", kind, e)
        return jsonify({'error': str(e)}), 500
    return jsonify(summary.to_dict())
