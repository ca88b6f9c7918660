import re

from flask import Blueprint, current_app, jsonify, request, send_from_directory
from app.services import (
    dashboard_summary, top_scorers, top_assists, goalkeeper_clean_sheets,
    player_win_impact, team_goals,
)

bp = Blueprint('main', __name__)

TEMPLATE_NAME = re.compile(r'^[a-z_]+_template\.csv$')

def _limit(default=10):
    limit = request.args.get('limit', default, type=int)
    return max(1, min(limit, 100))

@bp.route('/', methods=['GET'])
def index():
    return jsonify(dashboard_summary())

@bp.route('/stats/top-scorers', methods=['GET'])
def stats_top_scorers():
    return jsonify(top_scorers(limit=_limit()))

@bp.route('/stats/top-assists', methods=['GET'])
def stats_top_assists():
    return jsonify(top_assists(limit=_limit()))

@bp.route('/stats/clean-sheets', methods=['GET'])
def stats_clean_sheets():
    return jsonify(goalkeeper_clean_sheets(limit=_limit()))

@bp.route('/stats/win-impact', methods=['GET'])
def stats_win_impact():
    min_matches = request.args.get('min_matches', 1, type=int)
    return jsonify(player_win_impact(limit=_limit(), min_matches=min_matches))

@bp.route('/stats/team-goals', methods=['GET'])
def stats_team_goals():
    return jsonify(team_goals())

@bp.route('/templates/<template>', methods=['GET'])
def download_template(template):
    # only plain names, no path segments
    if not TEMPLATE_NAME.match(template):
        return jsonify({'error': 'Invalid template name'}), 400
    return send_from_directory(
        current_app.config['TEMPLATES_DIR'], template,
        mimetype='text/csv', as_attachment=True,
    )
