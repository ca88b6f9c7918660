from app.extensions import db
from app.models import Team, Player, Match, PlayerMatchStat
from sqlalchemy import func, case
from thefuzz import process as fuzz_process

def _pct(part, whole):
    return round(part / whole * 100.0, 1) if whole else 0.0

def match_outcome(team_id, match):
    """Result of ``match`` from ``team_id``'s side, or None if unplayed/unrelated."""
    if match.home_score is None or match.away_score is None:
        return None
    if team_id == match.home_team_id:
        ours, theirs = match.home_score, match.away_score
    elif team_id == match.away_team_id:
        ours, theirs = match.away_score, match.home_score
    else:
        return None
    if ours > theirs:
        return 'win'
    if ours == theirs:
        return 'draw'
    return 'loss'

def dashboard_summary(recent=5):
    recent_matches = Match.query.order_by(Match.match_date.desc()).limit(recent).all()
    return {
        'total_teams': Team.query.count(),
        'total_players': Player.query.count(),
        'total_matches': Match.query.count(),
        'recent_matches': [m.to_dict() for m in recent_matches],
    }

def _leaderboard(column, label, limit):
    total_col = func.sum(column).label(label)
    matches_col = func.count(PlayerMatchStat.id).label('matches_played')
    rows = db.session.query(Player.id, Player.name, total_col, matches_col)\
        .join(PlayerMatchStat, PlayerMatchStat.player_id == Player.id)\
        .group_by(Player.id, Player.name)\
        .having(func.sum(column) > 0)\
        .order_by(total_col.desc(), Player.name)\
        .limit(limit)\
        .all()
    return [
        {
            'player_id': player_id,
            'player_name': name,
            label: int(total),
            'matches_played': played,
            'per_match': round(total / played, 2) if played else 0.0,
        }
        for player_id, name, total, played in rows
    ]

def top_scorers(limit=10):
    return _leaderboard(PlayerMatchStat.goals, 'total_goals', limit)

def top_assists(limit=10):
    return _leaderboard(PlayerMatchStat.assists, 'total_assists', limit)

def goalkeeper_clean_sheets(limit=10):
    clean_col = func.sum(case((PlayerMatchStat.clean_sheet, 1), else_=0)).label('clean_sheets')
    played_col = func.count(PlayerMatchStat.id).label('matches_played')
    rows = db.session.query(Player.id, Player.name, clean_col, played_col)\
        .join(PlayerMatchStat, PlayerMatchStat.player_id == Player.id)\
        .filter(Player.position == 'Goalkeeper')\
        .group_by(Player.id, Player.name)\
        .order_by(clean_col.desc(), Player.name)\
        .limit(limit)\
        .all()
    return [
        {
            'player_id': player_id,
            'player_name': name,
            'clean_sheets': int(clean or 0),
            'matches_played': played,
            'clean_sheet_percentage': _pct(clean or 0, played),
        }
        for player_id, name, clean, played in rows
    ]

def compute_win_impact(records, limit=10, min_matches=1):
    """Win rate per player and its delta from the mean win rate of all players.

    ``records`` maps player id to a dict with ``player_name``,
    ``player_position`` and ``win``/``draw``/``loss`` counts.
    """
    players = []
    for player_id, rec in records.items():
        total = rec['win'] + rec['draw'] + rec['loss']
        if total < min_matches or total == 0:
            continue
        players.append({
            'player_id': player_id,
            'player_name': rec['player_name'],
            'player_position': rec.get('player_position') or 'Unknown',
            'total_matches': total,
            'win_matches': rec['win'],
            'draw_matches': rec['draw'],
            'loss_matches': rec['loss'],
            'win_rate': _pct(rec['win'], total),
        })
    if not players:
        return []

    average = sum(p['win_rate'] for p in players) / len(players)
    for p in players:
        p['win_rate_delta'] = round(p['win_rate'] - average, 1)

    players.sort(key=lambda p: (-p['win_rate_delta'], p['player_name']))
    return players[:limit]

def player_win_impact(limit=10, min_matches=1):
    stats = PlayerMatchStat.query.join(Match).join(Player).all()
    records = {}
    for stat in stats:
        outcome = match_outcome(stat.team_id, stat.match)
        if outcome is None:
            continue
        rec = records.setdefault(stat.player_id, {
            'player_name': stat.player.name,
            'player_position': stat.player.position,
            'win': 0, 'draw': 0, 'loss': 0,
        })
        rec[outcome] += 1
    return compute_win_impact(records, limit=limit, min_matches=min_matches)

def team_goals(limit=None):
    """Goals for/against and results per team over all scored matches."""
    matches = Match.query.filter(Match.home_score.isnot(None), Match.away_score.isnot(None)).all()
    teams = {t.id: t for t in Team.query.all()}
    table = {}
    for match in matches:
        for team_id, scored, conceded in (
            (match.home_team_id, match.home_score, match.away_score),
            (match.away_team_id, match.away_score, match.home_score),
        ):
            team = teams.get(team_id)
            if team is None:
                continue
            entry = table.setdefault(team_id, {
                'team_id': team_id, 'team_name': team.name, 'played': 0,
                'wins': 0, 'draws': 0, 'losses': 0,
                'goals_for': 0, 'goals_against': 0,
            })
            entry['played'] += 1
            entry['goals_for'] += scored
            entry['goals_against'] += conceded
            outcome = match_outcome(team_id, match)
            entry[{'win': 'wins', 'draw': 'draws', 'loss': 'losses'}[outcome]] += 1

    rows = list(table.values())
    for entry in rows:
        entry['goal_difference'] = entry['goals_for'] - entry['goals_against']
        entry['points'] = entry['wins'] * 3 + entry['draws']
        entry['win_pct'] = _pct(entry['wins'], entry['played'])

    rows.sort(key=lambda e: (-e['goals_for'], -e['goal_difference'], e['team_name']))
    return rows[:limit] if limit else rows

def find_potential_duplicates(player_names_to_check, all_player_names, threshold=90):
    """Checks a list of names against a list of known names for potential duplicates."""
    errors = []
    known_names_set = set(all_player_names)

    for name in player_names_to_check:
        if name not in known_names_set:
            if all_player_names:
                best_match, score = fuzz_process.extractOne(name, all_player_names)
                if score >= threshold:
                    errors.append(f"'{name}' is not an existing player. Did you mean '{best_match}'?")
    return errors
