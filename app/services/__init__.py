from app.services.core import (
    dashboard_summary, top_scorers, top_assists, goalkeeper_clean_sheets,
    player_win_impact, team_goals, find_potential_duplicates,
)
