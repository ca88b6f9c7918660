from app.extensions import db

TEAM_TYPES = ('internal', 'external', 'club')
PLAYER_POSITIONS = ('Goalkeeper', 'Defender', 'Midfielder', 'Forward')
DOMINANT_FEET = ('left', 'right', 'both')
MATCH_TYPES = ('friendly', 'internal_friendly', 'external_game')


class Team(db.Model):
    __tablename__ = 'teams'
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(100), unique=True, nullable=False)
    team_type = db.Column(db.String(20), nullable=False, default='internal')
    primary_shirt_color = db.Column(db.String(20), nullable=False, default='#808080')
    secondary_shirt_color = db.Column(db.String(20))
    logo_url = db.Column(db.String(255))
    external_id = db.Column(db.String(100))
    is_active = db.Column(db.Boolean, nullable=False, default=True)
    players = db.relationship('Player', back_populates='team', lazy='dynamic')

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'team_type': self.team_type,
            'primary_shirt_color': self.primary_shirt_color,
            'secondary_shirt_color': self.secondary_shirt_color,
            'logo_url': self.logo_url,
            'external_id': self.external_id,
            'is_active': self.is_active,
        }


class Player(db.Model):
    __tablename__ = 'players'
    __table_args__ = (db.UniqueConstraint('name', 'team_id'),)
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(100), nullable=False)
    position = db.Column(db.String(20))
    team_id = db.Column(db.Integer, db.ForeignKey('teams.id'))
    jersey_number = db.Column(db.Integer)
    height_cm = db.Column(db.Integer)
    weight_kg = db.Column(db.Integer)
    dominant_foot = db.Column(db.String(10))
    date_of_birth = db.Column(db.Date)
    external_id = db.Column(db.String(100))
    is_active = db.Column(db.Boolean, nullable=False, default=True)
    team = db.relationship('Team', back_populates='players')
    stats = db.relationship('PlayerMatchStat', back_populates='player', cascade="all, delete-orphan")

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'position': self.position,
            'team_id': self.team_id,
            'team_name': self.team.name if self.team else None,
            'jersey_number': self.jersey_number,
            'height_cm': self.height_cm,
            'weight_kg': self.weight_kg,
            'dominant_foot': self.dominant_foot,
            'date_of_birth': self.date_of_birth.isoformat() if self.date_of_birth else None,
            'external_id': self.external_id,
            'is_active': self.is_active,
        }


class Match(db.Model):
    __tablename__ = 'matches'
    __table_args__ = (db.UniqueConstraint('match_date', 'home_team_id', 'away_team_id'),)
    id = db.Column(db.Integer, primary_key=True)
    match_date = db.Column(db.Date, nullable=False)
    home_team_id = db.Column(db.Integer, db.ForeignKey('teams.id'), nullable=False)
    away_team_id = db.Column(db.Integer, db.ForeignKey('teams.id'), nullable=False)
    home_score = db.Column(db.Integer)
    away_score = db.Column(db.Integer)
    venue = db.Column(db.String(100), nullable=False, default='Unknown')
    match_type = db.Column(db.String(20), nullable=False, default='friendly')
    notes = db.Column(db.Text)
    external_id = db.Column(db.String(100), unique=True)
    home_team = db.relationship('Team', foreign_keys=[home_team_id])
    away_team = db.relationship('Team', foreign_keys=[away_team_id])
    stats = db.relationship('PlayerMatchStat', back_populates='match', cascade="all, delete-orphan", lazy='select')
    assignments = db.relationship('PlayerMatchAssignment', cascade="all, delete-orphan", lazy='select')

    def to_dict(self):
        return {
            'id': self.id,
            'match_date': self.match_date.isoformat(),
            'home_team_id': self.home_team_id,
            'away_team_id': self.away_team_id,
            'home_team': self.home_team.name if self.home_team else None,
            'away_team': self.away_team.name if self.away_team else None,
            'home_score': self.home_score,
            'away_score': self.away_score,
            'venue': self.venue,
            'match_type': self.match_type,
            'notes': self.notes,
            'external_id': self.external_id,
        }


class PlayerMatchStat(db.Model):
    __tablename__ = 'player_match_stats'
    __table_args__ = (db.UniqueConstraint('player_id', 'match_id'),)
    id = db.Column(db.Integer, primary_key=True)
    player_id = db.Column(db.Integer, db.ForeignKey('players.id'), nullable=False)
    match_id = db.Column(db.Integer, db.ForeignKey('matches.id'), nullable=False)
    team_id = db.Column(db.Integer, db.ForeignKey('teams.id'), nullable=False)
    goals = db.Column(db.Integer, nullable=False, default=0)
    assists = db.Column(db.Integer, nullable=False, default=0)
    own_goals = db.Column(db.Integer, nullable=False, default=0)
    minutes_played = db.Column(db.Integer, nullable=False, default=0)
    yellow_cards = db.Column(db.Integer, nullable=False, default=0)
    red_cards = db.Column(db.Integer, nullable=False, default=0)
    clean_sheet = db.Column(db.Boolean, nullable=False, default=False)
    external_id = db.Column(db.String(100))
    player = db.relationship('Player', back_populates='stats')
    match = db.relationship('Match', back_populates='stats')

    def to_dict(self):
        return {
            'id': self.id,
            'player_id': self.player_id,
            'player_name': self.player.name if self.player else None,
            'match_id': self.match_id,
            'team_id': self.team_id,
            'goals': self.goals,
            'assists': self.assists,
            'own_goals': self.own_goals,
            'minutes_played': self.minutes_played,
            'yellow_cards': self.yellow_cards,
            'red_cards': self.red_cards,
            'clean_sheet': self.clean_sheet,
        }


class PlayerMatchAssignment(db.Model):
    __tablename__ = 'player_match_assignments'
    __table_args__ = (db.UniqueConstraint('player_id', 'match_id'),)
    id = db.Column(db.Integer, primary_key=True)
    player_id = db.Column(db.Integer, db.ForeignKey('players.id'), nullable=False)
    match_id = db.Column(db.Integer, db.ForeignKey('matches.id'), nullable=False)
    team_id = db.Column(db.Integer, db.ForeignKey('teams.id'), nullable=False)
