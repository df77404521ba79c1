from datetime import datetime, timezone
import secrets

from flask_login import UserMixin

from worldstage import db, bcrypt


# Game status / phase values
STATUS_PENDING = 'pending'
STATUS_WAITING = 'waiting'
STATUS_ACTIVE = 'active'
STATUS_COMPLETED = 'completed'

PHASE_FOUNDATION = 'foundation'
PHASE_EXPANSION = 'expansion'
PHASE_COMPETITION = 'competition'
PHASE_RESOLUTION = 'resolution'

RESEARCH_IN_PROGRESS = 'researching'
RESEARCH_COMPLETED = 'completed'

MAX_BUILDING_LEVEL = 5

STARTING_RESOURCES = {
    'money': 1000,
    'materials': 500,
    'population': 1000,
    'happiness': 70,
}


def utcnow():
    """Naive UTC timestamp; both SQLite and the PostgreSQL columns store naive values."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def _iso(value):
    return value.isoformat() if value else None


def generate_world_seed():
    return secrets.token_urlsafe(6)


class User(UserMixin, db.Model):
    __tablename__ = 'users'
    id = db.Column(db.Integer, primary_key=True)
    username = db.Column(db.String(64), unique=True, nullable=False, index=True)
    email = db.Column(db.String(255), unique=True, nullable=False, index=True)
    password_hash = db.Column(db.String(256), nullable=False)
    is_active = db.Column(db.Boolean, default=True, nullable=False)
    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)
    last_login = db.Column(db.DateTime, nullable=True)

    def set_password(self, password):
        self.password_hash = bcrypt.generate_password_hash(password).decode('utf-8')

    def check_password(self, password):
        return bcrypt.check_password_hash(self.password_hash, password)

    def to_dict(self):
        return {
            'id': self.id,
            'username': self.username,
            'email': self.email,
            'createdAt': _iso(self.created_at),
            'lastLogin': _iso(self.last_login),
        }


class Country(db.Model):
    __tablename__ = 'countries'
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(100), unique=True, nullable=False)
    code = db.Column(db.String(8), unique=True, nullable=False)
    position_x = db.Column(db.Float, nullable=False, default=50.0)
    position_y = db.Column(db.Float, nullable=False, default=50.0)
    color_hex = db.Column(db.String(7), nullable=False, default='#4299e1')
    capital_name = db.Column(db.String(100), nullable=True)
    government_type = db.Column(db.String(64), nullable=True)
    description = db.Column(db.Text, nullable=True)

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'code': self.code,
            'position_x': self.position_x,
            'position_y': self.position_y,
            'color_hex': self.color_hex,
            'capital_name': self.capital_name,
            'government_type': self.government_type,
            'description': self.description,
        }


class Game(db.Model):
    __tablename__ = 'games'
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(128), nullable=False)
    creator_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False)
    status = db.Column(db.String(32), default=STATUS_PENDING, nullable=False)  # pending, waiting, active, completed
    max_players = db.Column(db.Integer, default=10, nullable=False)
    current_players = db.Column(db.Integer, default=0, nullable=False)
    turn_duration_hours = db.Column(db.Integer, default=24, nullable=False)
    current_turn = db.Column(db.Integer, default=0, nullable=False)
    game_phase = db.Column(db.String(32), nullable=True)  # foundation, expansion, competition, resolution
    world_seed = db.Column(db.String(64), default=generate_world_seed, nullable=False)
    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=utcnow, nullable=False)
    started_at = db.Column(db.DateTime, nullable=True)

    creator = db.relationship('User')
    players = db.relationship('Player', back_populates='game', order_by='Player.id')

    @property
    def hours_per_turn(self):
        return self.turn_duration_hours or 24

    def to_dict(self, include_players=False):
        data = {
            'id': self.id,
            'name': self.name,
            'creator_id': self.creator_id,
            'creator_username': self.creator.username if self.creator else None,
            'status': self.status,
            'max_players': self.max_players,
            'current_players': self.current_players,
            'turn_duration_hours': self.turn_duration_hours,
            'current_turn': self.current_turn,
            'game_phase': self.game_phase,
            'world_seed': self.world_seed,
            'created_at': _iso(self.created_at),
            'updated_at': _iso(self.updated_at),
            'started_at': _iso(self.started_at),
        }
        if include_players:
            data['players'] = [p.to_dict() for p in self.players]
        return data


class Player(db.Model):
    __tablename__ = 'players'
    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False, index=True)
    game_id = db.Column(db.Integer, db.ForeignKey('games.id'), nullable=False, index=True)
    country_id = db.Column(db.Integer, db.ForeignKey('countries.id'), nullable=True)
    nation_name = db.Column(db.String(128), nullable=True)
    leader_name = db.Column(db.String(128), nullable=True)
    is_active = db.Column(db.Boolean, default=True, nullable=False)
    is_ready = db.Column(db.Boolean, default=False, nullable=False)
    reputation_score = db.Column(db.Integer, default=0, nullable=False)
    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=utcnow, nullable=False)

    user = db.relationship('User')
    country = db.relationship('Country')
    game = db.relationship('Game', back_populates='players')
    resources = db.relationship('PlayerResources', back_populates='player', uselist=False)

    def to_dict(self):
        return {
            'id': self.id,
            'user_id': self.user_id,
            'game_id': self.game_id,
            'username': self.user.username if self.user else None,
            'country_id': self.country_id,
            'country_name': self.country.name if self.country else None,
            'color_hex': self.country.color_hex if self.country else None,
            'nation_name': self.nation_name,
            'leader_name': self.leader_name,
            'is_active': self.is_active,
            'is_ready': self.is_ready,
            'reputation_score': self.reputation_score,
        }


class PlayerResources(db.Model):
    __tablename__ = 'player_resources'
    id = db.Column(db.Integer, primary_key=True)
    player_id = db.Column(db.Integer, db.ForeignKey('players.id'), unique=True, nullable=False)
    money = db.Column(db.Integer, default=STARTING_RESOURCES['money'], nullable=False)
    materials = db.Column(db.Integer, default=STARTING_RESOURCES['materials'], nullable=False)
    population = db.Column(db.Integer, default=STARTING_RESOURCES['population'], nullable=False)
    happiness = db.Column(db.Integer, default=STARTING_RESOURCES['happiness'], nullable=False)
    updated_at = db.Column(db.DateTime, default=utcnow, nullable=False)

    player = db.relationship('Player', back_populates='resources')

    def to_dict(self):
        return {
            'id': self.id,
            'player_id': self.player_id,
            'money': self.money,
            'materials': self.materials,
            'population': self.population,
            'happiness': self.happiness,
            'updated_at': _iso(self.updated_at),
        }


class BuildingType(db.Model):
    __tablename__ = 'building_types'
    id = db.Column(db.Integer, primary_key=True)
    code = db.Column(db.String(64), unique=True, nullable=False)
    name = db.Column(db.String(128), nullable=False)
    description = db.Column(db.Text, nullable=True)
    category = db.Column(db.String(32), nullable=False)
    cost_money = db.Column(db.Integer, nullable=False, default=0)
    cost_materials = db.Column(db.Integer, nullable=False, default=0)
    effects = db.Column(db.JSON, nullable=False, default=dict)

    def to_dict(self):
        return {
            'id': self.id,
            'code': self.code,
            'name': self.name,
            'description': self.description,
            'category': self.category,
            'cost_money': self.cost_money,
            'cost_materials': self.cost_materials,
            'effects': self.effects or {},
        }


class PlayerBuilding(db.Model):
    __tablename__ = 'player_buildings'
    id = db.Column(db.Integer, primary_key=True)
    player_id = db.Column(db.Integer, db.ForeignKey('players.id'), nullable=False, index=True)
    building_type_id = db.Column(db.Integer, db.ForeignKey('building_types.id'), nullable=False)
    level = db.Column(db.Integer, default=1, nullable=False)
    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=utcnow, nullable=False)

    player = db.relationship('Player')
    building_type = db.relationship('BuildingType')


class Technology(db.Model):
    __tablename__ = 'technologies'
    id = db.Column(db.Integer, primary_key=True)
    code = db.Column(db.String(64), unique=True, nullable=False)
    name = db.Column(db.String(128), nullable=False)
    description = db.Column(db.Text, nullable=True)
    category = db.Column(db.String(32), nullable=False)
    tier = db.Column(db.Integer, default=1, nullable=False)
    research_cost = db.Column(db.Integer, nullable=False, default=0)
    research_time_hours = db.Column(db.Integer, nullable=False, default=24)
    prerequisites = db.Column(db.JSON, nullable=False, default=list)  # list of technology ids
    effects = db.Column(db.JSON, nullable=False, default=dict)

    def to_dict(self):
        return {
            'id': self.id,
            'code': self.code,
            'name': self.name,
            'description': self.description,
            'category': self.category,
            'tier': self.tier,
            'research_cost': self.research_cost,
            'research_time_hours': self.research_time_hours,
            'prerequisites': list(self.prerequisites or []),
            'effects': self.effects or {},
        }


class PlayerResearch(db.Model):
    __tablename__ = 'player_research'
    __table_args__ = (
        db.UniqueConstraint('player_id', 'technology_id', name='uq_player_research_player_technology'),
    )
    id = db.Column(db.Integer, primary_key=True)
    player_id = db.Column(db.Integer, db.ForeignKey('players.id'), nullable=False, index=True)
    technology_id = db.Column(db.Integer, db.ForeignKey('technologies.id'), nullable=False)
    status = db.Column(db.String(32), default=RESEARCH_IN_PROGRESS, nullable=False)  # researching, completed
    progress = db.Column(db.Integer, default=0, nullable=False)
    started_at = db.Column(db.DateTime, default=utcnow, nullable=False)
    completed_at = db.Column(db.DateTime, nullable=True)

    technology = db.relationship('Technology')
