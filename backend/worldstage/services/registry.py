from flask import current_app

from worldstage import db
from worldstage.models import (
    Country,
    Game,
    Player,
    PlayerResources,
    STARTING_RESOURCES,
    STATUS_ACTIVE,
    STATUS_PENDING,
    STATUS_WAITING,
    PHASE_FOUNDATION,
    utcnow,
)
from worldstage.services import atomic
from worldstage.services.errors import AccessDenied, InvalidState, NotFound, ValidationError


LISTED_STATUSES = (STATUS_WAITING, STATUS_ACTIVE)


def _positive_int(value, field, default):
    if value is None:
        return default
    if isinstance(value, float) and not value.is_integer():
        raise ValidationError(f"{field} must be an integer")
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field} must be an integer")
    if isinstance(value, bool) or number < 1:
        raise ValidationError(f"{field} must be a positive integer")
    return number


def list_games():
    return (
        Game.query.filter(Game.status.in_(LISTED_STATUSES))
        .order_by(Game.created_at.desc(), Game.id.desc())
        .all()
    )


def create_game(user, name, max_players=None, turn_duration_hours=None) -> Game:
    if not name or not str(name).strip():
        raise ValidationError('Game name is required')
    game = Game(
        name=str(name).strip(),
        creator_id=user.id,
        max_players=_positive_int(max_players, 'maxPlayers', 10),
        turn_duration_hours=_positive_int(turn_duration_hours, 'turnDurationHours', 24),
    )
    db.session.add(game)
    db.session.commit()
    current_app.logger.info(f"[create] game={game.id} creator={user.id} max_players={game.max_players}")
    return game


def get_game(game_id) -> Game:
    game = db.session.get(Game, game_id)
    if not game:
        raise NotFound('Game not found')
    return game


def _lock_game(game_id) -> Game:
    game = Game.query.filter_by(id=game_id).with_for_update().populate_existing().first()
    if not game:
        raise NotFound('Game not found')
    return game


def join_game(user, game_id, country_id=None, nation_name=None, leader_name=None) -> Player:
    """Add ``user`` to the game with starting resources, all in one transaction.

    The game row is locked and the seat is claimed with a conditional
    UPDATE, so concurrent joins cannot push the game past ``max_players``.
    """
    if country_id is not None:
        country_id = _positive_int(country_id, 'countryId', None)
    with atomic():
        game = _lock_game(game_id)
        if game.current_players >= game.max_players:
            raise InvalidState('Game is full')
        if Player.query.filter_by(user_id=user.id, game_id=game.id).first():
            raise InvalidState('You are already in this game')
        if country_id is not None and not db.session.get(Country, country_id):
            raise NotFound('Country not found')

        # Claim the seat in the UPDATE so two joins cannot both take the last one
        seated = (
            Game.query.filter(Game.id == game.id, Game.current_players < Game.max_players)
            .update({
                Game.current_players: Game.current_players + 1,
                Game.updated_at: utcnow(),
            }, synchronize_session=False)
        )
        if not seated:
            raise InvalidState('Game is full')
        db.session.expire(game, ['current_players', 'updated_at'])

        player = Player(
            user_id=user.id,
            game_id=game.id,
            country_id=country_id,
            nation_name=nation_name,
            leader_name=leader_name,
        )
        db.session.add(player)
        db.session.flush()
        db.session.add(PlayerResources(player_id=player.id, **STARTING_RESOURCES))

    current_app.logger.info(f"[join] game={game.id} user={user.id} player={player.id}")
    return player


def start_game(user, game_id) -> Game:
    """Move a pending game to active. Only the creator may start it."""
    with atomic():
        game = _lock_game(game_id)
        if game.creator_id != user.id:
            raise AccessDenied('Only the game creator can start the game')
        if game.status != STATUS_PENDING:
            raise InvalidState('Game is not in a pending state')

        players = Player.query.filter_by(game_id=game.id).all()
        if not players:
            raise InvalidState('Cannot start a game with no players')
        if current_app.config.get('REQUIRE_ALL_READY') and not all(p.is_ready for p in players):
            raise InvalidState('Not all players are ready')

        now = utcnow()
        started = (
            Game.query.filter_by(id=game.id, status=STATUS_PENDING)
            .update({
                Game.status: STATUS_ACTIVE,
                Game.game_phase: PHASE_FOUNDATION,
                Game.current_turn: 1,
                Game.started_at: now,
                Game.updated_at: now,
            }, synchronize_session=False)
        )
        if not started:
            raise InvalidState('Game is not in a pending state')
        db.session.expire(game)

    current_app.logger.info(f"[start] game={game.id} players={len(players)}")
    return game
