from flask import Blueprint, jsonify, request
from flask_login import login_required, current_user

from worldstage.services import registry
from worldstage.services.notify import broadcast_to_game, send_notification_to_user


games = Blueprint('games', __name__)


@games.before_request
@login_required
def require_login():
    pass


@games.route('', methods=['GET'])
def list_games():
    return jsonify({
        'success': True,
        'games': [g.to_dict() for g in registry.list_games()],
    })


@games.route('', methods=['POST'])
def create_game():
    data = request.get_json(silent=True) or {}
    game = registry.create_game(
        current_user,
        data.get('name'),
        max_players=data.get('maxPlayers'),
        turn_duration_hours=data.get('turnDurationHours'),
    )
    return jsonify({
        'success': True,
        'message': 'Game created successfully',
        'game': game.to_dict(),
    }), 201


@games.route('/<int:game_id>', methods=['GET'])
def get_game_details(game_id):
    game = registry.get_game(game_id)
    return jsonify({'success': True, 'game': game.to_dict(include_players=True)})


@games.route('/<int:game_id>/join', methods=['POST'])
def join_game(game_id):
    data = request.get_json(silent=True) or {}
    player = registry.join_game(
        current_user,
        game_id,
        country_id=data.get('countryId'),
        nation_name=data.get('nationName'),
        leader_name=data.get('leaderName'),
    )
    game = player.game
    broadcast_to_game(game.id, 'player_joined', {
        'userId': current_user.id,
        'username': current_user.username,
        'playerId': player.id,
    })
    if game.creator_id != current_user.id:
        send_notification_to_user(game.creator_id, {
            'type': 'player_joined',
            'gameId': game.id,
            'message': f"{current_user.username} joined {game.name}",
        })
    return jsonify({
        'success': True,
        'message': 'Successfully joined game',
        'player': player.to_dict(),
    })


@games.route('/<int:game_id>/start', methods=['POST'])
def start_game(game_id):
    game = registry.start_game(current_user, game_id)
    payload = game.to_dict()
    broadcast_to_game(game.id, 'game_started', payload)
    return jsonify({
        'success': True,
        'message': 'Game started successfully',
        'game': payload,
    })
