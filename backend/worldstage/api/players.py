from flask import Blueprint, jsonify, request
from flask_login import login_required, current_user

from worldstage.models import Country, Game, Player
from worldstage.services import ledger
from worldstage.services.notify import broadcast_to_game


players = Blueprint('players', __name__)


@players.before_request
@login_required
def require_login():
    pass


@players.route('/countries', methods=['GET'])
def list_countries():
    countries = Country.query.order_by(Country.name).all()
    return jsonify({'success': True, 'countries': [c.to_dict() for c in countries]})


@players.route('/games', methods=['GET'])
def list_my_games():
    rows = (
        Game.query.join(Player, Player.game_id == Game.id)
        .filter(Player.user_id == current_user.id)
        .add_columns(Player.id, Player.nation_name, Player.leader_name)
        .order_by(Game.created_at.desc(), Game.id.desc())
        .all()
    )
    result = []
    for game, player_id, nation_name, leader_name in rows:
        data = game.to_dict()
        data.update({'player_id': player_id, 'nation_name': nation_name, 'leader_name': leader_name})
        result.append(data)
    return jsonify({'success': True, 'games': result})


@players.route('/<int:player_id>/resources', methods=['GET'])
def get_resources(player_id):
    player = ledger.get_owned_player(player_id, current_user)
    return jsonify({'success': True, 'resources': ledger.get_resources(player)})


@players.route('/<int:player_id>/buildings', methods=['GET'])
def list_buildings(player_id):
    player = ledger.get_owned_player(player_id, current_user)
    return jsonify({'success': True, 'buildings': ledger.list_buildings(player)})


@players.route('/<int:player_id>/buildings', methods=['POST'])
def construct_building(player_id):
    data = request.get_json(silent=True) or {}
    player = ledger.get_owned_player(player_id, current_user)
    building = ledger.construct_building(player, data.get('buildingTypeId'))
    return jsonify({
        'success': True,
        'message': 'Building constructed successfully',
        'building': building,
    })


@players.route('/buildings/<int:building_id>/upgrade', methods=['POST'])
def upgrade_building(building_id):
    building = ledger.upgrade_building(building_id, current_user)
    return jsonify({
        'success': True,
        'message': 'Building upgraded successfully',
        'building': building,
    })


@players.route('/<int:player_id>/technologies', methods=['GET'])
def list_technologies(player_id):
    player = ledger.get_owned_player(player_id, current_user)
    return jsonify({'success': True, 'technologies': ledger.list_technologies(player)})


@players.route('/<int:player_id>/technologies/research', methods=['POST'])
def start_research(player_id):
    data = request.get_json(silent=True) or {}
    player = ledger.get_owned_player(player_id, current_user)
    technology = ledger.start_research(player, data.get('technologyId'))
    return jsonify({
        'success': True,
        'message': 'Research started successfully',
        'technology': technology,
    })


@players.route('/<int:player_id>/ready', methods=['POST'])
def toggle_ready(player_id):
    player = ledger.toggle_ready(ledger.get_owned_player(player_id, current_user))
    broadcast_to_game(player.game_id, 'player_ready_status_changed', {
        'playerId': player.id,
        'userId': player.user_id,
        'username': current_user.username,
        'is_ready': player.is_ready,
    })
    return jsonify({
        'success': True,
        'message': f'Player ready status set to {str(player.is_ready).lower()}',
        'player': player.to_dict(),
    })
