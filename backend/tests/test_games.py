from worldstage import db
from worldstage.models import Country, Game, Player, PlayerResources

from conftest import create_game, join_game, sio_connect


def test_create_game_defaults(client, alice):
    user, headers = alice
    game = create_game(client, headers)
    assert game['name'] == 'Test World'
    assert game['creator_id'] == user['id']
    assert game['creator_username'] == 'alice'
    assert game['status'] == 'pending'
    assert game['max_players'] == 10
    assert game['turn_duration_hours'] == 24
    assert game['current_players'] == 0
    assert game['current_turn'] == 0
    assert game['world_seed']


def test_create_game_validation(client, alice):
    _, headers = alice
    res = client.post('/api/games', json={}, headers=headers)
    assert res.status_code == 400
    assert res.get_json()['message'] == 'Game name is required'

    res = client.post('/api/games', json={'name': 'X', 'maxPlayers': 0}, headers=headers)
    assert res.status_code == 400
    res = client.post('/api/games', json={'name': 'X', 'turnDurationHours': 'soon'}, headers=headers)
    assert res.status_code == 400

    res = client.post('/api/games', json={'name': 'X', 'maxPlayers': 1.9}, headers=headers)
    assert res.status_code == 400
    assert res.get_json()['message'] == 'maxPlayers must be an integer'
    res = client.post('/api/games', json={'name': 'X', 'maxPlayers': 4.0}, headers=headers)
    assert res.get_json()['game']['max_players'] == 4


def test_list_games_only_waiting_and_active_newest_first(flask_app, client, alice):
    _, headers = alice
    first = create_game(client, headers, name='First')
    second = create_game(client, headers, name='Second')
    hidden = create_game(client, headers, name='Hidden')

    db.session.get(Game, first['id']).status = 'waiting'
    db.session.get(Game, second['id']).status = 'active'
    db.session.commit()

    res = client.get('/api/games', headers=headers)
    assert res.status_code == 200
    names = [g['name'] for g in res.get_json()['games']]
    assert names == ['Second', 'First']
    assert hidden['name'] not in names


def test_join_creates_player_resources_and_increments_counter(client, alice):
    _, headers = alice
    game = create_game(client, headers)
    country = Country.query.filter_by(code='FRA').first()
    res = join_game(client, headers, game['id'], countryId=country.id, nationName='Gaul', leaderName='Vercingetorix')
    assert res.status_code == 200
    player = res.get_json()['player']
    assert player['nation_name'] == 'Gaul'
    assert player['country_name'] == 'France'
    assert player['is_ready'] is False

    resources = PlayerResources.query.filter_by(player_id=player['id']).one()
    assert (resources.money, resources.materials, resources.population, resources.happiness) == (1000, 500, 1000, 70)

    details = client.get(f"/api/games/{game['id']}", headers=headers).get_json()['game']
    assert details['current_players'] == 1
    assert details['players'][0]['username'] == 'alice'
    assert details['players'][0]['color_hex'] == country.color_hex


def test_join_twice_is_rejected(client, alice):
    _, headers = alice
    game = create_game(client, headers)
    assert join_game(client, headers, game['id']).status_code == 200
    res = join_game(client, headers, game['id'])
    assert res.status_code == 400
    assert res.get_json()['message'] == 'You are already in this game'
    assert Player.query.filter_by(game_id=game['id']).count() == 1


def test_join_missing_game_or_country(client, alice):
    _, headers = alice
    assert join_game(client, headers, 9999).status_code == 404
    game = create_game(client, headers)
    res = join_game(client, headers, game['id'], countryId=9999)
    assert res.status_code == 404
    # Nothing persisted from the failed attempt
    assert db.session.get(Game, game['id']).current_players == 0
    assert Player.query.filter_by(game_id=game['id']).count() == 0


def test_game_full_scenario(client, alice, bob, carol):
    _, a_headers = alice
    _, b_headers = bob
    carol_user, c_headers = carol
    game = create_game(client, a_headers, maxPlayers=2)

    assert join_game(client, a_headers, game['id']).status_code == 200
    # Joining at max-1 succeeds and fills the game
    assert join_game(client, b_headers, game['id']).status_code == 200
    assert db.session.get(Game, game['id']).current_players == 2

    res = join_game(client, c_headers, game['id'])
    assert res.status_code == 400
    assert res.get_json()['message'] == 'Game is full'
    assert Player.query.filter_by(game_id=game['id'], user_id=carol_user['id']).count() == 0
    assert db.session.get(Game, game['id']).current_players == 2


def test_get_game_details_not_found(client, alice):
    _, headers = alice
    res = client.get('/api/games/4242', headers=headers)
    assert res.status_code == 404
    assert res.get_json()['message'] == 'Game not found'


def test_start_game_transitions_to_active(client, alice):
    _, headers = alice
    game = create_game(client, headers)
    join_game(client, headers, game['id'])
    res = client.post(f"/api/games/{game['id']}/start", headers=headers)
    assert res.status_code == 200
    started = res.get_json()['game']
    assert started['status'] == 'active'
    assert started['game_phase'] == 'foundation'
    assert started['current_turn'] == 1
    assert started['started_at'] is not None


def test_start_game_twice_only_transitions_once(client, alice):
    _, headers = alice
    game = create_game(client, headers)
    join_game(client, headers, game['id'])
    first = client.post(f"/api/games/{game['id']}/start", headers=headers)
    second = client.post(f"/api/games/{game['id']}/start", headers=headers)
    assert first.status_code == 200
    assert second.status_code == 400
    assert second.get_json()['message'] == 'Game is not in a pending state'


def test_start_game_requires_creator_and_players(client, alice, bob):
    _, a_headers = alice
    _, b_headers = bob
    game = create_game(client, a_headers)

    res = client.post(f"/api/games/{game['id']}/start", headers=a_headers)
    assert res.status_code == 400
    assert res.get_json()['message'] == 'Cannot start a game with no players'

    join_game(client, b_headers, game['id'])
    res = client.post(f"/api/games/{game['id']}/start", headers=b_headers)
    assert res.status_code == 403
    assert db.session.get(Game, game['id']).status == 'pending'


def test_start_checks_readiness_only_when_configured(flask_app, client, alice):
    _, headers = alice
    game = create_game(client, headers)
    join_game(client, headers, game['id'])
    flask_app.config['REQUIRE_ALL_READY'] = True
    res = client.post(f"/api/games/{game['id']}/start", headers=headers)
    assert res.status_code == 400
    assert res.get_json()['message'] == 'Not all players are ready'

    flask_app.config['REQUIRE_ALL_READY'] = False
    res = client.post(f"/api/games/{game['id']}/start", headers=headers)
    assert res.status_code == 200


def test_start_broadcasts_to_game_room(flask_app, client, alice):
    _, headers = alice
    game = create_game(client, headers)
    join_game(client, headers, game['id'])

    sio = sio_connect(flask_app, headers)
    assert sio.is_connected()
    sio.emit('join_game', game['id'])
    sio.get_received()

    client.post(f"/api/games/{game['id']}/start", headers=headers)
    events = sio.get_received()
    started = [e for e in events if e['name'] == 'game_started']
    assert len(started) == 1
    assert started[0]['args'][0]['status'] == 'active'
    assert started[0]['args'][0]['id'] == game['id']
    sio.disconnect()


def test_join_notifies_creator(flask_app, client, alice, bob):
    _, a_headers = alice
    _, b_headers = bob
    game = create_game(client, a_headers)

    creator_sio = sio_connect(flask_app, a_headers)
    creator_sio.get_received()
    join_game(client, b_headers, game['id'])
    notes = [e for e in creator_sio.get_received() if e['name'] == 'notification']
    assert len(notes) == 1
    assert notes[0]['args'][0]['gameId'] == game['id']
    assert 'bob' in notes[0]['args'][0]['message']
    creator_sio.disconnect()


def test_my_games_lists_joined_games(client, alice, bob):
    _, a_headers = alice
    _, b_headers = bob
    mine = create_game(client, a_headers, name='Mine')
    create_game(client, b_headers, name='Not mine')
    join_game(client, a_headers, mine['id'], nationName='Aland')

    res = client.get('/api/players/games', headers=a_headers)
    games = res.get_json()['games']
    assert [g['name'] for g in games] == ['Mine']
    assert games[0]['nation_name'] == 'Aland'
    assert games[0]['player_id']


def test_countries_are_listed_by_name(client, alice):
    _, headers = alice
    countries = client.get('/api/players/countries', headers=headers).get_json()['countries']
    names = [c['name'] for c in countries]
    assert names == sorted(names)
    assert 'Japan' in names
