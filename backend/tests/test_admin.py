from tictac import db
from tictac.models import User, Game


def _seed():
    admin = User(username='admin', is_admin=True)
    admin.set_password('secret')
    alice = User(username='alice')
    alice.set_password('password')
    bob = User(username='bob')
    bob.set_password('password')
    db.session.add_all([admin, alice, bob])
    db.session.commit()
    games = [
        Game(player_x_id=alice.id, status='waiting'),
        Game(player_x_id=alice.id, player_o_id=bob.id, status='playing'),
        Game(player_x_id=bob.id, status='completed', winner='X'),
    ]
    db.session.add_all(games)
    db.session.commit()
    return admin, alice, bob, games


def _login(client, username='admin', password='secret'):
    return client.post('/api/admin/login', json={'username': username, 'password': password})


def test_admin_routes_require_session(flask_app, client):
    _seed()
    res = client.get('/api/admin/session')
    assert res.status_code == 401
    assert res.get_json() == {'error': 'No admin session'}
    assert client.get('/api/admin/games').status_code == 401
    assert client.get('/api/admin/presence').status_code == 401


def test_non_admin_cannot_log_in(flask_app, client):
    _seed()
    assert _login(client, 'alice', 'password').status_code == 403
    assert _login(client, 'admin', 'wrong').status_code == 401
    assert client.post('/api/admin/login', json={}).status_code == 400


def test_admin_session_and_logout(flask_app, client):
    admin, *_ = _seed()
    res = _login(client)
    assert res.status_code == 200
    res = client.get('/api/admin/session')
    assert res.status_code == 200
    assert res.get_json() == {'adminId': admin.id, 'username': 'admin', 'isAdmin': True}

    assert client.post('/api/admin/logout').status_code == 200
    assert client.get('/api/admin/session').status_code == 401


def test_admin_games_filters(flask_app, client):
    _admin, _alice, _bob, games = _seed()
    _login(client)

    data = client.get('/api/admin/games').get_json()
    assert len(data['games']) == 3

    data = client.get('/api/admin/games?status=playing').get_json()
    assert [g['id'] for g in data['games']] == [games[1].id]

    data = client.get('/api/admin/games?status=all&search=BOB').get_json()
    assert {g['id'] for g in data['games']} == {games[1].id, games[2].id}

    assert client.get('/api/admin/games?status=bogus').status_code == 400


def test_admin_presence_overview(flask_app, client, clock):
    _seed()
    _login(client)
    client.post('/api/games/g1/activity', json={'userId': 'alice', 'playerSymbol': 'X'})
    clock.advance(200)
    client.post('/api/games/g2/activity', json={'userId': 'bob', 'playerSymbol': 'O'})

    data = client.get('/api/admin/presence').get_json()
    by_game = {g['game_id']: g for g in data['games']}
    assert by_game['g1']['should_pause'] is True
    assert by_game['g2']['should_pause'] is False


def test_admin_search_goes_through_request_filter(flask_app, client):
    _seed()
    _login(client)
    res = client.get('/api/admin/games', query_string={'search': "x' OR 1=1 --"})
    assert res.status_code == 400
    assert res.get_json() == {'error': 'Invalid characters in request'}

    res = client.post('/api/admin/login', query_string={'next': 'a;b'},
                      json={'username': 'admin', 'password': 'secret'})
    assert res.status_code == 400


def test_admin_unexpected_error_is_json(flask_app, client, monkeypatch):
    _seed()
    _login(client)

    def boom(*args, **kwargs):
        raise RuntimeError('db went away')

    monkeypatch.setattr(flask_app.extensions['presence'], 'match_ids', boom)
    res = client.get('/api/admin/presence')
    assert res.status_code == 500
    assert res.get_json() == {'error': 'Internal server error'}
