from collections import defaultdict

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session


def pairs_of(state):
    ids = defaultdict(list)
    for tile in state['deck']:
        ids[tile['symbol']].append(tile['id'])
    return list(ids.values())


def create(client, **settings):
    res = client.post('/api/sessions/create', json=settings)
    assert res.status_code == 201
    return res.get_json()


def win(client, scheduler, code):
    state = client.get(f'/api/sessions/{code}/state').get_json()
    for a, b in pairs_of(state):
        assert client.post(f'/api/sessions/{code}/flip', json={'tile_id': a}).get_json()['accepted']
        assert client.post(f'/api/sessions/{code}/flip', json={'tile_id': b}).get_json()['accepted']
        scheduler.advance(1)
    return client.get(f'/api/sessions/{code}/state').get_json()


def test_index_and_themes(client):
    assert client.get('/').status_code == 200
    data = client.get('/api/themes').get_json()
    assert data['difficulties'] == {'easy': 4, 'medium': 8, 'hard': 12}
    assert 'animals' in data['themes']
    assert data['custom_theme'] == 'custom'


def test_create_session_defaults(client):
    state = create(client)
    assert len(state['session_code']) == 4
    assert len(state['deck']) == 8
    assert state['configuration']['difficulty'] == 'easy'
    assert state['configuration']['theme'] == 'animals'
    assert state['stats'] == {'moves': 0, 'elapsed_seconds': 0, 'running': True}
    assert state['won'] is False


def test_create_rejects_unknown_settings(client):
    assert client.post('/api/sessions/create', json={'difficulty': 'insane'}).status_code == 400
    assert client.post('/api/sessions/create', json={'theme': 'cars'}).status_code == 400
    assert client.post('/api/sessions/create', json={'custom_symbols': 5}).status_code == 400
    assert client.post('/api/sessions/create', json={'difficulty': ['easy']}).status_code == 400
    assert client.post('/api/sessions/create', json={'difficulty': {'level': 'easy'}}).status_code == 400
    assert client.post('/api/sessions/create', json={'theme': ['animals']}).status_code == 400
    assert client.post('/api/sessions/create', json=['easy', 'animals']).status_code == 400


def test_malformed_bodies_are_rejected(client):
    code = create(client)['session_code']
    res = client.post(f'/api/sessions/{code}/configure', json={'difficulty': ['easy']})
    assert res.status_code == 400
    assert 'error' in res.get_json()
    assert client.post(f'/api/sessions/{code}/configure', json={'theme': {'x': 1}}).status_code == 400
    assert client.post(f'/api/sessions/{code}/configure', json=[1, 2]).status_code == 400
    assert client.post(f'/api/sessions/{code}/flip', json=[0]).status_code == 400
    assert client.post(f'/api/sessions/{code}/finish', json=['Al']).status_code == 400
    assert client.post(f'/api/sessions/{code}/finish', json={'name': 7}).status_code == 400
    assert client.get(f'/api/sessions/{code}/state').get_json()['generation'] == 1


def test_unknown_session_is_404(client):
    assert client.get('/api/sessions/ZZZZ/state').status_code == 404
    assert client.post('/api/sessions/ZZZZ/flip', json={'tile_id': 0}).status_code == 404
    assert client.delete('/api/sessions/ZZZZ').status_code == 404


def test_flip_match_and_lock(client, scheduler):
    state = create(client)
    code = state['session_code']
    (a, b), (c, _) = pairs_of(state)[:2]
    client.post(f'/api/sessions/{code}/flip', json={'tile_id': a})
    locked = client.post(f'/api/sessions/{code}/flip', json={'tile_id': b}).get_json()
    assert locked['locked'] is True
    assert sorted(locked['pending']) == sorted([a, b])
    third = client.post(f'/api/sessions/{code}/flip', json={'tile_id': c}).get_json()
    assert third['accepted'] is False
    assert third['deck'][c]['face_up'] is False

    scheduler.advance(1)
    state = client.get(f'/api/sessions/{code}/state').get_json()
    assert state['deck'][a]['matched'] and state['deck'][b]['matched']
    assert state['stats']['moves'] == 1
    assert state['pending'] == []


def test_flip_requires_integer_tile(client):
    code = create(client)['session_code']
    assert client.post(f'/api/sessions/{code}/flip', json={'tile_id': 'one'}).status_code == 400
    assert client.post(f'/api/sessions/{code}/flip', json={}).status_code == 400


def test_win_finish_and_leaderboard(client, scheduler):
    code = create(client, difficulty='easy', theme='smiles')['session_code']
    before = client.post(f'/api/sessions/{code}/finish', json={'name': 'Early'})
    assert before.status_code == 400

    state = win(client, scheduler, code)
    assert state['won'] is True
    assert state['stats']['running'] is False
    assert state['stats']['moves'] == 4

    res = client.post(f'/api/sessions/{code}/finish', json={'name': 'Al'})
    assert res.status_code == 200
    data = res.get_json()
    assert data['leaderboard_key'] == 'smiles-easy'
    assert data['leaderboard'] == [{'name': 'Al', 'moves': 4, 'elapsed_seconds': state['stats']['elapsed_seconds']}]
    assert data['state']['won'] is False
    assert data['state']['stats']['moves'] == 0

    board = client.get('/api/leaderboard/smiles-easy').get_json()
    assert board['key'] == 'smiles-easy'
    assert board['entries'] == data['leaderboard']
    assert client.get('/api/leaderboard/smiles-hard').get_json()['entries'] == []


def test_configure_and_restart(client, scheduler):
    code = create(client)['session_code']
    state = client.post(f'/api/sessions/{code}/configure', json={'difficulty': 'medium'}).get_json()
    assert len(state['deck']) == 16
    assert state['configuration']['theme'] == 'animals'

    state = client.post(
        f'/api/sessions/{code}/configure',
        json={'theme': 'custom', 'custom_symbols': 'ABC'},
    ).get_json()
    assert len(state['deck']) == 6
    assert state['configuration']['custom_symbols'] == ['A', 'B', 'C']
    assert client.post(f'/api/sessions/{code}/configure', json={'difficulty': 'x'}).status_code == 400

    scheduler.advance(3)
    generation = state['generation']
    state = client.post(f'/api/sessions/{code}/restart').get_json()
    assert state['generation'] == generation + 1
    assert state['stats']['elapsed_seconds'] == 0
    assert len(state['deck']) == 6


def test_end_session(client):
    code = create(client)['session_code']
    assert client.delete(f'/api/sessions/{code}').status_code == 200
    assert client.get(f'/api/sessions/{code}/state').status_code == 404


def test_finish_reports_storage_failure_without_restarting(client, scheduler, monkeypatch):
    code = create(client, theme='food')['session_code']
    won = win(client, scheduler, code)
    assert won['won'] is True

    def failing_commit(self):
        raise SQLAlchemyError('disk full')

    monkeypatch.setattr(Session, 'commit', failing_commit)
    res = client.post(f'/api/sessions/{code}/finish', json={'name': 'Al'})
    monkeypatch.undo()

    assert res.status_code == 500
    assert 'disk full' in res.get_json()['error']
    state = client.get(f'/api/sessions/{code}/state').get_json()
    assert state['won'] is True
    assert state['generation'] == won['generation']
    assert state['stats']['moves'] == 4
    assert client.get('/api/leaderboard/food-easy').get_json()['entries'] == []

    # The failed write left nothing behind, so a retry succeeds
    res = client.post(f'/api/sessions/{code}/finish', json={'name': 'Al'})
    assert res.status_code == 200
    assert [e['name'] for e in res.get_json()['leaderboard']] == ['Al']


def test_idle_http_session_expires(client, scheduler):
    code = create(client)['session_code']
    scheduler.advance(300)
    assert client.get(f'/api/sessions/{code}/state').status_code == 200
    scheduler.advance(599)
    # each request pushes the expiry back
    assert client.get(f'/api/sessions/{code}/state').status_code == 200
    scheduler.advance(601)
    assert client.get(f'/api/sessions/{code}/state').status_code == 404
