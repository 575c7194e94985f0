def test_index(client):
    res = client.get('/')
    assert res.status_code == 200
    assert 'message' in res.get_json()


def test_server_info_uses_configured_ip(client):
    res = client.get('/api/server-info')
    assert res.status_code == 200
    assert res.get_json() == {'ip': '192.168.1.50', 'port': 4444, 'url': 'http://192.168.1.50:4444'}


def test_get_state(client):
    res = client.get('/api/match/state')
    assert res.status_code == 200
    data = res.get_json()
    assert data['state']['status'] == 'idle'
    assert data['state']['current_round'] == 1
    assert data['state']['timer'] == 120
    assert data['config']['points'] == {'body': 2, 'head': 3, 'tech': 1}
    assert data['judges'] == []


def test_update_config_merges_points(client):
    res = client.post('/api/match/config', json={'rounds': 2, 'round_duration': 60, 'points': {'head': 4}})
    assert res.status_code == 200
    data = res.get_json()
    assert data['config']['rounds'] == 2
    assert data['config']['points'] == {'body': 2, 'head': 4, 'tech': 1}
    assert data['state']['timer'] == 60


def test_update_config_requires_object(client):
    res = client.post('/api/match/config', json=[1, 2])
    assert res.status_code == 400


def test_timer_start_and_pause(client):
    res = client.post('/api/match/timer', json={'action': 'start'})
    assert res.status_code == 200
    assert res.get_json()['state']['status'] == 'running'

    res = client.post('/api/match/timer', json={'action': 'pause'})
    assert res.get_json()['state']['status'] == 'paused'

    assert client.post('/api/match/timer', json={'action': 'rewind'}).status_code == 400


def test_penalty_and_new_match(client):
    res = client.post('/api/match/penalty', json={'side': 'blue'})
    assert res.status_code == 200
    state = res.get_json()['state']
    assert state['penalties'] == {'red': 0, 'blue': 1}
    assert state['penalty_points'] == {'red': 1, 'blue': 0}

    assert client.post('/api/match/penalty', json={'side': 'green'}).status_code == 400

    state = client.post('/api/match/new').get_json()['state']
    assert state['penalties'] == {'red': 0, 'blue': 0}
    assert state['status'] == 'idle'


def test_disqualification_via_api(client):
    for _ in range(10):
        res = client.post('/api/match/penalty', json={'side': 'red'})
    state = res.get_json()['state']
    assert state['status'] == 'matchEnd'
    assert state['winner'] == 'blue'


def test_next_round_and_reset(client, flask_app):
    engine = flask_app.extensions['match_engine']
    # Resolve a round end without waiting on the clock
    engine.state.status = 'roundEnd'
    engine.state.current_round = 2

    state = client.post('/api/match/next-round').get_json()['state']
    assert state['status'] == 'idle'
    assert state['current_round'] == 2

    client.post('/api/match/config', json={'rounds': 7})
    data = client.post('/api/match/reset').get_json()
    assert data['config']['rounds'] == 3
    assert data['state']['current_round'] == 1


def test_array_bodies_are_rejected(client):
    assert client.post('/api/match/timer', json=['start']).status_code == 400
    assert client.post('/api/match/penalty', json=['red']).status_code == 400
    state = client.get('/api/match/state').get_json()['state']
    assert state['status'] == 'idle'
    assert state['penalties'] == {'red': 0, 'blue': 0}
