import json

from trivia import socketio


def _events(client, name):
    return [pkt['args'][0] for pkt in client.get_received('/ws') if pkt['name'] == name]


def _by_name(received, name):
    return [pkt['args'][0] for pkt in received if pkt['name'] == name]


def test_socket_connect_receives_initial_state(sio_client):
    # Ensure we are connected to /ws
    if not sio_client.is_connected('/ws'):
        sio_client.connect(namespace='/ws')
    assert sio_client.is_connected('/ws')

    initial = _events(sio_client, 'initialState')
    assert len(initial) == 1
    assert initial[0]['gameState'] == 'waiting'
    assert initial[0]['playerId']


def test_full_round_over_socket(flask_app, sio_client, scheduler, clock):
    sio_client.get_received('/ws')  # flush

    sio_client.emit('setNickname', {'nickname': 'Ana'}, namespace='/ws')
    received = sio_client.get_received('/ws')
    assert _by_name(received, 'nicknameAccepted') == [{'nickname': 'Ana'}]
    assert _by_name(received, 'updateState')[-1]['playerCount'] == 1

    # Grace timer -> question phase
    scheduler.fire()
    state = _events(sio_client, 'updateState')[-1]
    assert state['gameState'] == 'question'
    assert set(state['currentQuestion']) == {'emojis', 'timeLimit', 'type'}

    title = flask_app.extensions['trivia'].current_question.title
    clock.advance(1)
    sio_client.emit('submitAnswer', {'answer': title.lower()}, namespace='/ws')
    received = sio_client.get_received('/ws')
    assert _by_name(received, 'answerResult') == [{'correct': True, 'scoreGained': 195}]
    assert _by_name(received, 'updateState')[-1]['leaderboard'] == [{'nickname': 'Ana', 'score': 195}]

    # Reveal timer
    scheduler.fire()
    received = sio_client.get_received('/ws')
    reveal = _by_name(received, 'revealAnswer')
    assert reveal == [{'correctAnswer': title, 'scores': [{'nickname': 'Ana', 'scoreGained': 195}]}]


def test_envelope_frames_are_accepted(sio_client):
    sio_client.get_received('/ws')
    sio_client.send(json.dumps({'type': 'setNickname', 'payload': {'nickname': 'Bea'}}), namespace='/ws')
    assert _events(sio_client, 'nicknameAccepted') == [{'nickname': 'Bea'}]


def test_protocol_violations_get_error_events(flask_app, sio_client):
    sio_client.get_received('/ws')
    sio_client.emit('setNickname', 'not-an-object', namespace='/ws')
    sio_client.send('{broken json', namespace='/ws')
    sio_client.send(json.dumps({'type': 'teleport', 'payload': {}}), namespace='/ws')
    errors = _events(sio_client, 'error')
    assert len(errors) == 3
    assert all('message' in e for e in errors)
    assert flask_app.extensions['trivia'].registry.count() == 0


def test_taken_nickname_is_rejected(flask_app, sio_client):
    other = socketio.test_client(flask_app, namespace='/ws')
    try:
        other.emit('setNickname', {'nickname': 'bob'}, namespace='/ws')
        sio_client.get_received('/ws')
        sio_client.emit('setNickname', {'nickname': 'Bob'}, namespace='/ws')
        assert _events(sio_client, 'error') == [{'message': 'Nickname already taken.'}]
        assert flask_app.extensions['trivia'].registry.count() == 1
    finally:
        other.disconnect(namespace='/ws')


def test_chat_reaches_everyone_exactly_once(flask_app, sio_client):
    other = socketio.test_client(flask_app, namespace='/ws')
    try:
        sio_client.emit('setNickname', {'nickname': 'Ana'}, namespace='/ws')
        other.emit('setNickname', {'nickname': 'Bob'}, namespace='/ws')
        sio_client.get_received('/ws')
        other.get_received('/ws')

        sio_client.emit('chatMessage', {'message': ' hi all '}, namespace='/ws')
        assert _events(sio_client, 'chatMessage') == [{'nickname': 'Ana', 'message': 'hi all', 'isSelf': True}]
        assert _events(other, 'chatMessage') == [{'nickname': 'Ana', 'message': 'hi all', 'isSelf': False}]
    finally:
        other.disconnect(namespace='/ws')


def test_last_player_disconnect_returns_to_waiting(flask_app, sio_client, scheduler):
    player = socketio.test_client(flask_app, namespace='/ws')
    player.emit('setNickname', {'nickname': 'Ana'}, namespace='/ws')
    scheduler.fire()
    session = flask_app.extensions['trivia']
    assert session.phase.value == 'question'
    sio_client.get_received('/ws')

    # Disconnect player -> watcher sees the abandoned round
    player.disconnect(namespace='/ws')
    state = _events(sio_client, 'updateState')[-1]
    assert state['gameState'] == 'waiting'
    assert state['currentQuestion'] is None
    assert session.timer.pending is None

    scheduler.fire()
    assert _events(sio_client, 'revealAnswer') == []


def test_handler_error_cleans_up_like_disconnect(flask_app, sio_client, monkeypatch):
    session = flask_app.extensions['trivia']
    sio_client.emit('setNickname', {'nickname': 'Ana'}, namespace='/ws')
    assert session.registry.count() == 1

    def explode(sid, event):
        raise RuntimeError('handler blew up')

    monkeypatch.setattr(session, 'handle', explode)
    sio_client.emit('chatMessage', {'message': 'hi'}, namespace='/ws')

    assert session.registry.count() == 0
    assert not sio_client.is_connected('/ws')
