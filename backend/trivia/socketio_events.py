from flask import current_app, request
from flask_socketio import emit, disconnect
from trivia import socketio
from trivia.errors import ProtocolError
from trivia.services.game import events

NAMESPACE = '/ws'


def _session():
    return current_app.extensions['trivia']


def _get_sid() -> str:
    # type: ignore: request.sid exists in Socket.IO context
    return request.sid  # type: ignore


def _max_chars() -> int:
    return int(current_app.config.get('MAX_PAYLOAD_CHARS', 2048))


def _reject(exc: ProtocolError) -> None:
    current_app.logger.info(f"[protocol] sid={_get_sid()} {exc.message}")
    emit('error', events.error_payload(exc.message))


def _dispatch(event_type: str, data) -> None:
    try:
        event = events.parse_event(event_type, data, max_chars=_max_chars())
    except ProtocolError as exc:
        _reject(exc)
        return
    _session().handle(_get_sid(), event)


def handle_connect(auth=None):
    _session().connect(_get_sid())


def handle_disconnect(reason=None):
    _session().disconnect(_get_sid())


def handle_set_nickname(data):
    _dispatch('setNickname', data)


def handle_submit_answer(data):
    _dispatch('submitAnswer', data)


def handle_chat_message(data):
    _dispatch('chatMessage', data)


def handle_message(frame):
    """Plain ``send()`` frames carrying a ``{"type", "payload"}`` envelope."""
    try:
        event = events.parse_envelope(frame, max_chars=_max_chars())
    except ProtocolError as exc:
        _reject(exc)
        return
    _session().handle(_get_sid(), event)


def handle_transport_error(exc):
    # Same cleanup as a disconnect: drop the player and close the socket
    sid = _get_sid()
    current_app.logger.error(f"[transport-error] sid={sid} {exc!r}")
    _session().disconnect(sid)
    disconnect()


def register_socketio_handlers() -> None:
    """Register Socket.IO event handlers on namespace '/ws'."""
    socketio.on_event('connect', handle_connect, namespace=NAMESPACE)
    socketio.on_event('disconnect', handle_disconnect, namespace=NAMESPACE)
    socketio.on_event('setNickname', handle_set_nickname, namespace=NAMESPACE)
    socketio.on_event('submitAnswer', handle_submit_answer, namespace=NAMESPACE)
    socketio.on_event('chatMessage', handle_chat_message, namespace=NAMESPACE)
    socketio.on_event('message', handle_message, namespace=NAMESPACE)
    socketio.on_error(NAMESPACE)(handle_transport_error)
