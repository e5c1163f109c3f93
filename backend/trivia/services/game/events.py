"""Wire events exchanged with clients on the ``/ws`` namespace.

Inbound events form a closed set of frozen dataclasses; the connection layer
turns every frame into one of them (or a ``ProtocolError``) before the game
session sees it. Outbound event names are constants so handlers and tests
agree on spelling.
"""
import json
from dataclasses import dataclass
from typing import Any, Dict, Union

from trivia.errors import ProtocolError

# Outbound event names
INITIAL_STATE = 'initialState'
UPDATE_STATE = 'updateState'
NICKNAME_ACCEPTED = 'nicknameAccepted'
ERROR = 'error'
REVEAL_ANSWER = 'revealAnswer'
ANSWER_RESULT = 'answerResult'
CHAT_MESSAGE = 'chatMessage'


@dataclass(frozen=True)
class SetNickname:
    nickname: str


@dataclass(frozen=True)
class SubmitAnswer:
    answer: str


@dataclass(frozen=True)
class ChatMessage:
    message: str


InboundEvent = Union[SetNickname, SubmitAnswer, ChatMessage]

# event type -> (dataclass, required string field)
INBOUND_TYPES = {
    'setNickname': (SetNickname, 'nickname'),
    'submitAnswer': (SubmitAnswer, 'answer'),
    'chatMessage': (ChatMessage, 'message'),
}


def _payload_size(payload: Any) -> int:
    try:
        return len(json.dumps(payload, ensure_ascii=False))
    except (TypeError, ValueError) as exc:
        raise ProtocolError('Payload is not serializable.') from exc


def parse_event(event_type: str, payload: Any, max_chars: int = 2048) -> InboundEvent:
    """Validate a named event and its payload, returning the typed event."""
    entry = INBOUND_TYPES.get(event_type)
    if entry is None:
        raise ProtocolError(f'Unknown message type: {event_type}')
    if not isinstance(payload, dict):
        raise ProtocolError(f'{event_type} payload must be an object.')
    if _payload_size(payload) > max_chars:
        raise ProtocolError('Message too large.')
    cls, field_name = entry
    value = payload.get(field_name)
    if not isinstance(value, str):
        raise ProtocolError(f'{event_type} requires a string "{field_name}".')
    return cls(value)


def parse_envelope(frame: Union[str, bytes, Dict[str, Any]], max_chars: int = 2048) -> InboundEvent:
    """Decode a ``{"type": ..., "payload": {...}}`` envelope sent as a plain message."""
    if isinstance(frame, (bytes, bytearray)):
        try:
            frame = frame.decode('utf-8')
        except UnicodeDecodeError as exc:
            raise ProtocolError('Message is not valid UTF-8.') from exc
    if isinstance(frame, str):
        if len(frame) > max_chars:
            raise ProtocolError('Message too large.')
        try:
            frame = json.loads(frame)
        except ValueError as exc:
            raise ProtocolError('Invalid JSON.') from exc
    if not isinstance(frame, dict):
        raise ProtocolError('Message must be an object with "type" and "payload".')
    event_type = frame.get('type')
    if not isinstance(event_type, str):
        raise ProtocolError('Message is missing "type".')
    return parse_event(event_type, frame.get('payload'), max_chars=max_chars)


def error_payload(message: str) -> Dict[str, str]:
    return {'message': message}
