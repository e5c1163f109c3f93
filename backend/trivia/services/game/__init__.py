"""Game domain services: question bank, scoring, players, timers and the session.

This package contains the trivia game logic that socket handlers and HTTP
routes drive, keeping transport concerns separated from core game
mechanics. Nothing in here imports Flask-SocketIO directly; the session
talks to the outside world through a transport and a scheduler handed to it.
"""

from .question_bank import QuestionBank
from .scoring import normalize_answer, answers_match, compute_score
from .players import PlayerRegistry
from .scheduler import RoundTimer
from .session import GameSession

__all__ = [
    'QuestionBank',
    'normalize_answer',
    'answers_match',
    'compute_score',
    'PlayerRegistry',
    'RoundTimer',
    'GameSession',
]
