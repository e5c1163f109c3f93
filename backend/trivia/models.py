from dataclasses import dataclass
from enum import Enum
from typing import Optional


class Phase(str, Enum):
    WAITING = 'waiting'
    QUESTION = 'question'
    REVEAL = 'reveal'


@dataclass
class Player:
    sid: str
    nickname: str
    joined_seq: int
    score: int = 0
    # Round scaffolding, cleared at every question phase entry
    answered: bool = False
    correct_this_round: bool = False
    points_this_round: int = 0

    def reset_round(self) -> None:
        self.answered = False
        self.correct_this_round = False
        self.points_this_round = 0

    def to_dict(self):
        return {
            'nickname': self.nickname,
            'score': self.score,
        }


@dataclass(frozen=True)
class TriviaItem:
    title: str
    emojis: str
    type: str = ''


@dataclass(frozen=True)
class Question:
    index: int
    title: str
    emojis: str
    type: str
    start_time: float

    def to_public_dict(self, time_limit: int):
        """Client-facing view: the prompt only, never the title."""
        return {
            'emojis': self.emojis,
            'timeLimit': time_limit,
            'type': self.type,
        }


def public_question(question: Optional[Question], time_limit: int):
    return question.to_public_dict(time_limit) if question else None
