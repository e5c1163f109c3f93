from itertools import count
from typing import Dict, List, Optional

from trivia.errors import NicknameRejected
from trivia.models import Player


class PlayerRegistry:
    """Connection id -> Player, with case-insensitive nickname uniqueness.

    Only the game session mutates the registry. Leaderboard ties are broken
    by join order via ``Player.joined_seq``.
    """

    def __init__(self, min_len: int = 2, max_len: int = 15):
        self.min_len = min_len
        self.max_len = max_len
        self._players: Dict[str, Player] = {}
        self._seq = count(1)

    def __len__(self) -> int:
        return len(self._players)

    def __contains__(self, sid) -> bool:
        return sid in self._players

    def count(self) -> int:
        return len(self._players)

    def get(self, sid: str) -> Optional[Player]:
        return self._players.get(sid)

    def players(self) -> List[Player]:
        return sorted(self._players.values(), key=lambda p: p.joined_seq)

    def is_taken(self, nickname: str) -> bool:
        lowered = nickname.lower()
        return any(p.nickname.lower() == lowered for p in self._players.values())

    def register(self, sid: str, nickname) -> Player:
        if sid in self._players:
            raise NicknameRejected('Nickname already set.')
        cleaned = (nickname or '').strip()[:self.max_len].strip()
        if not cleaned:
            raise NicknameRejected('Nickname cannot be empty.')
        if len(cleaned) < self.min_len:
            raise NicknameRejected(f'Nickname must be at least {self.min_len} characters.')
        if self.is_taken(cleaned):
            raise NicknameRejected('Nickname already taken.')
        player = Player(sid=sid, nickname=cleaned, joined_seq=next(self._seq))
        self._players[sid] = player
        return player

    def remove(self, sid: str) -> Optional[Player]:
        return self._players.pop(sid, None)

    def clear(self) -> None:
        self._players.clear()

    def record_answer(self, sid: str, correct: bool, points: int) -> bool:
        """Apply one answer for this round. Returns False if it was not applied."""
        player = self._players.get(sid)
        if player is None or player.answered:
            return False
        player.answered = True
        player.correct_this_round = bool(correct)
        player.points_this_round = max(0, int(points)) if correct else 0
        player.score += player.points_this_round
        return True

    def reset_round(self) -> None:
        for player in self._players.values():
            player.reset_round()

    def round_scorers(self) -> List[Player]:
        scorers = [p for p in self.players() if p.correct_this_round]
        return sorted(scorers, key=lambda p: -p.points_this_round)

    def leaderboard(self) -> List[Player]:
        return sorted(self._players.values(), key=lambda p: (-p.score, p.joined_seq))
