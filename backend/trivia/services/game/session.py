"""The game session: one shared trivia loop for every connected client.

Phases run ``waiting -> question -> reveal -> question -> ...`` and fall back
to ``waiting`` whenever the last player leaves. Every public method and every
timer callback holds the session lock for its whole run, so a handler never
observes another handler's half-applied changes.
"""
import logging
import threading
import time
from typing import Any, Callable, Dict, Mapping, Optional

from trivia.errors import NicknameRejected
from trivia.models import Phase, Question, public_question
from . import events
from .players import PlayerRegistry
from .question_bank import QuestionBank
from .scheduler import RoundTimer
from .scoring import answers_match, compute_score


class GameSession:

    def __init__(
        self,
        bank: QuestionBank,
        transport,
        scheduler,
        config: Optional[Mapping[str, Any]] = None,
        clock: Callable[[], float] = time.monotonic,
        logger: Optional[logging.Logger] = None,
    ):
        config = config or {}
        self.time_limit = int(config.get('QUESTION_TIME_LIMIT_SEC', 20))
        self.reveal_duration = float(config.get('REVEAL_DURATION_SEC', 5))
        self.join_grace = float(config.get('JOIN_GRACE_SEC', 3))
        self.points_correct = int(config.get('POINTS_CORRECT', 100))
        self.bonus_per_sec = float(config.get('POINTS_TIME_BONUS_PER_SEC', 5))
        self.chat_max_len = int(config.get('CHAT_MAX_LEN', 100))

        self.bank = bank
        self.transport = transport
        self.clock = clock
        self.logger = logger or logging.getLogger(__name__)
        self.registry = PlayerRegistry(
            min_len=int(config.get('NICKNAME_MIN_LEN', 2)),
            max_len=int(config.get('NICKNAME_MAX_LEN', 15)),
        )
        self._lock = threading.RLock()
        self.timer = RoundTimer(scheduler, self._lock, logger=self.logger)
        self.phase = Phase.WAITING
        self.current_question: Optional[Question] = None

    # ---- state payloads ----

    def snapshot(self) -> Dict[str, Any]:
        with self._lock:
            return {
                'players': [p.to_dict() for p in self.registry.players()],
                'leaderboard': [p.to_dict() for p in self.registry.leaderboard()],
                'gameState': self.phase.value,
                'currentQuestion': public_question(self.current_question, self.time_limit),
                'playerCount': self.registry.count(),
            }

    def _broadcast_state(self) -> None:
        self.transport.broadcast(events.UPDATE_STATE, self.snapshot())

    def _send_error(self, sid: str, message: str) -> None:
        self.transport.send(sid, events.ERROR, events.error_payload(message))

    # ---- connection lifecycle ----

    def connect(self, sid: str) -> None:
        with self._lock:
            self.transport.attach(sid)
            payload = self.snapshot()
            payload['playerId'] = sid
            self.transport.send(sid, events.INITIAL_STATE, payload)
            self.logger.info(f"[connect] sid={sid}")

    def disconnect(self, sid: str) -> None:
        with self._lock:
            self.transport.detach(sid)
            player = self.registry.remove(sid)
            if player is None:
                return
            self.logger.info(f"[leave] nickname={player.nickname} sid={sid} remaining={self.registry.count()}")
            if not self.registry.count() and (self.phase != Phase.WAITING or self.timer.pending):
                self.logger.info('[waiting] last player left, abandoning game')
                self._enter_waiting(reset_deck=True)
            self._broadcast_state()

    # ---- inbound events ----

    def handle(self, sid: str, event: events.InboundEvent) -> None:
        if isinstance(event, events.SetNickname):
            self.set_nickname(sid, event.nickname)
        elif isinstance(event, events.SubmitAnswer):
            self.submit_answer(sid, event.answer)
        elif isinstance(event, events.ChatMessage):
            self.chat_message(sid, event.message)
        else:
            raise TypeError(f'Unsupported event {event!r}')

    def set_nickname(self, sid: str, nickname: str) -> None:
        with self._lock:
            try:
                player = self.registry.register(sid, nickname)
            except NicknameRejected as exc:
                self.logger.info(f"[join-rejected] sid={sid} reason={exc.message}")
                self._send_error(sid, exc.message)
                return
            self.logger.info(f"[join] nickname={player.nickname} sid={sid}")
            self.transport.send(sid, events.NICKNAME_ACCEPTED, {'nickname': player.nickname})
            self._broadcast_state()
            if self.phase == Phase.WAITING and not self.timer.pending:
                self.logger.info(f"[waiting] first player joined, starting in {self.join_grace}s")
                self.timer.schedule(self.join_grace, self._start_question_phase, label='question')

    def submit_answer(self, sid: str, answer: str) -> None:
        with self._lock:
            player = self.registry.get(sid)
            question = self.current_question
            if player is None or self.phase != Phase.QUESTION or question is None or player.answered:
                return

            correct = answers_match(answer, question.title)
            points = 0
            if correct:
                elapsed = self.clock() - question.start_time
                points = compute_score(elapsed, self.time_limit, self.points_correct, self.bonus_per_sec)
            self.registry.record_answer(sid, correct, points)

            self.transport.send(sid, events.ANSWER_RESULT, {'correct': correct, 'scoreGained': points})
            if correct:
                self.logger.info(f"[answer] {player.nickname} correct +{points}")
                self._broadcast_state()
            else:
                self.logger.info(f"[answer] {player.nickname} incorrect")

    def chat_message(self, sid: str, message: str) -> None:
        with self._lock:
            player = self.registry.get(sid)
            if player is None:
                self.logger.warning(f"[chat] ignored message from sid={sid} without nickname")
                return
            text = (message or '').strip()[:self.chat_max_len]
            if not text:
                return
            payload = {'nickname': player.nickname, 'message': text}
            self.transport.broadcast(events.CHAT_MESSAGE, dict(payload, isSelf=False), skip_sid=sid)
            self.transport.send(sid, events.CHAT_MESSAGE, dict(payload, isSelf=True))

    # ---- phase transitions ----

    def _enter_waiting(self, reset_deck: bool = False) -> None:
        self.timer.cancel()
        self.phase = Phase.WAITING
        self.current_question = None
        if reset_deck:
            self.bank.reset()

    def _start_question_phase(self) -> None:
        if not self.registry.count():
            self.logger.info('[waiting] no players, not starting a round')
            self._enter_waiting()
            self._broadcast_state()
            return

        self.current_question = self.bank.select_next(start_time=self.clock())
        self.phase = Phase.QUESTION
        self.registry.reset_round()
        self.logger.info(
            f"[question] index={self.current_question.index} emojis={self.current_question.emojis}"
        )
        self._broadcast_state()
        self.timer.schedule(self.time_limit, self._start_reveal_phase, label='reveal')

    def _start_reveal_phase(self) -> None:
        self.timer.cancel()
        question = self.current_question
        if question is None:
            self._enter_waiting()
            self._broadcast_state()
            return

        self.phase = Phase.REVEAL
        scores = [
            {'nickname': p.nickname, 'scoreGained': p.points_this_round}
            for p in self.registry.round_scorers()
        ]
        self.logger.info(f"[reveal] title={question.title!r} scorers={len(scores)}")
        self.transport.broadcast(events.REVEAL_ANSWER, {'correctAnswer': question.title, 'scores': scores})
        self._broadcast_state()
        self.timer.schedule(self.reveal_duration, self._start_question_phase, label='question')

    def shutdown(self) -> None:
        with self._lock:
            self._enter_waiting(reset_deck=True)
            self.registry.clear()
            for sid in self.transport.connected():
                self.transport.close(sid)
                self.transport.detach(sid)
            self.logger.info('[shutdown] session cleared, connections closed')
