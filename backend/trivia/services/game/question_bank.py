import json
import logging
import random
from typing import FrozenSet, List, Optional, Sequence

from trivia.errors import QuestionBankError
from trivia.models import Question, TriviaItem

# Random draws per bank item before the used-set is force-cleared
MAX_DRAW_ATTEMPTS = 10

logger = logging.getLogger(__name__)


def _coerce_item(raw, position: int) -> TriviaItem:
    if not isinstance(raw, dict):
        raise QuestionBankError(f'Question #{position} is not an object')
    title = raw.get('title')
    emojis = raw.get('emojis')
    if not isinstance(title, str) or not title.strip():
        raise QuestionBankError(f'Question #{position} has no title')
    if not isinstance(emojis, str) or not emojis.strip():
        raise QuestionBankError(f'Question #{position} has no emojis')
    item_type = raw.get('type') or ''
    return TriviaItem(title=title, emojis=emojis, type=str(item_type))


class QuestionBank:
    """Immutable set of trivia items with per-pass repeat avoidance.

    Every item is served once before any item repeats. When the pass is
    complete the used-set is cleared and a new pass begins.
    """

    def __init__(self, items: Sequence[TriviaItem], rng: Optional[random.Random] = None):
        if not items:
            raise QuestionBankError('Question bank is empty')
        self._items: List[TriviaItem] = list(items)
        self._rng = rng or random.Random()
        self._used = set()

    @classmethod
    def from_records(cls, records, rng: Optional[random.Random] = None) -> 'QuestionBank':
        if not isinstance(records, list):
            raise QuestionBankError('Question bank must be a JSON array')
        return cls([_coerce_item(r, i) for i, r in enumerate(records)], rng=rng)

    @classmethod
    def from_file(cls, path: str, rng: Optional[random.Random] = None) -> 'QuestionBank':
        try:
            with open(path, encoding='utf-8') as fh:
                records = json.load(fh)
        except (OSError, ValueError) as exc:
            raise QuestionBankError(f'Could not load questions from {path}: {exc}') from exc
        bank = cls.from_records(records, rng=rng)
        logger.info(f"[bank-load] path={path} items={len(bank)}")
        return bank

    def __len__(self) -> int:
        return len(self._items)

    @property
    def used_indices(self) -> FrozenSet[int]:
        return frozenset(self._used)

    def reset(self) -> None:
        self._used.clear()

    def _draw(self) -> Optional[int]:
        for _ in range(MAX_DRAW_ATTEMPTS * len(self._items)):
            index = self._rng.randrange(len(self._items))
            if index not in self._used:
                return index
        return None

    def select_next(self, start_time: float) -> Question:
        if len(self._used) >= len(self._items):
            logger.info('[deck-reset] all questions used, starting a new pass')
            self._used.clear()

        index = self._draw()
        if index is None:
            logger.warning(f"[deck-reset] no unused question after {MAX_DRAW_ATTEMPTS * len(self._items)} draws, forcing reset")
            self._used.clear()
            index = self._rng.randrange(len(self._items))

        self._used.add(index)
        item = self._items[index]
        return Question(
            index=index,
            title=item.title,
            emojis=item.emojis,
            type=item.type,
            start_time=start_time,
        )
