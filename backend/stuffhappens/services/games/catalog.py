import random
from typing import Iterable, List, Optional

from stuffhappens.errors import InsufficientCards
from stuffhappens.models import Card


class CardSupplier:
    """Deals catalog cards without replacement.

    The catalog is read-only from here; callers pass every card id already
    used in the game so nothing is dealt twice.
    """

    def __init__(self, rng: Optional[random.Random] = None):
        self._rng = rng or random.SystemRandom()

    def deal(self, theme: str, count: int, exclude_ids: Iterable[int] = ()) -> List[Card]:
        excluded = set(exclude_ids)
        query = Card.query.with_entities(Card.id).filter(Card.theme == theme)
        if excluded:
            query = query.filter(Card.id.notin_(excluded))
        eligible = [row.id for row in query.order_by(Card.id).all()]
        if len(eligible) < count:
            raise InsufficientCards(theme, count, len(eligible))
        picked = self._rng.sample(eligible, count)
        by_id = {c.id: c for c in self.cards_by_ids(picked)}
        return [by_id[card_id] for card_id in picked]

    @staticmethod
    def cards_by_ids(ids: Iterable[int]) -> List[Card]:
        ids = list(ids)
        if not ids:
            return []
        return Card.query.filter(Card.id.in_(ids)).order_by(Card.bad_luck_index, Card.id).all()
