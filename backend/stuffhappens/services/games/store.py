from datetime import datetime
from typing import List, Optional, Set

from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError

from stuffhappens import db
from stuffhappens.errors import ActiveGameExists
from stuffhappens.models import Card, Game, GameCard, GameStatus


class SessionStore:
    """Durable record of games and their dealt cards.

    Reads go through the Flask-SQLAlchemy session; nothing is committed until
    the engine calls :meth:`commit`, so a transition is applied whole or not
    at all.
    """

    # -- games --

    def lock_game(self, game_id: int) -> Optional[Game]:
        """Load a game holding its row lock until the transaction ends."""
        return (
            Game.query.filter_by(id=game_id)
            .with_for_update()
            .populate_existing()
            .first()
        )

    def active_game_for(self, owner_id: int) -> Optional[Game]:
        return Game.query.filter_by(owner_id=owner_id, status=GameStatus.PLAYING).first()

    def insert_game(self, owner_id: int, theme: str, now: datetime, cards: List[Card], hand_size: int) -> Game:
        """Insert a playing game with its initial hand.

        The partial unique index on playing games makes the check and the
        insert one atomic step: a racing insert fails here.
        """
        game = Game(
            owner_id=owner_id,
            theme=theme,
            status=GameStatus.PLAYING,
            cards_collected=hand_size,
            wrong_guesses=0,
            current_round=1,
            created_at=now,
        )
        db.session.add(game)
        try:
            db.session.flush()
        except IntegrityError:
            db.session.rollback()
            active = self.active_game_for(owner_id)
            raise ActiveGameExists(active.id if active else None)
        for card in cards:
            db.session.add(GameCard(
                game_id=game.id,
                card_id=card.id,
                round_number=0,
                is_initial=True,
                guessed_correctly=True,
                card_dealt_at=now,
                played_at=now,
            ))
        db.session.flush()
        return game

    def history_for(self, owner_id: int) -> List[Game]:
        return (
            Game.query.filter(Game.owner_id == owner_id, Game.status.in_(GameStatus.TERMINAL))
            .order_by(Game.completed_at.desc(), Game.id.desc())
            .all()
        )

    def increment_cards_collected(self, game: Game) -> None:
        game.cards_collected += 1
        db.session.add(game)

    def increment_wrong_guesses(self, game: Game) -> None:
        game.wrong_guesses += 1
        db.session.add(game)

    def advance_round(self, game: Game) -> None:
        game.current_round += 1
        db.session.add(game)

    def complete(self, game: Game, status: str, now: datetime) -> None:
        game.status = status
        game.completed_at = now
        db.session.add(game)

    def delete_stale(self, cutoff: datetime) -> int:
        stale_ids = [
            row.id for row in
            Game.query.with_entities(Game.id)
            .filter(Game.status == GameStatus.PLAYING, Game.created_at < cutoff)
            .all()
        ]
        if not stale_ids:
            return 0
        GameCard.query.filter(GameCard.game_id.in_(stale_ids)).delete(synchronize_session=False)
        Game.query.filter(Game.id.in_(stale_ids)).delete(synchronize_session=False)
        return len(stale_ids)

    # -- game cards --

    def get_game_card(self, game_card_id: int) -> Optional[GameCard]:
        return db.session.get(GameCard, game_card_id)

    def live_card(self, game_id: int, round_number: int) -> Optional[GameCard]:
        return (
            GameCard.query.filter_by(game_id=game_id, round_number=round_number)
            .filter(GameCard.guessed_correctly.is_(None))
            .first()
        )

    def add_round_card(self, game: Game, card: Card, now: datetime) -> GameCard:
        game_card = GameCard(
            game_id=game.id,
            card_id=card.id,
            round_number=game.current_round,
            is_initial=False,
            guessed_correctly=None,
            card_dealt_at=now,
        )
        db.session.add(game_card)
        db.session.flush()
        return game_card

    def record_outcome(self, game_card: GameCard, correct: bool, position: Optional[int], now: datetime) -> None:
        game_card.guessed_correctly = correct
        game_card.position_guessed = position
        game_card.played_at = now
        db.session.add(game_card)

    def hand(self, game_id: int) -> List[GameCard]:
        """Cards the player holds: the initial three plus every correct guess."""
        return (
            GameCard.query.filter(GameCard.game_id == game_id)
            .filter(or_(GameCard.is_initial.is_(True), GameCard.guessed_correctly.is_(True)))
            .order_by(GameCard.round_number, GameCard.id)
            .all()
        )

    def game_cards(self, game_id: int) -> List[GameCard]:
        return (
            GameCard.query.filter_by(game_id=game_id)
            .order_by(GameCard.round_number, GameCard.id)
            .all()
        )

    def used_card_ids(self, game_id: int) -> Set[int]:
        rows = GameCard.query.with_entities(GameCard.card_id).filter_by(game_id=game_id).all()
        return {row.card_id for row in rows}

    # -- transactions --

    def commit(self) -> None:
        db.session.commit()

    def rollback(self) -> None:
        db.session.rollback()
