from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import List, Optional, Tuple

from flask import current_app

from stuffhappens.errors import (
    ActiveGameExists,
    GameError,
    GameNotActive,
    GameNotFound,
    InsufficientCards,
    InvalidRoundCard,
    NotOwner,
)
from stuffhappens.models import Card, Game, GameCard, GameStatus
from .catalog import CardSupplier
from .clock import AntiCheatClock
from .locks import KeyedLocks
from .ranking import correct_position
from .store import SessionStore


@dataclass
class NewGame:
    game: Game
    initial_cards: List[Card]


@dataclass
class RoundDeal:
    game_card: GameCard
    card: Card
    round_number: int
    time_limit: float
    remaining: float
    resumed: bool = False

    def to_dict(self):
        data = self.card.to_dict(reveal=False)
        data['gameCardId'] = self.game_card.id
        data['round_number'] = self.round_number
        return {
            'roundCard': data,
            'roundNumber': self.round_number,
            'timeLimit': self.time_limit,
            'timeRemaining': round(self.remaining, 3),
            'cardDealtAt': self.game_card.card_dealt_at.isoformat(),
            'message': 'Continue current round' if self.resumed else f'Round {self.round_number} started',
        }


@dataclass
class ActiveGame:
    game: Game
    hand: List[Card]
    round_card: Optional[RoundDeal] = None


@dataclass
class GuessOutcome:
    correct: bool
    correct_position: int
    timed_out: bool
    elapsed_seconds: float
    revealed_card: Card
    game: Game
    time_limit: float
    status: str

    @property
    def message(self):
        elapsed = int(self.elapsed_seconds)
        if self.timed_out:
            head = f'Time expired! (Server: {elapsed}s, limit {int(self.time_limit)}s)'
        elif self.correct:
            head = f'Correct! (Time: {elapsed}s)'
        else:
            head = f'Wrong! (Time: {elapsed}s)'
        if self.status == GameStatus.WON:
            tail = 'You won the game!'
        elif self.status == GameStatus.LOST:
            tail = 'Game over.'
        elif self.correct:
            tail = 'You got the card.'
        else:
            tail = 'Next round.'
        return f'{head} {tail}'

    def to_dict(self):
        return {
            'correct': self.correct,
            'correctPosition': self.correct_position,
            'actualTimeElapsed': int(self.elapsed_seconds),
            'timedOut': self.timed_out,
            'gameStatus': self.status,
            'game': self.game.to_dict(),
            'revealedCard': self.revealed_card.to_dict(),
            'message': self.message,
        }


@dataclass
class HistoryEntry:
    game: Game
    cards: List[Tuple[GameCard, Card]] = field(default_factory=list)

    def to_dict(self):
        data = self.game.to_dict()
        data['cards'] = []
        for game_card, card in self.cards:
            entry = card.to_dict()
            entry.update({
                'game_card_id': game_card.id,
                'round_number': game_card.round_number,
                'guessed_correctly': game_card.guessed_correctly,
                'position_guessed': game_card.position_guessed,
                'is_initial': game_card.is_initial,
                'won': game_card.won,
            })
            data['cards'].append(entry)
        return data


class GameEngine:
    """Authoritative state machine for single-player games.

    Every mutating call on a game runs under that game's lock: an in-process
    lock plus the row lock taken by :meth:`SessionStore.lock_game`. Two
    submissions for the same live card therefore resolve one after the other
    and the second sees the round already advanced.
    """

    def __init__(self, store=None, supplier=None, clock=None,
                 initial_hand_size=3, cards_to_win=6, max_wrong_guesses=3,
                 default_theme='university_life'):
        self.store = store or SessionStore()
        self.supplier = supplier or CardSupplier()
        self.clock = clock or AntiCheatClock()
        self.initial_hand_size = initial_hand_size
        self.cards_to_win = cards_to_win
        self.max_wrong_guesses = max_wrong_guesses
        self.default_theme = default_theme
        self._game_locks = KeyedLocks()
        self._owner_locks = KeyedLocks()

    @classmethod
    def from_config(cls, config):
        return cls(
            clock=AntiCheatClock(time_limit=config.get('ROUND_TIME_LIMIT_SEC', 30)),
            initial_hand_size=config.get('INITIAL_HAND_SIZE', 3),
            cards_to_win=config.get('CARDS_TO_WIN', 6),
            max_wrong_guesses=config.get('MAX_WRONG_GUESSES', 3),
            default_theme=config.get('DEFAULT_THEME', 'university_life'),
        )

    # -- helpers --

    @staticmethod
    def _log_rejection(operation, exc):
        if isinstance(exc, InsufficientCards):
            current_app.logger.error(f"[{operation}] catalog exhausted: {exc.message}")
        elif isinstance(exc, (ActiveGameExists, InvalidRoundCard)):
            current_app.logger.warning(f"[{operation}] conflict type={exc.error_type} {exc.payload}")
        else:
            current_app.logger.info(f"[{operation}] rejected type={exc.error_type}")

    @contextmanager
    def _locked_game(self, operation, game_id, owner_id=None):
        with self._game_locks.hold(game_id):
            try:
                game = self.store.lock_game(game_id)
                if game is None:
                    raise GameNotFound()
                if owner_id is not None and game.owner_id != owner_id:
                    raise NotOwner()
                yield game
                self.store.commit()
            except GameError as exc:
                self.store.rollback()
                self._log_rejection(operation, exc)
                raise
            except Exception:
                self.store.rollback()
                raise

    def _round_deal(self, game_card, resumed):
        return RoundDeal(
            game_card=game_card,
            card=game_card.card,
            round_number=game_card.round_number,
            time_limit=self.clock.time_limit,
            remaining=self.clock.remaining(game_card.card_dealt_at),
            resumed=resumed,
        )

    def _live_card_or_fail(self, game, game_card_id):
        game_card = self.store.get_game_card(game_card_id)
        if game_card is None or game_card.game_id != game.id:
            raise InvalidRoundCard(InvalidRoundCard.NOT_IN_GAME, 'Game card does not belong to this game')
        if game_card.round_number != game.current_round:
            raise InvalidRoundCard(InvalidRoundCard.WRONG_ROUND, 'This card is not for the current round')
        if not game_card.is_live:
            raise InvalidRoundCard(InvalidRoundCard.ALREADY_PLAYED, 'This card has already been played')
        return game_card

    def _hand_cards(self, game_id):
        return self.supplier.cards_by_ids(gc.card_id for gc in self.store.hand(game_id))

    # -- operations --

    def create_game(self, owner_id, theme=None) -> NewGame:
        theme = theme or self.default_theme
        with self._owner_locks.hold(owner_id):
            try:
                active = self.store.active_game_for(owner_id)
                if active is not None:
                    raise ActiveGameExists(active.id)
                cards = self.supplier.deal(theme, self.initial_hand_size)
                game = self.store.insert_game(owner_id, theme, self.clock.now(), cards, self.initial_hand_size)
                self.store.commit()
            except GameError as exc:
                self.store.rollback()
                self._log_rejection('create', exc)
                raise
            except Exception:
                self.store.rollback()
                raise
        current_app.logger.info(f"[create] game={game.id} owner={owner_id} theme={theme}")
        initial = sorted(cards, key=lambda c: (c.bad_luck_index, c.id))
        return NewGame(game=game, initial_cards=initial)

    def get_active_game(self, owner_id) -> ActiveGame:
        game = self.store.active_game_for(owner_id)
        if game is None:
            raise GameNotFound('No active game found')
        live = self.store.live_card(game.id, game.current_round)
        return ActiveGame(
            game=game,
            hand=self._hand_cards(game.id),
            round_card=self._round_deal(live, resumed=True) if live else None,
        )

    def start_round(self, game_id, owner_id=None) -> RoundDeal:
        with self._locked_game('round', game_id, owner_id) as game:
            if not game.is_playing:
                raise GameNotActive()
            live = self.store.live_card(game.id, game.current_round)
            if live is not None:
                # Reload or retry: hand back the same card, clock untouched
                deal = self._round_deal(live, resumed=True)
            else:
                used = self.store.used_card_ids(game.id)
                card = self.supplier.deal(game.theme, 1, used)[0]
                live = self.store.add_round_card(game, card, self.clock.now())
                deal = self._round_deal(live, resumed=False)
                current_app.logger.info(
                    f"[round] game={game.id} round={game.current_round} game_card={live.id} card={card.id}"
                )
        return deal

    def submit_guess(self, game_id, game_card_id, position, client_elapsed_seconds=None,
                     owner_id=None) -> GuessOutcome:
        """Resolve the live card of the current round.

        ``position`` of ``None`` is an explicit time's-up submission. The round
        is a timeout when the server clock says the limit passed, or when the
        client itself declares it did.
        """
        with self._locked_game('guess', game_id, owner_id) as game:
            if not game.is_playing:
                raise GameNotActive()
            game_card = self._live_card_or_fail(game, game_card_id)
            card = game_card.card

            elapsed = self.clock.elapsed_since(game_card.card_dealt_at)
            timed_out = position is None or self.clock.is_timeout(elapsed, client_elapsed_seconds)

            hand = [c.bad_luck_index for c in self._hand_cards(game.id)]
            expected = correct_position(card.bad_luck_index, hand)
            correct = not timed_out and position == expected

            now = self.clock.now()
            self.store.record_outcome(game_card, correct, None if timed_out else position, now)
            if correct:
                self.store.increment_cards_collected(game)
            else:
                self.store.increment_wrong_guesses(game)

            if game.cards_collected >= self.cards_to_win:
                self.store.complete(game, GameStatus.WON, now)
            elif game.wrong_guesses >= self.max_wrong_guesses:
                self.store.complete(game, GameStatus.LOST, now)
            else:
                self.store.advance_round(game)

            current_app.logger.info(
                f"[{'timeout' if timed_out else 'guess'}] game={game.id} game_card={game_card.id} "
                f"position={position} expected={expected} correct={correct} elapsed={elapsed:.1f}s "
                f"client_elapsed={client_elapsed_seconds} status={game.status}"
            )
            if not game.is_playing:
                current_app.logger.info(
                    f"[finish] game={game.id} status={game.status} cards={game.cards_collected} "
                    f"wrong={game.wrong_guesses}"
                )
            outcome = GuessOutcome(
                correct=correct,
                correct_position=expected,
                timed_out=timed_out,
                elapsed_seconds=elapsed,
                revealed_card=card,
                game=game,
                time_limit=self.clock.time_limit,
                status=game.status,
            )
        return outcome

    def abandon(self, game_id, owner_id=None) -> Game:
        """Give up a playing game. Abandoning a finished game changes nothing.

        A round card dealt but not yet guessed stays unresolved, so history
        tells an abandoned round apart from a miss.
        """
        with self._locked_game('abandon', game_id, owner_id) as game:
            if game.is_playing:
                self.store.complete(game, GameStatus.LOST, self.clock.now())
                current_app.logger.info(f"[abandon] game={game.id} round={game.current_round}")
        return game

    def get_history(self, owner_id) -> List[HistoryEntry]:
        entries = []
        for game in self.store.history_for(owner_id):
            game_cards = self.store.game_cards(game.id)
            by_id = {c.id: c for c in self.supplier.cards_by_ids(gc.card_id for gc in game_cards)}
            entries.append(HistoryEntry(
                game=game,
                cards=[(gc, by_id[gc.card_id]) for gc in game_cards],
            ))
        return entries

    def cleanup_stale_games(self, days) -> int:
        cutoff: datetime = self.clock.now() - timedelta(days=days)
        try:
            removed = self.store.delete_stale(cutoff)
            self.store.commit()
        except Exception:
            self.store.rollback()
            raise
        current_app.logger.info(f"[cleanup] removed={removed} older_than={days}d")
        return removed
