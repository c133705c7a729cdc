from stuffhappens import db, bcrypt
from flask_login import UserMixin


class GameStatus:
    PLAYING = 'playing'
    WON = 'won'
    LOST = 'lost'

    TERMINAL = (WON, LOST)


def _iso(value):
    return value.isoformat() if value else None


class User(UserMixin, db.Model):
    __tablename__ = 'user'
    id = db.Column(db.Integer, primary_key=True)
    username = db.Column(db.String(64), unique=True, nullable=False, index=True)
    email = db.Column(db.String(120), unique=True, nullable=True)
    password_hash = db.Column(db.String(128), nullable=False)

    def set_password(self, password):
        self.password_hash = bcrypt.generate_password_hash(password).decode('utf-8')

    def check_password(self, password):
        return bcrypt.check_password_hash(self.password_hash, password)

    def to_dict(self):
        return {
            'id': self.id,
            'username': self.username,
            'email': self.email,
        }


class Card(db.Model):
    """A catalog card. ``bad_luck_index`` is the hidden severity score."""
    __tablename__ = 'card'
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(200), nullable=False)
    image_url = db.Column(db.String(255), nullable=False)
    bad_luck_index = db.Column(db.Integer, nullable=False)
    theme = db.Column(db.String(32), nullable=False, index=True)

    __table_args__ = (
        db.CheckConstraint('bad_luck_index BETWEEN 1 AND 100', name='ck_card_bad_luck_index'),
    )

    def to_dict(self, reveal=True):
        data = {
            'id': self.id,
            'name': self.name,
            'image_url': self.image_url,
            'theme': self.theme,
        }
        # Never expose the index of a card that is still being guessed
        if reveal:
            data['bad_luck_index'] = self.bad_luck_index
        return data


class Game(db.Model):
    __tablename__ = 'game'
    id = db.Column(db.Integer, primary_key=True)
    owner_id = db.Column(db.Integer, db.ForeignKey('user.id'), nullable=True)
    theme = db.Column(db.String(32), nullable=False)
    status = db.Column(db.String(16), nullable=False, default=GameStatus.PLAYING)  # playing, won, lost
    cards_collected = db.Column(db.Integer, nullable=False, default=3)
    wrong_guesses = db.Column(db.Integer, nullable=False, default=0)
    current_round = db.Column(db.Integer, nullable=False, default=1)
    created_at = db.Column(db.DateTime, nullable=False)
    completed_at = db.Column(db.DateTime, nullable=True)
    cards = db.relationship('GameCard', back_populates='game', lazy='dynamic')

    __table_args__ = (
        # At most one playing game per owner, enforced by the database
        db.Index(
            'uq_game_owner_playing', 'owner_id', unique=True,
            sqlite_where=db.text("status = 'playing'"),
            postgresql_where=db.text("status = 'playing'"),
        ),
        db.Index('ix_game_owner_status', 'owner_id', 'status'),
    )

    @property
    def is_playing(self):
        return self.status == GameStatus.PLAYING

    def to_dict(self):
        return {
            'id': self.id,
            'owner_id': self.owner_id,
            'theme': self.theme,
            'status': self.status,
            'cards_collected': self.cards_collected,
            'wrong_guesses': self.wrong_guesses,
            'current_round': self.current_round,
            'created_at': _iso(self.created_at),
            'completed_at': _iso(self.completed_at),
        }


class GameCard(db.Model):
    """A card dealt into a game, either as part of the initial hand or for a round.

    ``guessed_correctly`` is NULL while the card is unresolved: the live round
    card of a playing game, or the round card left open when a game is abandoned.
    """
    __tablename__ = 'game_card'
    id = db.Column(db.Integer, primary_key=True)
    game_id = db.Column(db.Integer, db.ForeignKey('game.id', ondelete='CASCADE'), nullable=False)
    card_id = db.Column(db.Integer, db.ForeignKey('card.id'), nullable=False)
    round_number = db.Column(db.Integer, nullable=False, default=0)
    is_initial = db.Column(db.Boolean, nullable=False, default=False)
    guessed_correctly = db.Column(db.Boolean, nullable=True)
    position_guessed = db.Column(db.Integer, nullable=True)
    card_dealt_at = db.Column(db.DateTime, nullable=False)
    played_at = db.Column(db.DateTime, nullable=True)
    game = db.relationship('Game', back_populates='cards')
    card = db.relationship('Card')

    __table_args__ = (
        db.UniqueConstraint('game_id', 'card_id', name='uq_game_card_card'),
        db.Index('ix_game_card_round', 'game_id', 'round_number'),
    )

    @property
    def is_live(self):
        return self.guessed_correctly is None

    @property
    def won(self):
        return bool(self.is_initial or self.guessed_correctly)
