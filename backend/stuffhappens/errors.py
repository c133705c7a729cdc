"""Client-visible failures of the game engine.

None of these are transient: a caller that receives one must refetch game
state before issuing the request again.
"""


class GameError(Exception):
    status_code = 400
    error_type = 'GAME_ERROR'
    message = 'Game error'

    def __init__(self, message=None, **payload):
        super().__init__(message or self.message)
        self.message = message or self.message
        self.payload = payload

    def to_dict(self):
        data = {'error': self.message, 'type': self.error_type}
        data.update(self.payload)
        return data


class Unauthenticated(GameError):
    status_code = 401
    error_type = 'UNAUTHENTICATED'
    message = 'Not authenticated'


class NotOwner(GameError):
    status_code = 403
    error_type = 'NOT_OWNER'
    message = 'You can only play your own games'


class GameNotFound(GameError):
    status_code = 404
    error_type = 'GAME_NOT_FOUND'
    message = 'Game not found'


class GameNotActive(GameError):
    status_code = 400
    error_type = 'GAME_NOT_ACTIVE'
    message = 'Game is not active'


class ActiveGameExists(GameError):
    status_code = 409
    error_type = 'ACTIVE_GAME_EXISTS'
    message = 'You already have an active game. Complete or abandon it before starting a new one.'

    def __init__(self, active_game_id, message=None):
        super().__init__(message, activeGameId=active_game_id)
        self.active_game_id = active_game_id


class InvalidRoundCard(GameError):
    status_code = 409
    error_type = 'INVALID_ROUND_CARD'
    message = 'This card is not the live card for the current round'

    # reason values
    NOT_IN_GAME = 'NOT_IN_GAME'
    WRONG_ROUND = 'WRONG_ROUND'
    ALREADY_PLAYED = 'ALREADY_PLAYED'

    def __init__(self, reason, message=None):
        super().__init__(message, reason=reason)
        self.reason = reason


class InsufficientCards(GameError):
    status_code = 500
    error_type = 'INSUFFICIENT_CARDS'
    message = 'Not enough cards available'

    def __init__(self, theme, requested, available):
        super().__init__(
            f'Not enough cards available for theme {theme!r}. Requested {requested}, found {available}'
        )
        self.theme = theme
        self.requested = requested
        self.available = available
