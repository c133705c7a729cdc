from flask import Blueprint, jsonify, request, current_app
from flask_login import login_required, current_user
from stuffhappens import socketio, get_engine
from stuffhappens.errors import GameError, Unauthenticated
from stuffhappens.socketio_events import user_room


games = Blueprint('games', __name__)


def current_user_id() -> int:
    if not current_user.is_authenticated:
        raise Unauthenticated()
    return int(current_user.id)


def _notify(game) -> None:
    # Other tabs/devices of the owner refetch instead of acting on stale state
    socketio.emit(
        'state_update',
        {'gameId': game.id, 'status': game.status, 'currentRound': game.current_round},
        to=user_room(game.owner_id),
        namespace='/ws',
    )


def _int_field(data, name, minimum, errors, required=True):
    value = data.get(name)
    if value is None:
        if required:
            errors.append(f'{name} is required')
        return None
    if isinstance(value, bool) or not isinstance(value, int) or value < minimum:
        errors.append(f'{name} must be an integer >= {minimum}')
        return None
    return value


def _elapsed_field(data, errors):
    value = data.get('timeElapsed')
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, (int, float)) or value < 0:
        errors.append('timeElapsed must be a non-negative number')
        return None
    return float(value)


@games.errorhandler(GameError)
def handle_game_error(exc):
    return jsonify(exc.to_dict()), exc.status_code


@games.route('', methods=['POST'])
@login_required
def create_game():
    """
    Creates a new game for the current user with an initial hand of three cards.
    """
    data = request.get_json(silent=True) or {}
    theme = data.get('theme') or current_app.config.get('DEFAULT_THEME')
    if theme not in current_app.config.get('THEMES', ()):
        return jsonify({'errors': ['Invalid theme']}), 422

    created = get_engine().create_game(current_user_id(), theme)
    _notify(created.game)
    return jsonify({
        'game': created.game.to_dict(),
        'initialCards': [c.to_dict() for c in created.initial_cards],
        'message': 'Full game created successfully',
    }), 201


@games.route('/current', methods=['GET'])
@login_required
def get_current_game():
    active = get_engine().get_active_game(current_user_id())
    payload = {
        'game': active.game.to_dict(),
        'handCards': [c.to_dict() for c in active.hand],
        'roundCard': None,
    }
    if active.round_card:
        payload['roundCard'] = active.round_card.to_dict()['roundCard']
        payload['timeRemaining'] = round(active.round_card.remaining, 3)
    return jsonify(payload)


@games.route('/history', methods=['GET'])
@login_required
def get_history():
    entries = get_engine().get_history(current_user_id())
    return jsonify([entry.to_dict() for entry in entries])


@games.route('/<int:game_id>', methods=['DELETE'])
@login_required
def abandon_game(game_id):
    game = get_engine().abandon(game_id, owner_id=current_user_id())
    _notify(game)
    return '', 204


@games.route('/<int:game_id>/next-round', methods=['POST'])
@login_required
def next_round(game_id):
    deal = get_engine().start_round(game_id, owner_id=current_user_id())
    if not deal.resumed:
        _notify(deal.game_card.game)
    return jsonify(deal.to_dict())


@games.route('/<int:game_id>/guess', methods=['POST'])
@login_required
def submit_guess(game_id):
    data = request.get_json(silent=True) or {}
    errors = []
    game_card_id = _int_field(data, 'gameCardId', 1, errors)
    position = _int_field(data, 'position', 0, errors)
    elapsed = _elapsed_field(data, errors)
    if errors:
        return jsonify({'errors': errors}), 422

    outcome = get_engine().submit_guess(
        game_id, game_card_id, position,
        client_elapsed_seconds=elapsed,
        owner_id=current_user_id(),
    )
    _notify(outcome.game)
    return jsonify(outcome.to_dict())


@games.route('/<int:game_id>/timeout', methods=['POST'])
@login_required
def report_timeout(game_id):
    """
    Explicit "time's up" from the client: resolves the live card with no position.
    """
    data = request.get_json(silent=True) or {}
    errors = []
    game_card_id = _int_field(data, 'gameCardId', 1, errors)
    if errors:
        return jsonify({'errors': errors}), 422

    outcome = get_engine().submit_guess(game_id, game_card_id, None, owner_id=current_user_id())
    _notify(outcome.game)
    payload = outcome.to_dict()
    payload['isTimeout'] = True
    return jsonify(payload)
