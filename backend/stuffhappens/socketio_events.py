from flask_socketio import join_room, emit
from flask_login import current_user
from stuffhappens import socketio


def user_room(user_id) -> str:
    return f"user:{user_id}"


def handle_connect(auth=None):
    # Anonymous sockets have no games to follow
    if not current_user.is_authenticated:
        return False
    room = user_room(current_user.id)
    join_room(room)
    emit('connected', {'room': room})


def handle_ping(data=None):
    emit('pong', data or {})


def register_socketio_handlers() -> None:
    """Register Socket.IO event handlers on namespace '/ws'.

    Game state is pushed from the HTTP routes as ``state_update`` events to
    the owner's room after every committed transition.
    """
    socketio.on_event('connect', handle_connect, namespace='/ws')
    socketio.on_event('ping', handle_ping, namespace='/ws')
