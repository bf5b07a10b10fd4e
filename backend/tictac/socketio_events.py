from flask_socketio import join_room, leave_room, emit
from tictac import socketio


def handle_connect():
    emit('connected', {'message': 'Connected to /ws'})


def _room(data):
    game_id = (data or {}).get('game_id')
    if not game_id:
        emit('error', {'message': 'game_id is required'})
        return None
    return f"game:{game_id}"


def handle_join_game(data):
    room = _room(data)
    if not room:
        return
    join_room(room)
    emit('joined', {'room': room})


def handle_leave_game(data):
    room = _room(data)
    if not room:
        return
    leave_room(room)
    emit('left', {'room': room})


def handle_ping(data):
    emit('pong', data or {})


def register_socketio_handlers(testing: bool = False) -> None:
    """Register Socket.IO event handlers.

    Always register on namespace '/ws'. When testing is True, also mirror
    handlers on the default namespace '/' to accommodate the test harness.
    Game rooms receive best-effort notifications such as 'resume_requested'.
    """
    namespaces = ['/ws', '/'] if testing else ['/ws']
    for ns in namespaces:
        socketio.on_event('connect', handle_connect, namespace=ns)
        socketio.on_event('join_game', handle_join_game, namespace=ns)
        socketio.on_event('leave_game', handle_leave_game, namespace=ns)
        socketio.on_event('ping', handle_ping, namespace=ns)
