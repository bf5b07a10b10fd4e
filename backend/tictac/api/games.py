import json
from flask import Blueprint, jsonify, request, current_app
from tictac import db, socketio, get_presence_store
from tictac.errors import NotFoundError, ValidationError, ForbiddenError, json_errors
from tictac.models import Game, User, GAME_STATUSES
from tictac.services.games import parse_cell_index, place_mark
from tictac.services.presence import record_heartbeat, evaluate_presence, request_resume, forget_game


games = Blueprint('games', __name__)

ORDERABLE_FIELDS = {
    'created_at': Game.created_at,
    'updated_at': Game.updated_at,
    'bet_amount': Game.bet_amount,
}


def _body() -> dict:
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def _int_arg(name: str, default: int, minimum: int = 0) -> int:
    raw = request.args.get(name)
    if raw is None or raw == '':
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ValidationError(message=f'{name} must be an integer')
    if value < minimum:
        raise ValidationError(message=f'{name} must be at least {minimum}')
    return value


def _float_arg(name: str):
    raw = request.args.get(name)
    if raw is None or raw == '':
        return None
    try:
        return float(raw)
    except ValueError:
        raise ValidationError(message=f'{name} must be a number')


def _require_user_id(data: dict) -> str:
    user_id = data.get('userId')
    if not isinstance(user_id, str) or not user_id.strip():
        raise ValidationError(['userId'], 'User ID is required')
    return user_id.strip()


def _get_game_or_404(game_id: str) -> Game:
    game = db.session.get(Game, game_id)
    if not game:
        current_app.logger.info(f"[game] not found: {game_id}")
        raise NotFoundError('Game not found')
    return game


def _broadcast_state(game: Game) -> None:
    socketio.emit('state_update', {'game_id': game.id, 'status': game.status},
                  to=f"game:{game.id}", namespace='/ws')


@games.route('', methods=['GET'])
@json_errors('games')
def list_games():
    limit = _int_arg('limit', 10, minimum=1)
    offset = _int_arg('offset', 0)
    field, _, direction = (request.args.get('order') or 'created_at.desc').partition('.')
    if field not in ORDERABLE_FIELDS or direction not in ('asc', 'desc', ''):
        raise ValidationError(message=f"Cannot order by {request.args.get('order')}")

    query = Game.query
    if request.args.get('player_x'):
        query = query.filter(Game.player_x_id == request.args['player_x'])
    if request.args.get('player_o'):
        query = query.filter(Game.player_o_id == request.args['player_o'])
    if request.args.get('status'):
        query = query.filter(Game.status == request.args['status'])

    count = query.count()
    column = ORDERABLE_FIELDS[field]
    query = query.order_by(column.asc() if direction == 'asc' else column.desc())
    rows = query.offset(offset).limit(limit).all()
    return jsonify({'data': [g.to_dict() for g in rows], 'count': count})


@games.route('', methods=['POST'])
@json_errors('games')
def create_game():
    data = _body()
    user_id = _require_user_id(data)
    bet_amount = data.get('betAmount')
    if isinstance(bet_amount, bool) or not isinstance(bet_amount, (int, float)) or bet_amount < 0:
        raise ValidationError(['betAmount'], 'betAmount must be a non-negative number')

    creator = db.session.get(User, user_id)
    if not creator:
        raise NotFoundError('User not found')

    new_game = Game(player_x_id=creator.id, status='waiting', bet_amount=float(bet_amount))
    db.session.add(new_game)
    db.session.commit()
    current_app.logger.info(f"[create] game={new_game.id} by user={creator.id} bet={new_game.bet_amount}")
    return jsonify(new_game.to_dict()), 201


@games.route('/lobby', methods=['GET'])
@json_errors('lobby')
def lobby():
    status = request.args.get('status') or 'waiting'
    if status not in GAME_STATUSES:
        raise ValidationError(message=f'Unknown status: {status}')
    bet_min = _float_arg('betMin')
    bet_max = _float_arg('betMax')
    limit = _int_arg('limit', 50, minimum=1)

    query = Game.query.filter(Game.status == status)
    if bet_min is not None:
        query = query.filter(Game.bet_amount >= bet_min)
    if bet_max is not None:
        query = query.filter(Game.bet_amount <= bet_max)
    rows = query.order_by(Game.created_at.desc()).limit(limit).all()

    entries = []
    for game in rows:
        payload = game.to_dict()
        entries.append({
            'id': game.id,
            'status': game.status,
            'betAmount': game.bet_amount,
            'pot': payload['pot'],
            'createdAt': payload['createdAt'],
            'creator': payload['players']['X'],
            'hasSecondPlayer': game.player_o_id is not None,
        })
    return jsonify(entries)


@games.route('/<string:game_id>', methods=['GET'])
@json_errors('game')
def get_game(game_id):
    return jsonify(_get_game_or_404(game_id).to_dict())


@games.route('/<string:game_id>/join', methods=['POST'])
@json_errors('join')
def join_game(game_id):
    user_id = _require_user_id(_body())
    game = _get_game_or_404(game_id)
    if game.status != 'waiting':
        raise ValidationError(message='Game is not waiting for players')
    if game.player_x_id == user_id:
        raise ValidationError(message='Cannot join your own game')
    if game.player_o_id:
        raise ValidationError(message='Game already has two players')
    if not db.session.get(User, user_id):
        raise NotFoundError('User not found')

    game.player_o_id = user_id
    game.status = 'playing'
    db.session.add(game)
    db.session.commit()
    current_app.logger.info(f"[join] game={game.id} user={user_id} joined as O")
    _broadcast_state(game)
    return jsonify({'success': True, 'game': game.to_dict(), 'message': 'Successfully joined game'})


@games.route('/<string:game_id>/move', methods=['POST'])
@json_errors('move')
def make_move(game_id):
    data = _body()
    user_id = _require_user_id(data)
    if 'index' not in data:
        raise ValidationError(['index'])
    index = parse_cell_index(data.get('index'))

    game = _get_game_or_404(game_id)
    if game.status != 'playing':
        raise ValidationError(message='Game is not active')
    if game.winner:
        raise ValidationError(message='Game already finished')
    symbol = game.symbol_of(user_id)
    if not symbol:
        raise ForbiddenError('You are not a player in this game')
    if game.current_player != symbol:
        raise ValidationError(message='Not your turn')

    board = game.board_cells()
    status, winner = place_mark(board, index, symbol)
    game.board = json.dumps(board)
    game.status = status
    game.winner = winner
    game.current_player = 'O' if symbol == 'X' else 'X'
    db.session.add(game)
    db.session.commit()
    current_app.logger.info(f"[move] game={game.id} user={user_id} {symbol}@{index} status={status}")

    if status != 'playing':
        # A finished match no longer needs presence tracking
        forget_game(get_presence_store(), game.id)
    _broadcast_state(game)
    return jsonify(game.to_dict())


@games.route('/<string:game_id>/activity', methods=['POST'])
@json_errors('activity')
def post_activity(game_id):
    data = _body()
    ack = record_heartbeat(get_presence_store(), game_id, data.get('userId'), data.get('playerSymbol'))
    return jsonify(ack)


@games.route('/<string:game_id>/activity', methods=['GET'])
@json_errors('activity')
def get_activity(game_id):
    view = evaluate_presence(get_presence_store(), game_id)
    return jsonify(view.to_dict())


@games.route('/<string:game_id>/resume', methods=['POST'])
@json_errors('resume')
def resume_game(game_id):
    data = _body()
    ack = request_resume(get_presence_store(), game_id, data.get('userId'))
    return jsonify(ack)


@games.route('/<string:game_id>/cancel', methods=['POST'])
@json_errors('cancel')
def cancel_game(game_id):
    user_id = _require_user_id(_body())
    game = _get_game_or_404(game_id)
    if game.status != 'waiting':
        raise ValidationError(message='Game is not waiting, cannot cancel')
    if game.player_x_id != user_id:
        raise ForbiddenError('Only game creator can cancel the game')

    game.status = 'cancelled'
    db.session.add(game)
    db.session.commit()
    forget_game(get_presence_store(), game.id)
    current_app.logger.info(f"[cancel] game={game.id} cancelled by user={user_id}")
    return jsonify({'success': True, 'message': 'Game cancelled successfully'})
