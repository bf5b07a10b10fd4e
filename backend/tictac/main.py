from flask import Blueprint, request, jsonify
from flask_login import login_user, logout_user, current_user
from sqlalchemy import or_
from sqlalchemy.orm import aliased
from tictac import db, get_presence_store
from tictac.auth import admin_required
from tictac.errors import ForbiddenError, UnauthorizedError, ValidationError, json_errors
from tictac.models import User, Game, GAME_STATUSES
from tictac.services.presence import evaluate_presence

main = Blueprint('main', __name__)

ADMIN_GAMES_LIMIT = 50


@main.route('/health')
@json_errors('health')
def health():
    return jsonify({'status': 'ok', 'tracked_games': len(get_presence_store())})


@main.route('/admin/login', methods=['POST'])
@json_errors('admin')
def admin_login():
    data = request.get_json(silent=True) or {}
    username = data.get('username')
    password = data.get('password')
    if not all([username, password]):
        raise ValidationError(message='Username and password are required')
    user = User.query.filter_by(username=username).first()
    if not user or not user.check_password(password):
        raise UnauthorizedError('Invalid username or password')
    if not user.is_admin:
        raise ForbiddenError('Not an administrator')
    login_user(user)
    return jsonify({'success': True, 'user': user.to_dict()})


@main.route('/admin/logout', methods=['POST'])
@admin_required
def admin_logout():
    logout_user()
    return jsonify({'success': True})


@main.route('/admin/session')
@admin_required
def admin_session():
    return jsonify({
        'adminId': current_user.id,
        'username': current_user.username,
        'isAdmin': current_user.is_admin,
    })


@main.route('/admin/games')
@admin_required
@json_errors('admin')
def admin_games():
    status = request.args.get('status')
    search = (request.args.get('search') or '').strip().lower()

    query = Game.query.order_by(Game.created_at.desc())
    if status and status != 'all':
        if status not in GAME_STATUSES:
            raise ValidationError(message=f'Unknown status: {status}')
        query = query.filter(Game.status == status)
    if search:
        px, po = aliased(User), aliased(User)
        pattern = f'%{search}%'
        query = (
            query.outerjoin(px, Game.player_x_id == px.id)
            .outerjoin(po, Game.player_o_id == po.id)
            .filter(or_(
                db.func.lower(Game.id).like(pattern),
                db.func.lower(px.username).like(pattern),
                db.func.lower(po.username).like(pattern),
            ))
        )
    games = query.limit(ADMIN_GAMES_LIMIT).all()
    return jsonify({'games': [g.to_dict() for g in games]})


@main.route('/admin/presence')
@admin_required
@json_errors('admin')
def admin_presence():
    store = get_presence_store()
    tracked = []
    for game_id in store.match_ids():
        view = evaluate_presence(store, game_id).to_dict()
        view['game_id'] = game_id
        tracked.append(view)
    return jsonify({'games': tracked})
