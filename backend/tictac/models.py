from tictac import db, bcrypt
from flask_login import UserMixin
from datetime import datetime, timezone
import json
import uuid


GAME_STATUSES = ('waiting', 'playing', 'completed', 'draw', 'paused', 'cancelled')
EMPTY_BOARD = [None] * 9


def _new_id():
    return str(uuid.uuid4())


def _utcnow():
    return datetime.now(timezone.utc)


def _iso(value):
    return value.isoformat() if value else None


class User(UserMixin, db.Model):
    __tablename__ = 'users'
    id = db.Column(db.String(36), primary_key=True, default=_new_id)
    username = db.Column(db.String(64), unique=True, nullable=False, index=True)
    password_hash = db.Column(db.String(256), nullable=False)
    is_admin = db.Column(db.Boolean, default=False, nullable=False)
    created_at = db.Column(db.DateTime(timezone=True), default=_utcnow)

    def set_password(self, password):
        self.password_hash = bcrypt.generate_password_hash(password).decode('utf-8')

    def check_password(self, password):
        return bcrypt.check_password_hash(self.password_hash, password)

    def to_dict(self):
        return {
            'id': self.id,
            'username': self.username,
            'is_admin': self.is_admin,
        }


class Game(db.Model):
    __tablename__ = 'games'
    id = db.Column(db.String(36), primary_key=True, default=_new_id)
    player_x_id = db.Column(db.String(36), db.ForeignKey('users.id'), nullable=True)
    player_o_id = db.Column(db.String(36), db.ForeignKey('users.id'), nullable=True)
    status = db.Column(db.String(16), default='waiting', nullable=False, index=True)  # see GAME_STATUSES
    board = db.Column(db.Text, nullable=True)  # JSON-encoded list of 9 cells ('X', 'O' or null)
    current_player = db.Column(db.String(1), default='X')
    winner = db.Column(db.String(1), nullable=True)
    bet_amount = db.Column(db.Float, default=0.0, nullable=False)
    created_at = db.Column(db.DateTime(timezone=True), default=_utcnow, index=True)
    updated_at = db.Column(db.DateTime(timezone=True), default=_utcnow, onupdate=_utcnow)

    player_x = db.relationship('User', foreign_keys=[player_x_id])
    player_o = db.relationship('User', foreign_keys=[player_o_id])

    def __init__(self, **kwargs):
        super(Game, self).__init__(**kwargs)
        if self.board is None:
            self.board = json.dumps(EMPTY_BOARD)

    @property
    def players(self):
        return [p for p in (self.player_x, self.player_o) if p is not None]

    def symbol_of(self, user_id):
        if user_id and user_id == self.player_x_id:
            return 'X'
        if user_id and user_id == self.player_o_id:
            return 'O'
        return None

    def board_cells(self):
        """The board as a fresh list of 9 cells."""
        try:
            board = json.loads(self.board) if self.board else list(EMPTY_BOARD)
        except ValueError:
            board = list(EMPTY_BOARD)
        if not isinstance(board, list) or len(board) != 9:
            board = list(EMPTY_BOARD)
        return board

    def to_dict(self):
        board = self.board_cells()
        return {
            'id': self.id,
            'status': self.status,
            'betAmount': self.bet_amount,
            'pot': (self.bet_amount or 0) * len(self.players),
            'board': board,
            'currentPlayer': self.current_player,
            'players': {
                'X': self.player_x.to_dict() if self.player_x else None,
                'O': self.player_o.to_dict() if self.player_o else None,
            },
            'winner': self.winner,
            'createdAt': _iso(self.created_at),
            'updatedAt': _iso(self.updated_at),
        }
