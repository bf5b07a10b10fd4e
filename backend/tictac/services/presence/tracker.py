from datetime import timedelta
from typing import Optional

from flask import current_app

from tictac import socketio
from tictac.errors import ValidationError
from .store import MatchPresenceView, PresenceStore


DEFAULT_STALE_AFTER_SEC = 120


def _blank(value) -> bool:
    # ids and symbols are JSON strings; false, 0, [] and {} are not ids
    return not isinstance(value, str) or not value.strip()


def _require(**fields) -> None:
    missing = [name for name, value in fields.items() if _blank(value)]
    if missing:
        raise ValidationError(missing)


def _maybe_sweep(store: PresenceStore) -> None:
    cfg = current_app.config
    ttl = int(cfg.get('PRESENCE_TTL_SEC', 0) or 0)
    if ttl <= 0:
        return
    interval = timedelta(seconds=int(cfg.get('PRESENCE_SWEEP_INTERVAL_SEC', 300)))
    if store.last_sweep_at is not None and store.now() - store.last_sweep_at < interval:
        return
    dropped = store.sweep(timedelta(seconds=ttl))
    if dropped:
        current_app.logger.info(f"[sweep] dropped presence for {len(dropped)} game(s): {', '.join(dropped)}")


def record_heartbeat(store: PresenceStore, game_id, user_id, player_symbol) -> dict:
    """Refresh a player's last-seen time for a game.

    Creates the record on the first heartbeat and overwrites the symbol on
    later ones. Safe to retry.
    """
    _require(gameId=game_id, userId=user_id, playerSymbol=player_symbol)
    game_id, user_id = game_id.strip(), user_id.strip()
    record = store.touch(game_id, user_id, player_symbol.strip())
    current_app.logger.info(f"[presence] game={game_id} user={user_id} symbol={record.symbol} heartbeat")
    _maybe_sweep(store)
    return {'success': True, 'game_paused': False}


def evaluate_presence(store: PresenceStore, game_id, stale_after: Optional[float] = None) -> MatchPresenceView:
    """Classify every known player of a game and derive the pause verdict.

    A player is inactive when more than ``stale_after`` seconds (strictly)
    have passed since their last heartbeat. One inactive player is enough to
    pause the game for everybody. Unknown games give an empty, unpaused view.
    """
    if stale_after is None:
        stale_after = float(current_app.config.get('PRESENCE_STALE_AFTER_SEC', DEFAULT_STALE_AFTER_SEC))
    threshold_minutes = stale_after / 60.0

    game_id = str(game_id)
    activities = store.records(game_id)
    now = store.now()
    inactive = [r for r in activities if r.elapsed_minutes(now) > threshold_minutes]
    return MatchPresenceView(
        match_id=game_id,
        activities=activities,
        inactive_players=inactive,
        should_pause=len(inactive) > 0,
    )


def request_resume(store: PresenceStore, game_id, user_id) -> dict:
    """Acknowledge a player's request to resume a paused game.

    Presence records are left alone: the resuming player's next heartbeat is
    what clears their inactive status.
    """
    _require(gameId=game_id, userId=user_id)
    game_id, user_id = game_id.strip(), user_id.strip()
    current_app.logger.info(f"[resume] game={game_id} requested by user={user_id}")
    try:
        socketio.emit('resume_requested', {'game_id': game_id, 'user_id': user_id},
                      to=f"game:{game_id}", namespace='/ws')
    except Exception as exc:
        current_app.logger.warning(f"[resume] game={game_id} notify failed: {exc}")
    return {'success': True, 'message': 'Game resumed successfully'}


def forget_game(store: PresenceStore, game_id) -> int:
    dropped = store.forget(str(game_id))
    if dropped:
        current_app.logger.info(f"[presence] game={game_id} ended, dropped {dropped} record(s)")
    return dropped
