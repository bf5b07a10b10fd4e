import threading
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Callable, Dict, List, Optional


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class PresenceRecord:
    """Last heartbeat of one player in one match."""
    match_id: str
    player_id: str
    symbol: str
    last_seen_at: datetime

    def elapsed_minutes(self, now: datetime) -> float:
        return (now - self.last_seen_at).total_seconds() / 60.0

    def to_dict(self):
        return {
            'user_id': self.player_id,
            'player_symbol': self.symbol,
            'last_activity': self.last_seen_at.isoformat(),
        }


@dataclass
class MatchPresenceView:
    """Computed summary of a match's presence; never stored."""
    match_id: str
    activities: List[PresenceRecord] = field(default_factory=list)
    inactive_players: List[PresenceRecord] = field(default_factory=list)
    should_pause: bool = False

    def to_dict(self):
        return {
            'activities': [r.to_dict() for r in self.activities],
            'inactive_players': [r.to_dict() for r in self.inactive_players],
            'should_pause': self.should_pause,
        }


class PresenceStore:
    """In-memory presence table: match id -> player id -> PresenceRecord.

    Lives as long as the owning process. Records are never persisted; a
    restart drops them. Matches are removed either explicitly through
    ``forget`` or by ``sweep`` once every heartbeat in them is too old.
    """

    def __init__(self, clock: Optional[Callable[[], datetime]] = None):
        self.clock = clock or utcnow
        self._matches: Dict[str, Dict[str, PresenceRecord]] = {}
        self._lock = threading.Lock()
        self.last_sweep_at: Optional[datetime] = None

    def now(self) -> datetime:
        return self.clock()

    def touch(self, match_id: str, player_id: str, symbol: str) -> PresenceRecord:
        now = self.clock()
        with self._lock:
            players = self._matches.setdefault(match_id, {})
            record = players.get(player_id)
            if record is None:
                record = PresenceRecord(match_id, player_id, symbol, now)
                players[player_id] = record
            else:
                record.symbol = symbol
                # last_seen_at only moves forward
                if now > record.last_seen_at:
                    record.last_seen_at = now
            return record

    def records(self, match_id: str) -> List[PresenceRecord]:
        with self._lock:
            players = self._matches.get(match_id)
            if not players:
                return []
            return [
                PresenceRecord(r.match_id, r.player_id, r.symbol, r.last_seen_at)
                for r in players.values()
            ]

    def forget(self, match_id: str) -> int:
        with self._lock:
            players = self._matches.pop(match_id, None)
        return len(players) if players else 0

    def sweep(self, max_age: timedelta) -> List[str]:
        now = self.clock()
        cutoff = now - max_age
        with self._lock:
            expired = [
                match_id for match_id, players in self._matches.items()
                if not players or max(r.last_seen_at for r in players.values()) < cutoff
            ]
            for match_id in expired:
                del self._matches[match_id]
            self.last_sweep_at = now
        return expired

    def match_ids(self) -> List[str]:
        with self._lock:
            return list(self._matches)

    def __contains__(self, match_id) -> bool:
        return match_id in self._matches

    def __len__(self) -> int:
        return len(self._matches)
