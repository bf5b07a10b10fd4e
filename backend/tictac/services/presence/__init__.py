"""Player presence and derived game pause.

Heartbeats refresh a per-player last-seen time kept in memory; whether a game
is paused is recomputed from those times on every read and never stored.
"""

from .store import PresenceStore, PresenceRecord, MatchPresenceView
from .tracker import record_heartbeat, evaluate_presence, request_resume, forget_game
