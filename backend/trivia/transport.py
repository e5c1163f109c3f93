"""Outbound fan-out over Flask-SocketIO.

- Tracks the sids connected to the game namespace
- Snapshots the sid set before each broadcast so disconnects mid-loop are safe
- Sends one packet per recipient; a failure is logged and skipped, never
  aborting delivery to the remaining clients
"""
import logging
from threading import RLock
from typing import Any, List, Optional, Set


class SocketIOTransport:

    def __init__(self, socketio, namespace: str = '/ws', logger: Optional[logging.Logger] = None):
        self.socketio = socketio
        self.namespace = namespace
        self.logger = logger or logging.getLogger(__name__)
        self._lock = RLock()
        self._sids: Set[str] = set()

    def attach(self, sid: str) -> None:
        with self._lock:
            self._sids.add(sid)

    def detach(self, sid: str) -> None:
        with self._lock:
            self._sids.discard(sid)

    def connected(self) -> List[str]:
        with self._lock:
            return list(self._sids)

    def send(self, sid: str, event: str, payload: Any) -> bool:
        try:
            self.socketio.emit(event, payload, to=sid, namespace=self.namespace)
            return True
        except Exception:
            self.logger.exception(f"[send-failed] event={event} sid={sid}")
            return False

    def broadcast(self, event: str, payload: Any, skip_sid: Optional[str] = None) -> int:
        success = 0
        for sid in self.connected():
            if sid == skip_sid:
                continue
            if self.send(sid, event, payload):
                success += 1
        return success

    def close(self, sid: str) -> bool:
        try:
            self.socketio.server.disconnect(sid, namespace=self.namespace)
            return True
        except Exception:
            self.logger.exception(f"[close-failed] sid={sid}")
            return False
