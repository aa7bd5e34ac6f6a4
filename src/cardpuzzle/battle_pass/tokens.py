"""Live star tokens shown during a level.

Tokens exist only in memory. Leaving the level screen cancels the session
and any token not yet acknowledged is forgotten.
"""
from __future__ import annotations

import itertools
import logging
from dataclasses import dataclass
from typing import Dict, List, Optional

from .engine import BattlePassEngine, StarResult

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StarToken:
    id: int
    spawned_at: int
    expires_at: int

    def is_live(self, now_ms: int) -> bool:
        return now_ms < self.expires_at


class TokenSession:
    def __init__(self, engine: BattlePassEngine, started_at: Optional[int] = None) -> None:
        self.engine = engine
        self.clock = engine.store.clock
        self.interval_ms = engine.config.token_interval_ms
        self.lifetime_ms = engine.config.token_lifetime_ms
        self._ids = itertools.count(1)
        self._tokens: Dict[int, StarToken] = {}
        self._cancelled = False
        start = self.clock.now_ms() if started_at is None else started_at
        self._next_spawn_at = start + self.interval_ms

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def can_spawn(self) -> bool:
        return not self._cancelled and self.engine.is_unlocked() and self.engine.is_event_active()

    def live_tokens(self, now_ms: Optional[int] = None) -> List[StarToken]:
        now = self.clock.now_ms() if now_ms is None else now_ms
        return [t for t in self._tokens.values() if t.is_live(now)]

    def tick(self, now_ms: Optional[int] = None) -> List[StarToken]:
        """Expire old tokens and spawn any that fell due; returns the new ones."""
        now = self.clock.now_ms() if now_ms is None else now_ms
        for token_id in [tid for tid, t in self._tokens.items() if not t.is_live(now)]:
            del self._tokens[token_id]
        spawned = []
        # Slots that would already have expired are skipped outright.
        stale_before = now - self.lifetime_ms
        if self._next_spawn_at <= stale_before:
            skipped = (stale_before - self._next_spawn_at) // self.interval_ms + 1
            self._next_spawn_at += skipped * self.interval_ms
        while not self._cancelled and self._next_spawn_at <= now:
            at = self._next_spawn_at
            self._next_spawn_at += self.interval_ms
            if not self.can_spawn():
                continue
            token = StarToken(id=next(self._ids), spawned_at=at, expires_at=at + self.lifetime_ms)
            if token.is_live(now):
                self._tokens[token.id] = token
                spawned.append(token)
        if spawned:
            logger.debug("Spawned %d star token(s)", len(spawned))
        return spawned

    def acknowledge(self, token_id: int, now_ms: Optional[int] = None) -> Optional[StarResult]:
        """Consume a live token and credit its star."""
        now = self.clock.now_ms() if now_ms is None else now_ms
        token = self._tokens.pop(token_id, None)
        if token is None or not token.is_live(now) or self._cancelled:
            logger.debug("Token %s not live; ignoring", token_id)
            return None
        return self.engine.acknowledge_token()

    def cancel(self) -> int:
        """Stop spawning and discard live tokens; returns how many were dropped."""
        dropped = len(self._tokens)
        self._tokens.clear()
        self._cancelled = True
        if dropped:
            logger.debug("Token session cancelled; %d token(s) discarded", dropped)
        return dropped
