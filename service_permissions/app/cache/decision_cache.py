"""
Decision cache scoped to one evaluator.
"""

import threading
from typing import Dict, Hashable, Optional, Tuple

from ..rules.models import Decision


class DecisionCache:
    """Append-only memo of decisions.

    Entries are never invalidated individually; the cache lives exactly
    as long as the evaluator that owns it. Recomputing a key always yields
    the same decision, so a race on first write is harmless.
    """

    def __init__(self, enabled: bool = True):
        self.enabled = enabled
        self._entries: Dict[Tuple[Hashable, ...], Decision] = {}
        self._lock = threading.Lock()
        self.hits = 0
        self.misses = 0

    def get(self, key: Tuple[Hashable, ...]) -> Optional[Decision]:
        if not self.enabled:
            return None
        with self._lock:
            decision = self._entries.get(key)
            if decision is None:
                self.misses += 1
            else:
                self.hits += 1
            return decision

    def put(self, key: Tuple[Hashable, ...], decision: Decision) -> None:
        if not self.enabled:
            return
        with self._lock:
            self._entries[key] = decision

    def stats(self) -> Dict[str, int]:
        with self._lock:
            return {
                "hits": self.hits,
                "misses": self.misses,
                "size": len(self._entries),
            }

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, key) -> bool:
        with self._lock:
            return key in self._entries
