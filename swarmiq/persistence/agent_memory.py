"""
Agent Memory - In-process decision and outcome history

Tracks what each roster agent decided and how its executed actions turned
out. Lives for the process lifetime; nothing is written to disk.
"""

import threading
from collections import defaultdict
from datetime import datetime, timezone
from typing import Dict, List, Optional
from swarmiq.core.models import Decision, Outcome


class AgentMemory:
    """
    Thread-safe per-agent history.

    Stores:
    - Decisions made (with the e-mail context they were made for), plus a
      lifetime decision count per agent
    - Outcomes of executed actions
    """

    MAX_ENTRIES = 1000

    def __init__(self):
        self._decisions: Dict[str, List[Dict]] = defaultdict(list)
        self._outcomes: Dict[str, List[Dict]] = defaultdict(list)
        # Histories are windowed; the decision count is not
        self._decision_counts: Dict[str, int] = defaultdict(int)
        self._lock = threading.Lock()

    def record_decision(self, agent_id: str, decision: Decision, context: Optional[Dict] = None):
        with self._lock:
            self._decision_counts[agent_id] += 1
            entries = self._decisions[agent_id]
            entries.append({
                "timestamp": datetime.now(timezone.utc).isoformat(),
                "action": decision.action,
                "confidence": decision.confidence,
                "context": context or {},
            })
            if len(entries) > self.MAX_ENTRIES:
                del entries[: len(entries) - self.MAX_ENTRIES]

    def record_outcome(self, agent_id: str, action: str, outcome: Outcome, detail: Optional[Dict] = None):
        with self._lock:
            entries = self._outcomes[agent_id]
            entries.append({
                "timestamp": datetime.now(timezone.utc).isoformat(),
                "action": action,
                "success": outcome == Outcome.SUCCESS,
                "detail": detail or {},
            })
            if len(entries) > self.MAX_ENTRIES:
                del entries[: len(entries) - self.MAX_ENTRIES]

    def get_total_decisions(self, agent_id: str) -> int:
        with self._lock:
            return self._decision_counts.get(agent_id, 0)

    def get_success_rate(self, agent_id: str) -> float:
        with self._lock:
            outcomes = self._outcomes.get(agent_id, [])
            if not outcomes:
                return 0.0
            return sum(1 for o in outcomes if o["success"]) / len(outcomes)

    def get_historical_outcomes(self, agent_id: str, limit: int = 100) -> List[Dict]:
        with self._lock:
            return list(self._outcomes.get(agent_id, [])[-limit:])
