# apps/goals/application/optimistic.py
import copy
from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional

from apps.goals.domain.entities import GoalInstance


@dataclass(frozen=True)
class GoalSnapshot:
    """Zamrożony stan celów sesji, do którego można wrócić."""
    weeks: Dict[str, List[GoalInstance]] = field(default_factory=dict)

    def restore(self) -> Dict[str, List[GoalInstance]]:
        # Kopia, żeby jeden snapshot dało się przywrócić wiele razy
        return copy.deepcopy(self.weeks)


class OptimisticGoalStore:
    """
    Stan celów po stronie klienta: apply(tentative) -> commit() albo rollback(snapshot).
    """

    def __init__(self):
        self._weeks: Dict[str, List[GoalInstance]] = {}
        self._pending: Optional[GoalSnapshot] = None

    def snapshot(self) -> GoalSnapshot:
        return GoalSnapshot(weeks=copy.deepcopy(self._weeks))

    def apply(self, tentative: Mapping[str, List[GoalInstance]]) -> GoalSnapshot:
        """Podmienia podane tygodnie od razu. Zwraca snapshot sprzed zmiany."""
        snapshot = self.snapshot()
        for week_id, goals in tentative.items():
            self._weeks[week_id] = list(goals)
        self._pending = snapshot
        return snapshot

    def commit(self) -> None:
        self._pending = None

    def rollback(self, snapshot: Optional[GoalSnapshot] = None) -> None:
        snapshot = snapshot or self._pending
        if snapshot is None:
            return
        self._weeks = snapshot.restore()
        self._pending = None

    @property
    def has_pending(self) -> bool:
        return self._pending is not None

    def replace_week(self, week_id: str, goals: List[GoalInstance]) -> None:
        self._weeks[week_id] = list(goals)

    def goals_for_week(self, week_id: str) -> List[GoalInstance]:
        return list(self._weeks.get(week_id, []))

    def goals_by_week(self) -> Dict[str, List[GoalInstance]]:
        return {week_id: list(goals) for week_id, goals in self._weeks.items()}

    def all_goals(self) -> List[GoalInstance]:
        return [goal for goals in self._weeks.values() for goal in goals]
