# apps/goals/domain/exceptions.py
from typing import List


class GoalEngineError(Exception):
    """Bazowy wyjątek silnika celów."""


class InvalidWeekId(GoalEngineError, ValueError):
    pass


class InvalidGoalInput(GoalEngineError, ValueError):
    pass


class GoalNotFound(GoalEngineError, LookupError):
    def __init__(self, goal_id: str, week_id: str):
        super().__init__(f"Goal {goal_id} not found in week {week_id}")
        self.goal_id = goal_id
        self.week_id = week_id


class PersistenceError(GoalEngineError):
    """Rzucany przez adaptery, gdy zapis lub odczyt dokumentu się nie powiódł."""


class GoalLoadError(GoalEngineError):
    pass


class GoalSaveError(GoalEngineError):
    pass


class PartialCascadeError(GoalSaveError):
    """Kaskada przerwana w połowie: część tygodni jest już zapisana."""

    def __init__(self, goal_id: str, committed: List, pending: List):
        self.goal_id = goal_id
        self.committed = list(committed)
        self.pending = list(pending)
        committed_ids = ", ".join(key.week_id for key in self.committed)
        pending_ids = ", ".join(key.week_id for key in self.pending)
        super().__init__(
            f"Cascade for goal {goal_id} stopped after [{committed_ids}]; "
            f"not written: [{pending_ids}]"
        )
