# apps/goals/domain/entities.py
from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Dict, List, NamedTuple, Optional, Union


class Recurrence(str, Enum):
    WEEKLY = 'weekly'
    MONTHLY = 'monthly'


class DurationType(str, Enum):
    UNLIMITED = 'unlimited'
    WEEKS = 'weeks'
    MILESTONE = 'milestone'


class InstanceKind(str, Enum):
    WEEKLY_GOAL = 'weekly_goal'
    DEADLINE = 'deadline'


class GoalKind(str, Enum):
    """Rodzaj celu z punktu widzenia kaskady (unia tagowana)."""
    WEEKLY = 'weekly'
    MONTHLY = 'monthly'
    DEADLINE = 'deadline'
    ONEOFF = 'oneoff'


class WeekKey(NamedTuple):
    """Adres listy celów: dokument roczny + tydzień w nim."""
    year: int
    week_id: str


@dataclass
class GoalTemplate:
    id: str
    title: str
    description: str = ""

    # Powiązanie z marzeniem (opcjonalne, tylko dane zdenormalizowane)
    dream_id: Optional[str] = None
    dream_title: str = ""
    dream_category: str = ""
    milestone_id: Optional[str] = None

    recurrence: Recurrence = Recurrence.WEEKLY
    # Może być też surowym stringiem z bazy (np. literówka) - ewaluator to toleruje
    duration_type: Union[DurationType, str] = DurationType.UNLIMITED
    duration_weeks: Optional[int] = None  # wymagane tylko dla WEEKS

    # Używane tylko przy tworzeniu partii instancji, nie przez ewaluator
    target_weeks: Optional[int] = None
    target_months: Optional[int] = None

    start_date: Optional[date] = None
    active: bool = True
    created_at: Optional[datetime] = None

    @property
    def is_monthly(self) -> bool:
        return self.recurrence == Recurrence.MONTHLY


@dataclass
class GoalInstance:
    id: str
    title: str
    week_id: str
    template_id: Optional[str] = None  # None dla celów jednorazowych
    kind: Optional[InstanceKind] = InstanceKind.WEEKLY_GOAL
    description: str = ""

    dream_id: Optional[str] = None
    dream_title: str = ""
    dream_category: str = ""

    recurrence: Optional[Recurrence] = None  # brak dla jednorazowych
    target_date: Optional[date] = None  # tylko dla DEADLINE

    completed: bool = False
    completed_at: Optional[datetime] = None
    created_at: Optional[datetime] = None

    @property
    def goal_kind(self) -> GoalKind:
        if self.kind == InstanceKind.DEADLINE:
            return GoalKind.DEADLINE
        if self.recurrence == Recurrence.MONTHLY and self.template_id:
            return GoalKind.MONTHLY
        if self.template_id is None:
            return GoalKind.ONEOFF
        return GoalKind.WEEKLY

    def mark(self, completed: bool, completed_at: Optional[datetime]) -> None:
        self.completed = completed
        self.completed_at = completed_at if completed else None


@dataclass
class MilestoneEntity:
    id: str
    title: str = ""
    completed: bool = False


@dataclass
class WeekDocument:
    """Dokument (user, rok ISO) z listami celów per tydzień."""
    user_id: int
    year: int
    weeks: Dict[str, List[GoalInstance]] = field(default_factory=dict)

    def has_week(self, week_id: str) -> bool:
        return week_id in self.weeks

    def goals_for(self, week_id: str) -> List[GoalInstance]:
        return self.weeks.get(week_id, [])

    def all_goals(self) -> List[GoalInstance]:
        return [goal for goals in self.weeks.values() for goal in goals]
