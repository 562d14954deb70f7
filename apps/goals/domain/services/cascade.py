# apps/goals/domain/services/cascade.py
import logging
from dataclasses import dataclass, field, replace
from datetime import datetime, timedelta
from typing import Dict, List, Optional, Set

from dateutil.relativedelta import relativedelta

from apps.goals.domain.entities import GoalInstance, GoalKind, WeekKey
from apps.goals.domain.exceptions import GoalNotFound
from apps.goals.domain.services import week_calendar

logger = logging.getLogger(__name__)


def week_key(week_id: str) -> WeekKey:
    return WeekKey(week_calendar.week_year(week_id), week_id)


def _chronological(keys) -> List[WeekKey]:
    return sorted(keys, key=lambda key: week_calendar.week_sort_key(key.week_id))


def sibling_years(goal: GoalInstance) -> Set[int]:
    """
    Lata ISO (dokumenty), w których może leżeć rodzeństwo celu.
    Kaskada potrzebuje ich wszystkich w pamięci przed przełączeniem.
    """
    year = week_calendar.week_year(goal.week_id)
    kind = goal.goal_kind

    if kind == GoalKind.MONTHLY:
        month_start = week_calendar.week_range(goal.week_id).start.replace(day=1)
        month_end = month_start + relativedelta(months=1) - timedelta(days=1)
        return {
            week_calendar.week_year(week_calendar.iso_week(month_start)),
            week_calendar.week_year(week_calendar.iso_week(month_end)),
        }

    if kind == GoalKind.DEADLINE:
        if goal.target_date:
            last_year = week_calendar.week_year(week_calendar.iso_week(goal.target_date))
        else:
            last_year = year + 1
        return set(range(year, max(year, last_year) + 1))

    return {year}


@dataclass
class CascadeResult:
    goal: GoalInstance  # przełączony cel (już po zmianie)
    instances: List[GoalInstance]  # cały stan po przełączeniu (tentatywny)
    writes: Dict[WeekKey, List[GoalInstance]] = field(default_factory=dict)  # zmienione cele per tydzień
    deletes: Dict[WeekKey, Set[str]] = field(default_factory=dict)  # usunięte id per tydzień

    def touched_weeks(self) -> List[WeekKey]:
        """Kolejność zapisu: najpierw zmiany, potem przycięcia, każde chronologicznie."""
        writes = _chronological(self.writes)
        deletes = [key for key in _chronological(self.deletes) if key not in self.writes]
        return writes + deletes

    def goals_for(self, key: WeekKey) -> List[GoalInstance]:
        return [goal for goal in self.instances if goal.week_id == key.week_id]

    def goals_by_week(self) -> Dict[str, List[GoalInstance]]:
        return {key.week_id: self.goals_for(key) for key in self.touched_weeks()}

    @property
    def is_cascade(self) -> bool:
        return len(self.touched_weeks()) > 1


class CompletionCascadeEngine:
    """
    Przełącza ukończenie jednego celu i propaguje zmianę na rodzeństwo
    (cele miesięczne i terminowe). Czysta transformacja, bez I/O.
    """

    def toggle(self, goal_id: str, week_id: str, all_instances: List[GoalInstance],
               now: Optional[datetime] = None) -> CascadeResult:
        # Kopie, żeby nie zmieniać stanu wywołującego
        instances = [replace(goal) for goal in all_instances]
        target = next((g for g in instances if g.id == goal_id and g.week_id == week_id), None)
        if target is None:
            raise GoalNotFound(goal_id, week_id)

        new_completed = not target.completed
        completed_at = now if new_completed else None

        handler = _DISPATCH.get(target.goal_kind, CompletionCascadeEngine._toggle_single)
        result = handler(self, target, new_completed, completed_at, instances)
        logger.debug(
            "Toggled %s (%s) in %s -> completed=%s, %d weeks touched",
            goal_id, target.goal_kind.value, week_id, new_completed, len(result.touched_weeks()),
        )
        return result

    def _toggle_single(self, target, new_completed, completed_at, instances) -> CascadeResult:
        target.mark(new_completed, completed_at)
        return CascadeResult(goal=target, instances=instances, writes={week_key(target.week_id): [target]})

    def _toggle_monthly(self, target, new_completed, completed_at, instances) -> CascadeResult:
        month_id = week_calendar.month_id_from_week(target.week_id)
        writes: Dict[WeekKey, List[GoalInstance]] = {}

        for goal in instances:
            if goal.template_id != target.template_id:
                continue
            if week_calendar.month_id_from_week(goal.week_id) != month_id:
                continue
            goal.mark(new_completed, completed_at)
            writes.setdefault(week_key(goal.week_id), []).append(goal)

        return CascadeResult(goal=target, instances=instances, writes=writes)

    def _toggle_deadline(self, target, new_completed, completed_at, instances) -> CascadeResult:
        if not new_completed:
            # Odznaczenie nie przywraca usuniętych tygodni
            return self._toggle_single(target, new_completed, completed_at, instances)

        target.mark(True, completed_at)
        deletes: Dict[WeekKey, Set[str]] = {}
        kept = []

        for goal in instances:
            is_future_sibling = (
                target.template_id is not None
                and goal.template_id == target.template_id
                and week_calendar.compare_week_ids(goal.week_id, target.week_id) > 0
            )
            if is_future_sibling:
                deletes.setdefault(week_key(goal.week_id), set()).add(goal.id)
            else:
                kept.append(goal)

        if deletes:
            logger.info("Deadline goal %s completed in %s, pruning %d future weeks",
                        target.template_id, target.week_id, len(deletes))

        return CascadeResult(
            goal=target,
            instances=kept,
            writes={week_key(target.week_id): [target]},
            deletes=deletes,
        )


_DISPATCH = {
    GoalKind.WEEKLY: CompletionCascadeEngine._toggle_single,
    GoalKind.ONEOFF: CompletionCascadeEngine._toggle_single,
    GoalKind.MONTHLY: CompletionCascadeEngine._toggle_monthly,
    GoalKind.DEADLINE: CompletionCascadeEngine._toggle_deadline,
}

# Każdy rodzaj celu musi mieć obsługę
_missing = set(GoalKind) - set(_DISPATCH)
if _missing:
    raise RuntimeError(f"Cascade dispatch does not cover: {sorted(k.value for k in _missing)}")
