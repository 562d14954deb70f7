# apps/goals/domain/services/progress.py
from dataclasses import dataclass
from datetime import timedelta
from typing import Dict, List, Mapping

from apps.goals.domain.entities import GoalInstance
from apps.goals.domain.services import week_calendar


@dataclass
class WeekKPIs:
    active_goals: int
    completed_goals: int
    percent_completed: int
    total_weeks_with_goals: int


def week_progress(goals: List[GoalInstance]) -> int:
    """Procent ukończonych celów tygodnia (0 dla pustego tygodnia)."""
    if not goals:
        return 0
    completed = sum(1 for g in goals if g.completed)
    # Zaokrąglenie "w górę od połówki", nie bankierskie
    return int(completed * 100 / len(goals) + 0.5)


def week_kpis(goals_by_week: Mapping[str, List[GoalInstance]], week_id: str) -> WeekKPIs:
    goals = goals_by_week.get(week_id, [])
    return WeekKPIs(
        active_goals=len(goals),
        completed_goals=sum(1 for g in goals if g.completed),
        percent_completed=week_progress(goals),
        total_weeks_with_goals=sum(1 for week_goals in goals_by_week.values() if week_goals),
    )


def template_streak(goals_by_week: Mapping[str, List[GoalInstance]], template_id: str, up_to_week: str) -> int:
    """
    Ile kolejnych tygodni (licząc wstecz od up_to_week) cel z danego szablonu był ukończony.
    Tydzień bez instancji albo z nieukończoną przerywa serię.
    """
    completed_weeks: Dict[str, bool] = {}
    for week_id, goals in goals_by_week.items():
        for goal in goals:
            if goal.template_id == template_id:
                completed_weeks[week_id] = goal.completed

    streak = 0
    monday = week_calendar.week_range(up_to_week).start
    while completed_weeks.get(week_calendar.iso_week(monday)):
        streak += 1
        monday -= timedelta(weeks=1)
    return streak
