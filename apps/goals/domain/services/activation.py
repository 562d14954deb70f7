# apps/goals/domain/services/activation.py
import logging
from typing import Dict, List, Optional

from apps.goals.domain.entities import DurationType, GoalTemplate, MilestoneEntity
from apps.goals.domain.services import week_calendar

logger = logging.getLogger(__name__)

MilestoneMap = Dict[str, MilestoneEntity]


def template_start_week(template: GoalTemplate) -> Optional[str]:
    if not template.start_date:
        return None
    return week_calendar.iso_week(template.start_date)


def is_active(template: GoalTemplate, week_id: str, milestone: Optional[MilestoneEntity] = None) -> bool:
    """
    Czy szablon powinien wygenerować instancję w tygodniu week_id.
    Czysta funkcja: nie zmienia szablonu i nie sięga do bazy.
    Reguły sprawdzane po kolei, pierwsza pasująca wygrywa.
    """
    # 1. Wyłącznik autora
    if template.active is False:
        return False

    # 2. Przed tygodniem startu
    start_week = template_start_week(template)
    if start_week and week_calendar.compare_week_ids(week_id, start_week) < 0:
        return False

    duration_type = template.duration_type

    if duration_type == DurationType.UNLIMITED:
        return True

    if duration_type == DurationType.WEEKS:
        if not template.duration_weeks or not start_week:
            logger.warning(
                "Template %s has duration type 'weeks' without duration_weeks/start_date, treating as active",
                template.id,
            )
            return True
        return week_calendar.weeks_between(start_week, week_id) < template.duration_weeks

    if duration_type == DurationType.MILESTONE:
        return not (milestone is not None and milestone.completed)

    # Nieznana konfiguracja - domyślnie aktywny (ukrywa błędy konfiguracji)
    logger.warning("Template %s has unknown duration type %r, treating as active", template.id, duration_type)
    return True


def milestone_for(template: GoalTemplate, milestones: Optional[MilestoneMap]) -> Optional[MilestoneEntity]:
    if not template.milestone_id or not milestones:
        return None
    return milestones.get(template.milestone_id)


def filter_active(templates: List[GoalTemplate], week_id: str,
                  milestones: Optional[MilestoneMap] = None) -> List[GoalTemplate]:
    return [t for t in templates if is_active(t, week_id, milestone_for(t, milestones))]


def find_expired(templates: List[GoalTemplate], week_id: str,
                 milestones: Optional[MilestoneMap] = None) -> List[GoalTemplate]:
    """
    Szablony, które nadal mają active=True, ale w tygodniu week_id już wygasły.
    Szablony, które jeszcze się nie zaczęły, nie są tu zwracane.
    """
    expired = []
    for template in templates:
        if template.active is False:
            continue
        start_week = template_start_week(template)
        if start_week and week_calendar.compare_week_ids(week_id, start_week) < 0:
            continue
        if not is_active(template, week_id, milestone_for(template, milestones)):
            expired.append(template)
    return expired
