# apps/goals/domain/services/materializer.py
import logging
import uuid
from abc import ABC, abstractmethod
from dataclasses import replace
from datetime import date
from typing import Callable, Dict, List, Optional

from django.utils import timezone

from apps.goals import conf
from apps.goals.domain.entities import GoalInstance, GoalTemplate, InstanceKind
from apps.goals.domain.exceptions import InvalidGoalInput
from apps.goals.domain.services import week_calendar
from apps.goals.domain.services.activation import MilestoneMap, filter_active
from apps.goals.ports.repositories import IWeekRepository

logger = logging.getLogger(__name__)


def new_goal_id() -> str:
    return f"goal_{uuid.uuid4().hex[:12]}"


def instance_id(group_id: str, week_id: str) -> str:
    return f"{group_id}_{week_id}"


def build_template_instance(template: GoalTemplate, week_id: str, now=None) -> GoalInstance:
    """Instancja szablonu w danym tygodniu. Id jest deterministyczne."""
    return GoalInstance(
        id=instance_id(template.id, week_id),
        template_id=template.id,
        kind=InstanceKind.WEEKLY_GOAL,
        week_id=week_id,
        title=template.title,
        description=template.description,
        dream_id=template.dream_id,
        dream_title=template.dream_title,
        dream_category=template.dream_category,
        recurrence=template.recurrence,
        completed=False,
        completed_at=None,
        created_at=now,
    )


def with_stored_defaults(goal: GoalInstance, week_id: str) -> GoalInstance:
    """Uzupełnia zapisany cel: brak 'kind' w starych danych, tydzień zawsze z klucza dokumentu."""
    kind = goal.kind or InstanceKind(conf.default_instance_kind())
    return replace(goal, kind=kind, week_id=week_id)


class InstantiationStrategy(ABC):
    """Decyduje, ile instancji powstaje w chwili tworzenia celu."""
    eager = False

    @abstractmethod
    def weeks_at_creation(self, start_week_id: str) -> List[str]:
        pass

    def instantiate(self, prototype: GoalInstance, start_week_id: str) -> List[GoalInstance]:
        return [
            replace(prototype, id=instance_id(prototype.template_id, week_id), week_id=week_id)
            for week_id in self.weeks_at_creation(start_week_id)
        ]


class LazyPerWeek(InstantiationStrategy):
    """Cele tygodniowe: nic przy tworzeniu, instancje powstają przy odwiedzinach tygodnia."""

    def weeks_at_creation(self, start_week_id: str) -> List[str]:
        return []


class EagerBatch(InstantiationStrategy):
    """Cele miesięczne i terminowe: wszystkie tygodnie od razu (kaskada potrzebuje rodzeństwa)."""
    eager = True

    def __init__(self, week_count: int):
        self.week_count = week_count

    def weeks_at_creation(self, start_week_id: str) -> List[str]:
        return week_calendar.next_n_weeks(start_week_id, self.week_count)


def strategy_for(template: GoalTemplate) -> InstantiationStrategy:
    if template.is_monthly:
        return EagerBatch((template.target_months or 1) * conf.weeks_per_month())
    return LazyPerWeek()


def deadline_strategy(target_date: date, start_week_id: str) -> EagerBatch:
    weeks = week_calendar.weeks_until_date(target_date, start_week_id)
    if weeks < 0:
        raise InvalidGoalInput(f"Deadline {target_date} is before week {start_week_id}")
    # Termin w bieżącym tygodniu to nadal jeden tydzień
    return EagerBatch(max(1, weeks))


class InstanceMaterializer:
    def __init__(self, repository: IWeekRepository, clock: Callable = timezone.now):
        self.repository = repository
        self.clock = clock

    def load_or_create(self, user_id: int, year: int, week_id: str, templates: List[GoalTemplate],
                       milestones: Optional[MilestoneMap] = None) -> List[GoalInstance]:
        """
        Zwraca cele tygodnia. Jeśli tydzień jest już w dokumencie, zwraca go bez zmian
        (idempotencja), w przeciwnym razie tworzy instancje z aktywnych szablonów.
        """
        document = self.repository.get_week_document(user_id, year)

        if document.has_week(week_id):
            goals = [with_stored_defaults(goal, week_id) for goal in document.goals_for(week_id)]
            logger.debug("Found %d stored goals for %s (user %s)", len(goals), week_id, user_id)
            return goals

        goals = self.instances_for_week(week_id, templates, milestones)
        if goals:
            self.repository.save_week_goals(user_id, year, week_id, goals)
            logger.info("Created %d goal instances for %s (user %s)", len(goals), week_id, user_id)
        return goals

    def instances_for_week(self, week_id: str, templates: List[GoalTemplate],
                           milestones: Optional[MilestoneMap] = None) -> List[GoalInstance]:
        now = self.clock()
        # Szablony miesięczne mają już instancje z partii, tu tylko leniwe
        lazy = [t for t in templates if not strategy_for(t).eager]
        return [build_template_instance(t, week_id, now) for t in filter_active(lazy, week_id, milestones)]

    def bulk_instantiate(self, user_id: int, year: int, templates: List[GoalTemplate],
                         milestones: Optional[MilestoneMap] = None) -> Dict[str, List[GoalInstance]]:
        """Materializuje cały rok naraz (np. przy onboardingu). Istniejące tygodnie pomija."""
        document = self.repository.get_week_document(user_id, year)
        created = {}

        for week_id in week_calendar.all_weeks_for_year(year):
            if document.has_week(week_id):
                continue
            goals = self.instances_for_week(week_id, templates, milestones)
            if not goals:
                continue
            self.repository.save_week_goals(user_id, year, week_id, goals)
            created[week_id] = goals

        logger.info("Bulk instantiation for %s (user %s): %d weeks created", year, user_id, len(created))
        return created

    def append_instances(self, user_id: int, instances: List[GoalInstance], templates: List[GoalTemplate],
                         milestones: Optional[MilestoneMap] = None) -> Dict[str, List[GoalInstance]]:
        """
        Dopisuje instancje z partii (eager) do ich tygodni.
        Tydzień jeszcze niezmaterializowany najpierw dostaje instancje z aktywnych szablonów,
        żeby późniejszy odczyt nie pominął celów tygodniowych.
        """
        by_week: Dict[str, List[GoalInstance]] = {}
        for instance in instances:
            by_week.setdefault(instance.week_id, []).append(instance)

        documents = {}
        result = {}
        for week_id in sorted(by_week, key=week_calendar.week_sort_key):
            year = week_calendar.week_year(week_id)
            if year not in documents:
                documents[year] = self.repository.get_week_document(user_id, year)
            document = documents[year]

            if document.has_week(week_id):
                goals = [with_stored_defaults(goal, week_id) for goal in document.goals_for(week_id)]
            else:
                goals = self.instances_for_week(week_id, templates, milestones)

            existing_ids = {goal.id for goal in goals}
            goals = goals + [i for i in by_week[week_id] if i.id not in existing_ids]
            self.repository.save_week_goals(user_id, year, week_id, goals)
            result[week_id] = goals

        return result

