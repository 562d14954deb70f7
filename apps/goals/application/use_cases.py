# apps/goals/application/use_cases.py
import logging
import uuid
from dataclasses import dataclass
from datetime import date
from typing import Callable, Dict, List, Optional

from django.utils import timezone

from apps.goals import conf
from apps.goals.application.load_cache import WeekLoadCache
from apps.goals.application.optimistic import OptimisticGoalStore
from apps.goals.domain.entities import (
    DurationType, GoalInstance, GoalTemplate, InstanceKind, Recurrence, WeekDocument,
)
from apps.goals.domain.exceptions import (
    GoalLoadError, GoalNotFound, GoalSaveError, InvalidGoalInput, PartialCascadeError, PersistenceError,
)
from apps.goals.domain.services import week_calendar
from apps.goals.domain.services.activation import MilestoneMap, find_expired
from apps.goals.domain.services.cascade import CompletionCascadeEngine, sibling_years
from apps.goals.domain.services.materializer import (
    InstanceMaterializer, build_template_instance, deadline_strategy, instance_id, new_goal_id,
    strategy_for, with_stored_defaults,
)
from apps.goals.domain.services.progress import WeekKPIs, template_streak, week_kpis, week_progress
from apps.goals.ports.repositories import IMilestoneProvider, ITemplateRepository, IWeekRepository

logger = logging.getLogger(__name__)


@dataclass
class CreateTemplateInput:
    title: str
    description: str = ""
    dream_id: Optional[str] = None
    dream_title: str = ""
    dream_category: str = ""
    milestone_id: Optional[str] = None
    duration_type: DurationType = DurationType.UNLIMITED
    duration_weeks: Optional[int] = None
    target_weeks: Optional[int] = None
    start_date: Optional[date] = None


@dataclass
class CreateGoalInput:
    title: str
    consistency: str  # 'monthly' albo 'deadline'
    description: str = ""
    dream_id: Optional[str] = None
    dream_title: str = ""
    dream_category: str = ""
    target_months: Optional[int] = None
    target_date: Optional[date] = None
    start_week_id: Optional[str] = None  # domyślnie bieżący tydzień


class GoalPlannerSession:
    """
    Sesja jednego użytkownika: to, czego używa warstwa UI.

    Trzyma stan celów po stronie klienta (optymistyczny), cache wczytanych
    tygodni i deleguje logikę do materializatora i silnika kaskady.
    """

    def __init__(self, user_id: int, week_repository: IWeekRepository, template_repository: ITemplateRepository,
                 milestone_provider: Optional[IMilestoneProvider] = None, clock: Callable = timezone.now):
        self.user_id = user_id
        self.week_repository = week_repository
        self.template_repository = template_repository
        self.milestone_provider = milestone_provider
        self.clock = clock

        self.materializer = InstanceMaterializer(week_repository, clock)
        self.engine = CompletionCascadeEngine()
        self.cache = WeekLoadCache()
        self.store = OptimisticGoalStore()

    # --- Odczyt ---

    def load_week_goals_if_needed(self, week_id: str) -> List[GoalInstance]:
        templates = self._load_templates()
        if not self.cache.needs_load(week_id, len(templates)):
            return self.store.goals_for_week(week_id)
        return self._load_week(week_id, templates)

    def load_week_goals(self, week_id: str) -> List[GoalInstance]:
        """Wczytuje tydzień zawsze, z pominięciem cache."""
        return self._load_week(week_id, self._load_templates())

    def get_week_goals(self, week_id: str) -> List[GoalInstance]:
        return self.store.goals_for_week(week_id)

    def get_week_progress(self, week_id: str) -> int:
        return week_progress(self.store.goals_for_week(week_id))

    def get_week_kpis(self, week_id: str) -> WeekKPIs:
        return week_kpis(self.store.goals_by_week(), week_id)

    def get_template_streak(self, template_id: str, up_to_week: str) -> int:
        return template_streak(self.store.goals_by_week(), template_id, up_to_week)

    def refresh(self) -> None:
        """Sygnał odświeżenia: np. po dodaniu lub edycji szablonów."""
        self.cache.clear()

    # --- Przełączanie ukończenia ---

    def toggle_goal_completion(self, goal_id: str, week_id: str) -> GoalInstance:
        instances = self._cascade_context(goal_id, week_id)
        result = self.engine.toggle(goal_id, week_id, instances, now=self.clock())
        touched = result.touched_weeks()

        # 1. Optymistycznie: UI widzi zmianę od razu
        snapshot = self.store.apply(result.goals_by_week())

        # 2. Zapis sekwencyjny, tydzień po tygodniu
        committed = []
        for key in touched:
            try:
                self.week_repository.save_week_goals(self.user_id, key.year, key.week_id, result.goals_for(key))
            except PersistenceError as e:
                self.store.rollback(snapshot)
                self.cache.invalidate_many(k.week_id for k in touched)
                if committed:
                    pending = touched[len(committed):]
                    logger.warning(
                        "Data consistency: cascade for goal %s (user %s) partially written. "
                        "Committed: %s, not written: %s",
                        goal_id, self.user_id,
                        [k.week_id for k in committed], [k.week_id for k in pending],
                    )
                    raise PartialCascadeError(goal_id, committed, pending) from e
                logger.error("Failed to save goal %s in %s, reverted: %s", goal_id, week_id, e)
                raise GoalSaveError(f"Could not save goal {goal_id} in {week_id}") from e
            committed.append(key)

        # 3. Sukces
        self.store.commit()
        self.cache.invalidate_many(key.week_id for key in touched)
        return result.goal

    # --- Tworzenie celów ---

    def create_weekly_template(self, data: CreateTemplateInput) -> GoalTemplate:
        self._require_title(data.title)
        if data.duration_type == DurationType.WEEKS and not data.duration_weeks:
            raise InvalidGoalInput("duration_weeks is required for duration type 'weeks'")

        now = self.clock()
        template = GoalTemplate(
            id=f"template_{uuid.uuid4().hex[:12]}",
            title=data.title.strip(),
            description=data.description,
            dream_id=data.dream_id,
            dream_title=data.dream_title,
            dream_category=data.dream_category,
            milestone_id=data.milestone_id,
            recurrence=Recurrence.WEEKLY,
            duration_type=data.duration_type,
            duration_weeks=data.duration_weeks,
            target_weeks=data.target_weeks or data.duration_weeks,
            start_date=data.start_date or week_calendar.to_date(now),
            active=True,
            created_at=now,
        )
        # Leniwa strategia: nic nie materializujemy przy tworzeniu
        saved = self._save_template(template)
        self.refresh()
        logger.info("Created weekly template %s for user %s", saved.id, self.user_id)
        return saved

    def create_monthly_or_deadline_instances(self, data: CreateGoalInput) -> List[GoalInstance]:
        self._require_title(data.title)
        start_week = data.start_week_id or week_calendar.iso_week(self.clock())
        week_calendar.parse_week_id(start_week)
        now = self.clock()

        if data.consistency == Recurrence.MONTHLY.value:
            if not data.target_months or data.target_months < 1:
                raise InvalidGoalInput("target_months must be a positive number for monthly goals")
            template = GoalTemplate(
                id=new_goal_id(),
                title=data.title.strip(),
                description=data.description,
                dream_id=data.dream_id,
                dream_title=data.dream_title,
                dream_category=data.dream_category,
                recurrence=Recurrence.MONTHLY,
                duration_type=DurationType.WEEKS,
                duration_weeks=data.target_months * conf.weeks_per_month(),
                target_weeks=data.target_months * conf.weeks_per_month(),
                target_months=data.target_months,
                start_date=week_calendar.week_range(start_week).start,
                created_at=now,
            )
            self._save_template(template)
            strategy = strategy_for(template)
            prototype = build_template_instance(template, start_week, now)

        elif data.consistency == InstanceKind.DEADLINE.value:
            if not data.target_date:
                raise InvalidGoalInput("target_date is required for deadline goals")
            target_date = week_calendar.to_date(data.target_date)
            strategy = deadline_strategy(target_date, start_week)
            group_id = new_goal_id()
            prototype = GoalInstance(
                id=instance_id(group_id, start_week),
                template_id=group_id,
                kind=InstanceKind.DEADLINE,
                week_id=start_week,
                title=data.title.strip(),
                description=data.description,
                dream_id=data.dream_id,
                dream_title=data.dream_title,
                dream_category=data.dream_category,
                target_date=target_date,
                created_at=now,
            )

        else:
            raise InvalidGoalInput(f"Unsupported goal consistency: {data.consistency!r}")

        instances = strategy.instantiate(prototype, start_week)
        templates = self._load_templates()
        try:
            weeks = self.materializer.append_instances(
                self.user_id, instances, templates, self._load_milestones(templates)
            )
        except PersistenceError as e:
            raise GoalSaveError(f"Could not save instances of {prototype.template_id}") from e

        for week_id, goals in weeks.items():
            self.store.replace_week(week_id, goals)
        self.cache.invalidate_many(weeks)

        logger.info("Created %d %s instances (%s) for user %s",
                    len(instances), data.consistency, prototype.template_id, self.user_id)
        return instances

    # --- Utrzymanie ---

    def bulk_instantiate(self, year: int) -> Dict[str, List[GoalInstance]]:
        templates = self._load_templates()
        try:
            created = self.materializer.bulk_instantiate(
                self.user_id, year, templates, self._load_milestones(templates)
            )
        except PersistenceError as e:
            raise GoalSaveError(f"Bulk instantiation for {year} failed") from e
        self.refresh()
        return created

    def deactivate_expired_templates(self, week_id: Optional[str] = None) -> List[GoalTemplate]:
        week_id = week_id or week_calendar.iso_week(self.clock())
        templates = self._load_templates()
        expired = find_expired(templates, week_id, self._load_milestones(templates))

        for template in expired:
            try:
                self.template_repository.set_active(template.id, False)
            except PersistenceError as e:
                raise GoalSaveError(f"Could not deactivate template {template.id}") from e
            logger.info("Template %s expired in %s, deactivated", template.id, week_id)

        if expired:
            self.refresh()
        return expired

    # --- Pomocnicze ---

    def _load_week(self, week_id: str, templates: List[GoalTemplate]) -> List[GoalInstance]:
        year = week_calendar.week_year(week_id)
        try:
            goals = self.materializer.load_or_create(
                self.user_id, year, week_id, templates, self._load_milestones(templates)
            )
        except PersistenceError as e:
            logger.error("Failed to load goals for %s (user %s): %s", week_id, self.user_id, e)
            raise GoalLoadError(f"Could not load goals for {week_id}") from e

        self.store.replace_week(week_id, goals)
        self.cache.mark_loaded(week_id, len(templates))
        return goals

    def _load_templates(self) -> List[GoalTemplate]:
        try:
            return self.template_repository.get_templates(self.user_id)
        except PersistenceError as e:
            raise GoalLoadError(f"Could not load templates for user {self.user_id}") from e

    def _load_milestones(self, templates: List[GoalTemplate]) -> MilestoneMap:
        if self.milestone_provider is None:
            return {}
        milestones = {}
        for milestone_id in {t.milestone_id for t in templates if t.milestone_id}:
            try:
                milestone = self.milestone_provider.get_milestone(milestone_id)
            except PersistenceError as e:
                raise GoalLoadError(f"Could not load milestone {milestone_id}") from e
            if milestone is not None:
                milestones[milestone_id] = milestone
        return milestones

    def _read_document(self, year: int) -> WeekDocument:
        try:
            return self.week_repository.get_week_document(self.user_id, year)
        except PersistenceError as e:
            raise GoalLoadError(f"Could not load week document {year} for user {self.user_id}") from e

    def _cascade_context(self, goal_id: str, week_id: str) -> List[GoalInstance]:
        """Świeży odczyt z bazy: cel + wszystkie dokumenty, w których może być jego rodzeństwo."""
        year = week_calendar.week_year(week_id)
        documents = {year: self._read_document(year)}

        stored = [with_stored_defaults(g, week_id) for g in documents[year].goals_for(week_id)]
        goal = next((g for g in stored if g.id == goal_id), None)
        if goal is None:
            raise GoalNotFound(goal_id, week_id)

        for extra_year in sorted(sibling_years(goal)):
            if extra_year not in documents:
                documents[extra_year] = self._read_document(extra_year)

        instances = []
        for document in documents.values():
            for doc_week_id, goals in document.weeks.items():
                instances.extend(with_stored_defaults(g, doc_week_id) for g in goals)
        return instances

    def _save_template(self, template: GoalTemplate) -> GoalTemplate:
        try:
            return self.template_repository.save(template, user_id=self.user_id)
        except PersistenceError as e:
            raise GoalSaveError(f"Could not save template {template.id}") from e

    @staticmethod
    def _require_title(title: str) -> None:
        if not title or not title.strip():
            raise InvalidGoalInput("Goal title cannot be empty")
