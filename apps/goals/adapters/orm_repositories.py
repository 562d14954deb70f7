# apps/goals/adapters/orm_repositories.py
from datetime import date, datetime
from typing import Any, Dict, List, Optional

from dateutil.parser import isoparse
from django.db import DatabaseError, transaction

from apps.goals.domain.entities import (
    DurationType, GoalInstance, GoalTemplate, InstanceKind, MilestoneEntity, Recurrence, WeekDocument,
)
from apps.goals.domain.exceptions import PersistenceError
from apps.goals.models import GoalTemplate as GoalTemplateModel
from apps.goals.models import Milestone as MilestoneModel
from apps.goals.models import WeekDocument as WeekDocumentModel
from apps.goals.ports.repositories import IMilestoneProvider, ITemplateRepository, IWeekRepository


def _enum_or_raw(enum_cls, value):
    """Wartość spoza enuma zostaje stringiem (ewaluator traktuje ją jako nieznaną)."""
    if value is None or value == '':
        return None
    try:
        return enum_cls(value)
    except ValueError:
        return value


def _raw(value):
    return getattr(value, 'value', value)


def _iso(value) -> Optional[str]:
    return value.isoformat() if value else None


def _parse_datetime(value) -> Optional[datetime]:
    if not value:
        return None
    if isinstance(value, datetime):
        return value
    return isoparse(value)


def _parse_date(value) -> Optional[date]:
    if not value:
        return None
    if isinstance(value, date):
        return value
    return isoparse(value).date()


def instance_to_payload(goal: GoalInstance) -> Dict[str, Any]:
    """Encja -> słownik JSON zapisywany w dokumencie tygodnia."""
    return {
        'id': goal.id,
        'templateId': goal.template_id,
        'kind': _raw(goal.kind),
        'weekId': goal.week_id,
        'title': goal.title,
        'description': goal.description,
        'dreamId': goal.dream_id,
        'dreamTitle': goal.dream_title,
        'dreamCategory': goal.dream_category,
        'recurrence': _raw(goal.recurrence),
        'targetDate': _iso(goal.target_date),
        'completed': goal.completed,
        'completedAt': _iso(goal.completed_at),
        'createdAt': _iso(goal.created_at),
    }


def payload_to_instance(data: Dict[str, Any], week_id: str) -> GoalInstance:
    """Słownik z dokumentu -> encja. Brak 'kind' zostaje None (uzupełnia materializator)."""
    return GoalInstance(
        id=data['id'],
        title=data.get('title', ''),
        week_id=data.get('weekId') or week_id,
        template_id=data.get('templateId'),
        kind=_enum_or_raw(InstanceKind, data.get('kind')),
        description=data.get('description') or '',
        dream_id=data.get('dreamId'),
        dream_title=data.get('dreamTitle') or '',
        dream_category=data.get('dreamCategory') or '',
        recurrence=_enum_or_raw(Recurrence, data.get('recurrence')),
        target_date=_parse_date(data.get('targetDate')),
        completed=bool(data.get('completed', False)),
        completed_at=_parse_datetime(data.get('completedAt')),
        created_at=_parse_datetime(data.get('createdAt')),
    )


class DjangoWeekRepository(IWeekRepository):
    def get_week_document(self, user_id: int, year: int) -> WeekDocument:
        try:
            obj = WeekDocumentModel.objects.filter(user_id=user_id, year=year).first()
        except DatabaseError as e:
            raise PersistenceError(f"Could not read weeks {year} of user {user_id}: {e}") from e

        if obj is None:
            return WeekDocument(user_id=user_id, year=year)

        weeks = {
            week_id: [payload_to_instance(g, week_id) for g in (week or {}).get('goals', [])]
            for week_id, week in obj.weeks.items()
        }
        return WeekDocument(user_id=user_id, year=year, weeks=weeks)

    def save_week_goals(self, user_id: int, year: int, week_id: str, goals: List[GoalInstance]) -> None:
        # Odczyt-modyfikacja-zapis całego dokumentu, bez tokenu współbieżności (wygrywa ostatni zapis)
        try:
            with transaction.atomic():
                obj, _ = WeekDocumentModel.objects.get_or_create(
                    user_id=user_id, year=year, defaults={'weeks': {}}
                )
                weeks = dict(obj.weeks or {})
                weeks[week_id] = {'goals': [instance_to_payload(g) for g in goals]}
                obj.weeks = weeks
                obj.save(update_fields=['weeks', 'updated_at'])
        except DatabaseError as e:
            raise PersistenceError(f"Could not save {week_id} of user {user_id}: {e}") from e


class DjangoTemplateRepository(ITemplateRepository):
    def to_entity(self, model: GoalTemplateModel) -> GoalTemplate:
        """Konwertuje Model Django -> Czystą Encję."""
        return GoalTemplate(
            id=model.id,
            title=model.title,
            description=model.description,
            dream_id=model.dream_id,
            dream_title=model.dream_title,
            dream_category=model.dream_category,
            milestone_id=model.milestone_id,
            recurrence=_enum_or_raw(Recurrence, model.recurrence) or Recurrence.WEEKLY,
            duration_type=_enum_or_raw(DurationType, model.duration_type),
            duration_weeks=model.duration_weeks,
            target_weeks=model.target_weeks,
            target_months=model.target_months,
            start_date=model.start_date,
            active=model.active,
            created_at=model.created_at,
        )

    def get_templates(self, user_id: int) -> List[GoalTemplate]:
        try:
            qs = GoalTemplateModel.objects.filter(user_id=user_id)
            return [self.to_entity(t) for t in qs]
        except DatabaseError as e:
            raise PersistenceError(f"Could not read templates of user {user_id}: {e}") from e

    def save(self, template: GoalTemplate, user_id: int = None) -> GoalTemplate:
        data = {
            'title': template.title,
            'description': template.description,
            'dream_id': template.dream_id,
            'dream_title': template.dream_title,
            'dream_category': template.dream_category,
            'milestone_id': template.milestone_id,
            'recurrence': _raw(template.recurrence),
            'duration_type': _raw(template.duration_type),
            'duration_weeks': template.duration_weeks,
            'target_weeks': template.target_weeks,
            'target_months': template.target_months,
            'start_date': template.start_date,
            'active': template.active,
        }
        if template.created_at:
            data['created_at'] = template.created_at

        try:
            if GoalTemplateModel.objects.filter(id=template.id).exists():
                GoalTemplateModel.objects.filter(id=template.id).update(**data)
                obj = GoalTemplateModel.objects.get(id=template.id)
            else:
                # Tworzenie nowego (wymaga user_id)
                if user_id is None:
                    raise ValueError("user_id is required for creating a new template")
                obj = GoalTemplateModel.objects.create(id=template.id, user_id=user_id, **data)
        except DatabaseError as e:
            raise PersistenceError(f"Could not save template {template.id}: {e}") from e

        return self.to_entity(obj)

    def set_active(self, template_id: str, active: bool) -> None:
        try:
            GoalTemplateModel.objects.filter(id=template_id).update(active=active)
        except DatabaseError as e:
            raise PersistenceError(f"Could not update template {template_id}: {e}") from e


class DjangoMilestoneProvider(IMilestoneProvider):
    def get_milestone(self, milestone_id: str) -> Optional[MilestoneEntity]:
        try:
            milestone = MilestoneModel.objects.get(id=milestone_id)
        except MilestoneModel.DoesNotExist:
            return None
        except DatabaseError as e:
            raise PersistenceError(f"Could not read milestone {milestone_id}: {e}") from e
        return MilestoneEntity(id=milestone.id, title=milestone.title, completed=milestone.completed)
