from datetime import date, datetime, timezone as dt_timezone

from apps.goals.adapters.memory_repositories import InMemoryWeekRepository
from apps.goals.domain.entities import DurationType, GoalInstance, GoalTemplate, InstanceKind, Recurrence
from apps.goals.domain.exceptions import PersistenceError

USER_ID = 1
FIXED_NOW = datetime(2025, 3, 5, 9, 30, tzinfo=dt_timezone.utc)  # środa, 2025-W10


class FailingWeekRepository(InMemoryWeekRepository):
    """Zapis tygodni z fail_weeks kończy się błędem, reszta działa normalnie."""

    def __init__(self, fail_weeks=()):
        super().__init__()
        self.fail_weeks = set(fail_weeks)

    def save_week_goals(self, user_id, year, week_id, goals):
        if week_id in self.fail_weeks:
            raise PersistenceError(f"Simulated failure for {week_id}")
        super().save_week_goals(user_id, year, week_id, goals)


class FailingReadWeekRepository(InMemoryWeekRepository):
    def __init__(self):
        super().__init__()
        self.fail_reads = False

    def get_week_document(self, user_id, year):
        if self.fail_reads:
            raise PersistenceError("Simulated read failure")
        return super().get_week_document(user_id, year)


def make_template(id='tpl_1', title='Siłownia', **kwargs) -> GoalTemplate:
    defaults = {
        'recurrence': Recurrence.WEEKLY,
        'duration_type': DurationType.UNLIMITED,
        'start_date': date(2025, 1, 6),  # poniedziałek 2025-W02
    }
    defaults.update(kwargs)
    return GoalTemplate(id=id, title=title, **defaults)


def make_goal(id, week_id, template_id=None, **kwargs) -> GoalInstance:
    defaults = {
        'title': 'Cel',
        'kind': InstanceKind.WEEKLY_GOAL,
        'recurrence': Recurrence.WEEKLY if template_id else None,
    }
    defaults.update(kwargs)
    return GoalInstance(id=id, week_id=week_id, template_id=template_id, **defaults)


def monthly_series(template_id, week_ids, completed=False):
    return [
        make_goal(f"{template_id}_{w}", w, template_id, recurrence=Recurrence.MONTHLY, completed=completed)
        for w in week_ids
    ]


def deadline_series(group_id, week_ids, target_date):
    return [
        make_goal(f"{group_id}_{w}", w, group_id, kind=InstanceKind.DEADLINE, recurrence=None,
                  target_date=target_date)
        for w in week_ids
    ]
