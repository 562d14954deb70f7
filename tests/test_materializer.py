from datetime import date

import pytest

from apps.goals.adapters.memory_repositories import InMemoryWeekRepository
from apps.goals.domain.entities import DurationType, GoalInstance, InstanceKind, Recurrence
from apps.goals.domain.exceptions import InvalidGoalInput
from apps.goals.domain.services.materializer import (
    EagerBatch, InstanceMaterializer, LazyPerWeek, build_template_instance, deadline_strategy, strategy_for,
)
from tests.factories import FIXED_NOW, USER_ID, make_template


@pytest.fixture
def materializer(week_repo):
    return InstanceMaterializer(week_repo, clock=lambda: FIXED_NOW)


def test_load_or_create_builds_instances_from_active_templates(materializer, week_repo):
    templates = [
        make_template(id='tpl_a', title='Bieganie'),
        make_template(id='tpl_b', title='Czytanie', active=False),
    ]

    goals = materializer.load_or_create(USER_ID, 2025, '2025-W10', templates)

    assert [g.id for g in goals] == ['tpl_a_2025-W10']
    goal = goals[0]
    assert goal.template_id == 'tpl_a'
    assert goal.kind == InstanceKind.WEEKLY_GOAL
    assert goal.completed is False
    assert goal.created_at == FIXED_NOW
    assert week_repo.get_week_document(USER_ID, 2025).has_week('2025-W10')


def test_load_or_create_is_idempotent(materializer, week_repo):
    templates = [make_template(id='tpl_a')]
    first = materializer.load_or_create(USER_ID, 2025, '2025-W10', templates)

    # Nowy szablon nie zmienia już zmaterializowanego tygodnia
    templates.append(make_template(id='tpl_b'))
    second = materializer.load_or_create(USER_ID, 2025, '2025-W10', templates)

    assert [g.id for g in second] == [g.id for g in first]
    assert week_repo.saves == [(2025, '2025-W10')]


def test_week_without_active_templates_is_not_saved(materializer, week_repo):
    goals = materializer.load_or_create(USER_ID, 2025, '2025-W10', [make_template(active=False)])

    assert goals == []
    assert week_repo.saves == []


def test_stored_goal_without_kind_defaults_to_weekly_goal(materializer, week_repo):
    legacy = GoalInstance(id='old_1', title='Stary cel', week_id='', template_id=None, kind=None)
    week_repo.save_week_goals(USER_ID, 2025, '2025-W10', [legacy])

    goals = materializer.load_or_create(USER_ID, 2025, '2025-W10', [])

    assert goals[0].kind == InstanceKind.WEEKLY_GOAL
    assert goals[0].week_id == '2025-W10'


def test_monthly_templates_are_not_expanded_lazily(materializer):
    monthly = make_template(id='tpl_m', recurrence=Recurrence.MONTHLY, target_months=2)
    weekly = make_template(id='tpl_w')

    goals = materializer.instances_for_week('2025-W10', [monthly, weekly])

    assert [g.template_id for g in goals] == ['tpl_w']


def test_bulk_instantiate_skips_existing_weeks(materializer, week_repo):
    week_repo.save_week_goals(USER_ID, 2025, '2025-W05', [])
    templates = [make_template(id='tpl_a', duration_type=DurationType.WEEKS, duration_weeks=10)]

    created = materializer.bulk_instantiate(USER_ID, 2025, templates)

    # start 2025-W02, 10 tygodni: W02..W11 bez W05
    assert sorted(created) == [f'2025-W{n:02d}' for n in range(2, 12) if n != 5]
    assert week_repo.get_week_document(USER_ID, 2025).goals_for('2025-W05') == []


def test_append_instances_materializes_weekly_templates_first(materializer, week_repo):
    weekly = make_template(id='tpl_w')
    batch = [
        build_template_instance(make_template(id='goal_m', recurrence=Recurrence.MONTHLY), week_id, FIXED_NOW)
        for week_id in ['2025-W10', '2025-W11']
    ]

    result = materializer.append_instances(USER_ID, batch, [weekly])

    assert [g.id for g in result['2025-W10']] == ['tpl_w_2025-W10', 'goal_m_2025-W10']
    stored = week_repo.get_week_document(USER_ID, 2025).goals_for('2025-W11')
    assert [g.id for g in stored] == ['tpl_w_2025-W11', 'goal_m_2025-W11']


def test_strategy_for_template_shape(settings):
    settings.GOALS_WEEKS_PER_MONTH = 4
    assert isinstance(strategy_for(make_template()), LazyPerWeek)

    monthly = strategy_for(make_template(recurrence=Recurrence.MONTHLY, target_months=2))
    assert isinstance(monthly, EagerBatch)
    assert monthly.week_count == 8


def test_lazy_strategy_creates_nothing_up_front():
    prototype = build_template_instance(make_template(), '2025-W10')
    assert LazyPerWeek().instantiate(prototype, '2025-W10') == []


def test_deadline_strategy():
    assert deadline_strategy(date(2025, 3, 31), '2025-W10').week_count == 4
    # Termin w tygodniu startu: jeden tydzień
    assert deadline_strategy(date(2025, 3, 3), '2025-W10').week_count == 1
    with pytest.raises(InvalidGoalInput):
        deadline_strategy(date(2025, 1, 1), '2025-W10')


def test_eager_batch_ids_follow_group_and_week():
    prototype = build_template_instance(make_template(id='goal_x'), '2025-W10')
    instances = EagerBatch(3).instantiate(prototype, '2025-W10')
    assert [i.id for i in instances] == ['goal_x_2025-W10', 'goal_x_2025-W11', 'goal_x_2025-W12']
    assert [i.week_id for i in instances] == ['2025-W10', '2025-W11', '2025-W12']


def test_repository_returns_copies():
    repo = InMemoryWeekRepository()
    repo.save_week_goals(USER_ID, 2025, '2025-W10', [GoalInstance(id='g', title='x', week_id='2025-W10')])

    repo.get_week_document(USER_ID, 2025).goals_for('2025-W10')[0].completed = True

    assert repo.get_week_document(USER_ID, 2025).goals_for('2025-W10')[0].completed is False
