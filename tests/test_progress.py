from apps.goals.domain.services.progress import template_streak, week_kpis, week_progress
from tests.factories import make_goal


def test_week_progress_rounding():
    assert week_progress([]) == 0
    goals = [make_goal(str(i), '2025-W10', completed=i == 0) for i in range(3)]
    assert week_progress(goals) == 33
    goals[1].completed = True
    assert week_progress(goals) == 67
    assert week_progress([make_goal('a', '2025-W10', completed=True)] + [make_goal('b', '2025-W10')]) == 50


def test_week_kpis():
    goals_by_week = {
        '2025-W10': [make_goal('a', '2025-W10', completed=True), make_goal('b', '2025-W10')],
        '2025-W11': [make_goal('c', '2025-W11')],
        '2025-W12': [],
    }

    kpis = week_kpis(goals_by_week, '2025-W10')

    assert kpis.active_goals == 2
    assert kpis.completed_goals == 1
    assert kpis.percent_completed == 50
    assert kpis.total_weeks_with_goals == 2


def test_template_streak_counts_back_across_year():
    goals_by_week = {
        week_id: [make_goal(f'tpl_a_{week_id}', week_id, 'tpl_a', completed=done)]
        for week_id, done in [('2025-W50', False), ('2025-W51', True), ('2025-W52', True), ('2026-W01', True)]
    }

    assert template_streak(goals_by_week, 'tpl_a', '2026-W01') == 3
    assert template_streak(goals_by_week, 'tpl_a', '2025-W50') == 0
    assert template_streak(goals_by_week, 'tpl_b', '2026-W01') == 0
