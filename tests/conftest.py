import pytest

from apps.goals.adapters.memory_repositories import (
    InMemoryMilestoneProvider, InMemoryTemplateRepository, InMemoryWeekRepository,
)
from apps.goals.application.use_cases import GoalPlannerSession
from tests.factories import FIXED_NOW, USER_ID


@pytest.fixture
def clock():
    return lambda: FIXED_NOW


@pytest.fixture
def week_repo():
    return InMemoryWeekRepository()


@pytest.fixture
def template_repo():
    return InMemoryTemplateRepository(user_id=USER_ID)


@pytest.fixture
def milestone_provider():
    return InMemoryMilestoneProvider()


@pytest.fixture
def make_session(template_repo, milestone_provider, clock):
    def factory(week_repository):
        return GoalPlannerSession(
            user_id=USER_ID,
            week_repository=week_repository,
            template_repository=template_repo,
            milestone_provider=milestone_provider,
            clock=clock,
        )
    return factory


@pytest.fixture
def session(make_session, week_repo):
    return make_session(week_repo)
