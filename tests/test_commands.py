from datetime import date
from io import StringIO

import pytest
from django.core.management import CommandError, call_command

from apps.goals.adapters.orm_repositories import DjangoTemplateRepository, DjangoWeekRepository
from apps.goals.domain.entities import DurationType
from tests.factories import make_template

pytestmark = pytest.mark.django_db


@pytest.fixture
def user(django_user_model):
    return django_user_model.objects.create_user(username='ania', password='secret')


def test_materialize_year(user):
    DjangoTemplateRepository().save(make_template(id='tpl_a', start_date=date(2025, 12, 15)), user.id)
    out = StringIO()

    call_command('materialize_year', user=user.id, year=2025, stdout=out)

    assert 'Zmaterializowano 2 tygodni' in out.getvalue()
    document = DjangoWeekRepository().get_week_document(user.id, 2025)
    assert sorted(document.weeks) == ['2025-W51', '2025-W52']


def test_deactivate_expired_templates(user):
    repo = DjangoTemplateRepository()
    repo.save(make_template(id='tpl_short', duration_type=DurationType.WEEKS, duration_weeks=2), user.id)
    repo.save(make_template(id='tpl_long'), user.id)
    out = StringIO()

    call_command('deactivate_expired_templates', user=user.id, week='2025-W10', stdout=out)

    assert 'Wyłączono 1 wygasłych' in out.getvalue()
    assert {t.id: t.active for t in repo.get_templates(user.id)} == {'tpl_short': False, 'tpl_long': True}


def test_deactivate_rejects_bad_week(user):
    with pytest.raises(CommandError):
        call_command('deactivate_expired_templates', user=user.id, week='2025-W99')
