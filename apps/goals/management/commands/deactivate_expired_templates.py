from django.core.management.base import BaseCommand, CommandError

from apps.goals.adapters.orm_repositories import (
    DjangoMilestoneProvider, DjangoTemplateRepository, DjangoWeekRepository,
)
from apps.goals.application.use_cases import GoalPlannerSession
from apps.goals.domain.exceptions import GoalEngineError
from apps.goals.domain.services import week_calendar


class Command(BaseCommand):
    help = 'Wyłącza szablony, które wygasły (limit tygodni albo ukończony kamień milowy)'

    def add_arguments(self, parser):
        parser.add_argument('--user', type=int, required=True, help='ID użytkownika')
        parser.add_argument('--week', default=None, help='Tydzień odniesienia, np. 2025-W44')

    def handle(self, *args, **options):
        week_id = options['week']
        session = GoalPlannerSession(
            user_id=options['user'],
            week_repository=DjangoWeekRepository(),
            template_repository=DjangoTemplateRepository(),
            milestone_provider=DjangoMilestoneProvider(),
        )

        try:
            if week_id:
                week_calendar.parse_week_id(week_id)
            expired = session.deactivate_expired_templates(week_id)
        except GoalEngineError as e:
            raise CommandError(str(e)) from e

        self.stdout.write(self.style.SUCCESS(f'Wyłączono {len(expired)} wygasłych szablonów.'))
        for t in expired:
            self.stdout.write(f"- {t.title} ({t.id})")
