from django.core.management.base import BaseCommand, CommandError
from django.utils import timezone

from apps.goals.adapters.orm_repositories import (
    DjangoMilestoneProvider, DjangoTemplateRepository, DjangoWeekRepository,
)
from apps.goals.application.use_cases import GoalPlannerSession
from apps.goals.domain.exceptions import GoalEngineError


class Command(BaseCommand):
    help = 'Materializuje cele z szablonów dla wszystkich tygodni roku'

    def add_arguments(self, parser):
        parser.add_argument('--user', type=int, required=True, help='ID użytkownika')
        parser.add_argument('--year', type=int, default=None, help='Rok ISO (domyślnie bieżący)')

    def handle(self, *args, **options):
        year = options['year'] or timezone.localdate().isocalendar()[0]
        session = GoalPlannerSession(
            user_id=options['user'],
            week_repository=DjangoWeekRepository(),
            template_repository=DjangoTemplateRepository(),
            milestone_provider=DjangoMilestoneProvider(),
        )

        try:
            created = session.bulk_instantiate(year)
        except GoalEngineError as e:
            raise CommandError(str(e)) from e

        self.stdout.write(self.style.SUCCESS(f'Zmaterializowano {len(created)} tygodni w roku {year}.'))
        for week_id, goals in created.items():
            self.stdout.write(f"- {week_id}: {len(goals)} celów")
