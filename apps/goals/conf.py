# apps/goals/conf.py
from django.conf import settings


def weeks_per_month() -> int:
    """Liczba tygodni generowanych na jeden miesiąc celu miesięcznego."""
    return getattr(settings, 'GOALS_WEEKS_PER_MONTH', 4)


def default_instance_kind() -> str:
    """Rodzaj przypisywany instancjom zapisanym bez pola 'kind' (stare dane)."""
    return getattr(settings, 'GOALS_DEFAULT_INSTANCE_KIND', 'weekly_goal')
