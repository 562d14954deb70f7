# apps/goals/ports/repositories.py
from abc import ABC, abstractmethod
from typing import List, Optional
from apps.goals.domain.entities import GoalInstance, GoalTemplate, MilestoneEntity, WeekDocument


class IWeekRepository(ABC):
    @abstractmethod
    def get_week_document(self, user_id: int, year: int) -> WeekDocument:
        """Zwraca dokument roczny użytkownika (pusty, jeśli jeszcze nie istnieje)."""
        pass

    @abstractmethod
    def save_week_goals(self, user_id: int, year: int, week_id: str, goals: List[GoalInstance]) -> None:
        """Podmienia całą listę celów tygodnia week_id. Przy błędzie rzuca PersistenceError."""
        pass


class ITemplateRepository(ABC):
    @abstractmethod
    def get_templates(self, user_id: int) -> List[GoalTemplate]:
        pass

    @abstractmethod
    def save(self, template: GoalTemplate, user_id: int) -> GoalTemplate:
        pass

    @abstractmethod
    def set_active(self, template_id: str, active: bool) -> None:
        """Jedyna dozwolona zmiana szablonu po utworzeniu."""
        pass


class IMilestoneProvider(ABC):
    @abstractmethod
    def get_milestone(self, milestone_id: str) -> Optional[MilestoneEntity]:
        pass
