# apps/goals/adapters/memory_repositories.py
import copy
from typing import Dict, List, Optional, Tuple

from apps.goals.domain.entities import GoalInstance, GoalTemplate, MilestoneEntity, WeekDocument
from apps.goals.ports.repositories import IMilestoneProvider, ITemplateRepository, IWeekRepository


class InMemoryWeekRepository(IWeekRepository):
    """Dokumenty w słowniku. Kopie przy odczycie i zapisie, jak przy prawdziwej bazie."""

    def __init__(self):
        self.documents: Dict[Tuple[int, int], Dict[str, List[GoalInstance]]] = {}
        self.saves: List[Tuple[int, str]] = []  # (rok, tydzień) w kolejności zapisu

    def get_week_document(self, user_id: int, year: int) -> WeekDocument:
        weeks = self.documents.get((user_id, year), {})
        return WeekDocument(user_id=user_id, year=year, weeks=copy.deepcopy(weeks))

    def save_week_goals(self, user_id: int, year: int, week_id: str, goals: List[GoalInstance]) -> None:
        self.documents.setdefault((user_id, year), {})[week_id] = copy.deepcopy(list(goals))
        self.saves.append((year, week_id))


class InMemoryTemplateRepository(ITemplateRepository):
    def __init__(self, templates: Optional[List[GoalTemplate]] = None, user_id: int = 1):
        self.templates: Dict[str, Tuple[int, GoalTemplate]] = {}
        for template in templates or []:
            self.save(template, user_id)

    def get_templates(self, user_id: int) -> List[GoalTemplate]:
        return [copy.deepcopy(t) for owner, t in self.templates.values() if owner == user_id]

    def save(self, template: GoalTemplate, user_id: int) -> GoalTemplate:
        self.templates[template.id] = (user_id, copy.deepcopy(template))
        return copy.deepcopy(template)

    def set_active(self, template_id: str, active: bool) -> None:
        if template_id in self.templates:
            self.templates[template_id][1].active = active


class InMemoryMilestoneProvider(IMilestoneProvider):
    def __init__(self, milestones: Optional[List[MilestoneEntity]] = None):
        self.milestones = {m.id: m for m in milestones or []}

    def get_milestone(self, milestone_id: str) -> Optional[MilestoneEntity]:
        return self.milestones.get(milestone_id)
