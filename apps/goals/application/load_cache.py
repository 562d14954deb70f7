# apps/goals/application/load_cache.py
import logging
from typing import Iterable, Optional, Set

logger = logging.getLogger(__name__)


class WeekLoadCache:
    """
    Tygodnie zmaterializowane w bieżącej sesji.

    Cykl życia: jedna instancja na sesję użytkownika. Tydzień trafia do cache
    po udanym wczytaniu, wypada z niego po zapisie kaskady, który go dotknął,
    albo po odświeżeniu (np. dodano szablon). Zmiana liczby szablonów od
    ostatniego sprawdzenia czyści całość. Materializator jest idempotentny
    sam z siebie, więc cache to tylko optymalizacja.
    """

    def __init__(self):
        self._loaded: Set[str] = set()
        self._template_count: Optional[int] = None

    def needs_load(self, week_id: str, template_count: int) -> bool:
        if self._template_count is not None and template_count != self._template_count:
            logger.debug("Template count changed %s -> %s, clearing load cache",
                         self._template_count, template_count)
            self._loaded.clear()
        self._template_count = template_count
        return week_id not in self._loaded

    def mark_loaded(self, week_id: str, template_count: Optional[int] = None) -> None:
        self._loaded.add(week_id)
        if template_count is not None:
            self._template_count = template_count

    def invalidate(self, week_id: str) -> None:
        self._loaded.discard(week_id)

    def invalidate_many(self, week_ids: Iterable[str]) -> None:
        for week_id in week_ids:
            self.invalidate(week_id)

    def clear(self) -> None:
        self._loaded.clear()
        self._template_count = None

    def __contains__(self, week_id: str) -> bool:
        return week_id in self._loaded

    def __len__(self) -> int:
        return len(self._loaded)
