# apps/goals/models.py
from django.db import models
from django.conf import settings
from django.utils import timezone


class Milestone(models.Model):
    """Kamień milowy marzenia (tylko to, czego potrzebuje ewaluator szablonów)."""
    id = models.CharField(primary_key=True, max_length=64)
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='milestones')
    title = models.CharField(max_length=200)
    dream_id = models.CharField(max_length=64, blank=True)

    completed = models.BooleanField(default=False)
    completed_at = models.DateTimeField(null=True, blank=True)

    def __str__(self):
        return self.title


class GoalTemplate(models.Model):
    id = models.CharField(primary_key=True, max_length=64)
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='goal_templates')
    title = models.CharField(max_length=200)
    description = models.TextField(blank=True)

    # Powiązanie z marzeniem (dane zdenormalizowane, marzenia są poza tą aplikacją)
    dream_id = models.CharField(max_length=64, blank=True, null=True)
    dream_title = models.CharField(max_length=200, blank=True)
    dream_category = models.CharField(max_length=100, blank=True)
    milestone = models.ForeignKey(
        Milestone,
        null=True, blank=True,
        on_delete=models.SET_NULL,
        related_name='templates'
    )

    class RecurrenceChoices(models.TextChoices):
        WEEKLY = 'weekly', 'Co tydzień'
        MONTHLY = 'monthly', 'Co miesiąc'

    recurrence = models.CharField(
        max_length=20,
        choices=RecurrenceChoices.choices,
        default=RecurrenceChoices.WEEKLY
    )

    class DurationChoices(models.TextChoices):
        UNLIMITED = 'unlimited', 'Bez końca'
        WEEKS = 'weeks', 'Przez X tygodni'
        MILESTONE = 'milestone', 'Do ukończenia kamienia milowego'

    duration_type = models.CharField(
        max_length=20,
        choices=DurationChoices.choices,
        default=DurationChoices.UNLIMITED
    )
    duration_weeks = models.PositiveIntegerField(null=True, blank=True, help_text="Wymagane dla 'Przez X tygodni'")

    target_weeks = models.PositiveIntegerField(null=True, blank=True)
    target_months = models.PositiveIntegerField(null=True, blank=True)

    start_date = models.DateField(null=True, blank=True)
    active = models.BooleanField(default=True)

    created_at = models.DateTimeField(default=timezone.now)

    class Meta:
        ordering = ['created_at']

    def __str__(self):
        return f"Template: {self.title} ({self.get_recurrence_display()})"


class WeekDocument(models.Model):
    """
    Jeden dokument na (user, rok ISO).
    weeks = {"2025-W44": {"goals": [...]}, ...}
    """
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='week_documents')
    year = models.PositiveIntegerField()
    weeks = models.JSONField(default=dict, blank=True)

    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        unique_together = ('user', 'year')  # Jeden dokument na rok

    def __str__(self):
        return f"Weeks {self.year} of {self.user}"

    @property
    def goal_count(self):
        return sum(len(week.get('goals', [])) for week in self.weeks.values())
