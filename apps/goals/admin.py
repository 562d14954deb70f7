from django.contrib import admin
from .models import Milestone, GoalTemplate, WeekDocument

admin.site.register(Milestone)


@admin.register(GoalTemplate)
class GoalTemplateAdmin(admin.ModelAdmin):
    list_display = ('title', 'user', 'recurrence', 'duration_type', 'duration_weeks', 'start_date', 'active')
    list_filter = ('recurrence', 'duration_type', 'active')
    search_fields = ('title', 'dream_title')


@admin.register(WeekDocument)
class WeekDocumentAdmin(admin.ModelAdmin):
    list_display = ('user', 'year', 'goal_count', 'updated_at')
    list_filter = ('year',)
    readonly_fields = ('updated_at',)  # Dokument zmienia tylko silnik celów
