from django.contrib import admin
from .models import TimeEntry


@admin.register(TimeEntry)
class TimeEntryAdmin(admin.ModelAdmin):
    list_display = ('date', 'user', 'project_label', 'hours', 'summary')
    list_select_related = ('user', 'project')
    list_filter = ('user', 'project')
    date_hierarchy = 'date'
    search_fields = ('description', 'project__name')

    @admin.display(description='Project', ordering='project__name')
    def project_label(self, obj):
        return obj.project_name

    @admin.display(description='Description')
    def summary(self, obj):
        text = obj.description or ''
        return text if len(text) <= 60 else text[:60] + '...'
