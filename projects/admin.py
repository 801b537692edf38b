from django.contrib import admin
from django.db.models import Count
from .models import Project


@admin.register(Project)
class ProjectAdmin(admin.ModelAdmin):
    list_display = ('name', 'entry_count', 'id')
    search_fields = ('name',)

    def get_queryset(self, request):
        return super().get_queryset(request).annotate(_entry_count=Count('time_entries'))

    @admin.display(description='Entries', ordering='_entry_count')
    def entry_count(self, obj):
        return obj._entry_count
