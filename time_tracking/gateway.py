"""Data access for projects and time entries, backed by the Django ORM."""
import logging

from django.core.exceptions import ValidationError
from django.db import DatabaseError

from projects.models import Project
from .models import TimeEntry

logger = logging.getLogger(__name__)


class GatewayError(Exception):
    """A read or write against the data store failed."""


class TimeEntryGateway:
    """
    Query contract the dashboard depends on: list projects, list one user's
    entries inside a window (newest first, project joined), insert an entry.
    """

    def list_projects(self):
        try:
            return list(Project.objects.all())
        except DatabaseError as exc:
            raise GatewayError('Could not load projects.') from exc

    def list_time_entries(self, user_id, window):
        qs = TimeEntry.objects.filter(
            user_id=user_id,
            date__gte=window.start,
            date__lte=window.end,
        ).select_related('project').order_by('-date')
        try:
            return list(qs)
        except DatabaseError as exc:
            raise GatewayError('Could not load time entries.') from exc

    def insert_time_entry(self, user_id, project_id, description, hours, date):
        entry = TimeEntry(
            user_id=user_id,
            project_id=project_id,
            description=description,
            hours=hours,
            date=date,
        )
        try:
            entry.full_clean()
            entry.save()
        except ValidationError as exc:
            raise GatewayError(f'Time entry rejected: {exc.messages}') from exc
        except DatabaseError as exc:
            raise GatewayError('Could not save time entry.') from exc
        logger.info('Inserted time entry %s (%s h) for user %s', entry.pk, entry.hours, user_id)
        return entry
