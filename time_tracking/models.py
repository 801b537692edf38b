import uuid

from django.db import models
from django.conf import settings
from django.core.exceptions import ValidationError
from django.utils import timezone

UNKNOWN_PROJECT = 'Unknown project'


class TimeEntry(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='time_entries',
    )
    # Entries outlive their project; a deleted project leaves project NULL.
    project = models.ForeignKey(
        'projects.Project',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='time_entries',
    )
    description = models.TextField()
    hours = models.DecimalField(max_digits=6, decimal_places=2)
    date = models.DateTimeField(default=timezone.now)

    class Meta:
        db_table = 'time_tracking_timeentry'
        ordering = ['-date']
        verbose_name_plural = 'Time entries'

    def __str__(self):
        return f"{self.user.get_username()} - {self.project_name} - {self.date:%Y-%m-%d}: {self.hours}h"

    @property
    def project_name(self):
        """Name of the joined project, or a placeholder when it has been deleted."""
        if self.project is None:
            return UNKNOWN_PROJECT
        return self.project.name

    def clean(self):
        super().clean()
        if self.hours is not None and self.hours <= 0:
            raise ValidationError({'hours': 'Hours must be greater than zero.'})
