"""
State behind the weekly dashboard: projects, this week's entries, per-project
totals and the pending entry form.

A WeeklyDashboard is built per request with its collaborators passed in, so
tests can swap the gateway or the clock.
"""
import logging
from decimal import Decimal

from django.utils import timezone

from core.identity import NotAuthenticated
from .gateway import GatewayError, TimeEntryGateway
from .summary import project_totals, total_hours, week_window

logger = logging.getLogger(__name__)

DEFAULT_HOURS = Decimal('1')


class WeeklyDashboard:
    def __init__(self, identity, gateway=None, clock=None):
        self.identity = identity
        self.gateway = gateway if gateway is not None else TimeEntryGateway()
        self.clock = clock or timezone.now
        self.projects = []
        self.time_entries = []
        self.project_totals = {}
        self.errors = []
        self.selected_project_id = ''
        self.description = ''
        self.hours = DEFAULT_HOURS

    @property
    def window(self):
        return week_window(self.clock())

    @property
    def total_hours(self):
        return total_hours(self.project_totals)

    def _require_user(self):
        user = self.identity.current_user()
        if user is None:
            raise NotAuthenticated('Sign in to view time entries.')
        return user

    def load(self):
        """Fetch projects and this week's entries. Each failure only affects its own slot."""
        user = self._require_user()
        self.refresh_projects()
        self.refresh_time_entries(user)
        return self

    def refresh_projects(self):
        try:
            projects = self.gateway.list_projects()
        except GatewayError:
            logger.warning('Project fetch failed; keeping %d cached', len(self.projects), exc_info=True)
            self.errors.append('Projects could not be loaded.')
            return
        self.projects = projects

    def refresh_time_entries(self, user=None):
        if user is None:
            user = self._require_user()
        window = self.window
        try:
            entries = self.gateway.list_time_entries(user.pk, window)
        except GatewayError:
            logger.warning('Time entry fetch failed for user %s', user.pk, exc_info=True)
            self.errors.append('Time entries could not be loaded.')
            return
        self.time_entries = entries
        self.project_totals = project_totals(entries)

    def submit(self, form):
        """
        Save a new entry from a TimeEntryForm for the current user.

        Returns True when the entry was written. An invalid form never reaches
        the gateway; a failed write keeps the submitted values.
        """
        user = self._require_user()
        if not form.is_valid():
            return False
        data = form.cleaned_data
        project = data['project']
        self.selected_project_id = str(project.pk)
        self.description = data['description']
        self.hours = data['hours']
        try:
            self.gateway.insert_time_entry(
                user.pk, project.pk, data['description'], data['hours'], self.clock(),
            )
        except GatewayError:
            logger.warning('Time entry insert failed for user %s', user.pk, exc_info=True)
            self.errors.append('The time entry could not be saved. Please try again.')
            return False
        self.description = ''
        self.hours = DEFAULT_HOURS
        self.refresh_time_entries(user)
        return True

    def sign_out(self):
        self.identity.sign_out()

    def initial_form_data(self):
        return {
            'project': self.selected_project_id,
            'description': self.description,
            'hours': self.hours,
        }
