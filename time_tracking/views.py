from urllib.parse import urlencode

from django.shortcuts import redirect, render
from django.contrib import messages
from django.contrib.auth.mixins import LoginRequiredMixin
from django.http import JsonResponse
from django.urls import reverse
from django.views import View

from core.identity import NotAuthenticated, RequestIdentity
from .dashboard import WeeklyDashboard
from .forms import TimeEntryForm


class DashboardMixin(LoginRequiredMixin):
    """Builds a WeeklyDashboard for the request. `gateway` can be set through as_view()."""
    gateway = None

    def get_dashboard(self):
        return WeeklyDashboard(RequestIdentity(self.request), gateway=self.gateway)

    def dispatch(self, request, *args, **kwargs):
        try:
            return super().dispatch(request, *args, **kwargs)
        except NotAuthenticated:
            return self.handle_no_permission()


class DashboardView(DashboardMixin, View):
    """Entry form, per-project totals and this week's entries for the signed-in user."""

    def get(self, request):
        dashboard = self.get_dashboard()
        dashboard.selected_project_id = request.GET.get('project', '')
        dashboard.load()
        form = TimeEntryForm(initial=dashboard.initial_form_data())
        return self.render_dashboard(dashboard, form)

    def post(self, request):
        dashboard = self.get_dashboard()
        form = TimeEntryForm(request.POST)
        if dashboard.submit(form):
            messages.success(request, 'Time entry added.')
            query = urlencode({'project': dashboard.selected_project_id})
            return redirect(f"{reverse('dashboard')}?{query}")
        dashboard.load()
        return self.render_dashboard(dashboard, form)

    def render_dashboard(self, dashboard, form):
        for error in dashboard.errors:
            messages.error(self.request, error)
        window = dashboard.window
        return render(self.request, 'time_tracking/dashboard.html', {
            'form': form,
            'projects': dashboard.projects,
            'entries': dashboard.time_entries,
            'project_totals': dashboard.project_totals,
            'total_hours': dashboard.total_hours,
            'week_start': window.start,
            'week_end': window.end,
        })


class DashboardSummaryView(DashboardMixin, View):
    """The dashboard state as JSON. Hours are strings so decimals stay exact."""

    def get(self, request):
        dashboard = self.get_dashboard().load()
        window = dashboard.window
        return JsonResponse({
            'window': {
                'start': window.start.isoformat(),
                'end': window.end.isoformat(),
            },
            'projects': [{'id': str(p.pk), 'name': p.name} for p in dashboard.projects],
            'time_entries': [
                {
                    'id': str(e.pk),
                    'project_id': str(e.project_id) if e.project_id else None,
                    'project_name': e.project_name,
                    'description': e.description,
                    'hours': str(e.hours),
                    'date': e.date.isoformat(),
                }
                for e in dashboard.time_entries
            ],
            'project_totals': {name: str(hours) for name, hours in dashboard.project_totals.items()},
            'total_hours': str(dashboard.total_hours),
            'errors': dashboard.errors,
        })
