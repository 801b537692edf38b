from datetime import date, datetime, timedelta
from decimal import Decimal
from io import StringIO
from types import SimpleNamespace
from unittest import mock

from django.core.exceptions import ValidationError
from django.core.management import call_command
from django.test import TestCase, SimpleTestCase, Client, RequestFactory, override_settings
from django.urls import reverse
from django.contrib.auth import get_user_model
from django.utils import timezone

from core.identity import NotAuthenticated
from projects.models import Project
from time_tracking.dashboard import DEFAULT_HOURS, WeeklyDashboard
from time_tracking.forms import TimeEntryForm
from time_tracking.gateway import GatewayError, TimeEntryGateway
from time_tracking.models import TimeEntry, UNKNOWN_PROJECT
from time_tracking.summary import WeekWindow, project_totals, total_hours, week_window
from time_tracking.views import DashboardView

User = get_user_model()

# Wednesday
NOW = datetime(2025, 2, 12, 10, 30)


def entry(project_name, hours, when=NOW):
    project = SimpleNamespace(name=project_name) if project_name is not None else None
    return SimpleNamespace(project=project, hours=hours, date=when)


class WeekWindowTest(SimpleTestCase):
    def test_monday_start_by_default(self):
        window = week_window(NOW)
        self.assertEqual(window.start, datetime(2025, 2, 10, 0, 0, 0))
        self.assertEqual(window.end, datetime(2025, 2, 16, 23, 59, 59, 999999))

    def test_now_on_first_and_last_day(self):
        self.assertEqual(week_window(datetime(2025, 2, 10, 0, 0)).start, datetime(2025, 2, 10))
        self.assertEqual(week_window(datetime(2025, 2, 16, 23, 59)).start, datetime(2025, 2, 10))

    def test_sunday_first_week(self):
        window = week_window(NOW, first_weekday=6)
        self.assertEqual(window.start, datetime(2025, 2, 9))
        self.assertEqual(window.end.date(), date(2025, 2, 15))

    @override_settings(TIME_TRACKING_WEEK_STARTS_ON=6)
    def test_first_weekday_from_settings(self):
        self.assertEqual(week_window(NOW).start, datetime(2025, 2, 9))

    @override_settings(TIME_TRACKING_WEEK_STARTS_ON=7)
    def test_invalid_setting_rejected(self):
        with self.assertRaises(ValueError):
            week_window(NOW)

    def test_accepts_plain_date(self):
        self.assertEqual(week_window(date(2025, 2, 12)).start, datetime(2025, 2, 10))

    def test_bounds_are_inclusive(self):
        window = week_window(NOW)
        self.assertTrue(window.contains(window.start))
        self.assertTrue(window.contains(window.end))
        self.assertFalse(window.contains(window.start - timedelta(seconds=1)))
        self.assertFalse(window.contains(window.end + timedelta(seconds=1)))


class ProjectTotalsTest(SimpleTestCase):
    def test_sums_per_project(self):
        totals = project_totals([entry('A', 2), entry('B', 1.5), entry('A', 0.5)])
        self.assertEqual(totals, {'A': Decimal('2.5'), 'B': Decimal('1.5')})

    def test_first_seen_order(self):
        totals = project_totals([entry('B', 1), entry('A', 1), entry('B', 1)])
        self.assertEqual(list(totals), ['B', 'A'])

    def test_order_does_not_change_sums(self):
        entries = [entry('A', 0.5), entry('B', 3), entry('A', 1.5), entry('C', 2), entry('B', 0.5)]
        self.assertEqual(dict(project_totals(entries)), dict(project_totals(reversed(entries))))

    def test_no_float_artifacts(self):
        totals = project_totals([entry('A', 0.1), entry('A', 1.1)])
        self.assertEqual(str(totals['A']), '1.2')

    def test_empty_list(self):
        self.assertEqual(project_totals([]), {})
        self.assertEqual(total_hours({}), Decimal('0'))

    def test_entries_without_project_are_skipped(self):
        totals = project_totals([entry('A', 1), entry(None, 4)])
        self.assertEqual(totals, {'A': Decimal('1')})

    def test_total_hours(self):
        self.assertEqual(total_hours({'A': Decimal('2.5'), 'B': Decimal('1.5')}), Decimal('4'))


class TimeEntryModelTest(TestCase):
    def setUp(self):
        self.user = User.objects.create_user(username='u@example.com', password='p')
        self.project = Project.objects.create(name='P')

    def test_create_time_entry(self):
        e = TimeEntry.objects.create(
            user=self.user,
            project=self.project,
            hours=Decimal('2.5'),
            description='Work',
            date=NOW,
        )
        self.assertIn('P', str(e))
        self.assertEqual(e.project_name, 'P')

    def test_hours_must_be_positive(self):
        e = TimeEntry(user=self.user, project=self.project, hours=Decimal('0'), description='x', date=NOW)
        with self.assertRaises(ValidationError):
            e.full_clean()

    def test_deleting_project_keeps_entry(self):
        e = TimeEntry.objects.create(
            user=self.user, project=self.project, hours=Decimal('1'), description='x', date=NOW
        )
        self.project.delete()
        e.refresh_from_db()
        self.assertIsNone(e.project)
        self.assertEqual(e.project_name, UNKNOWN_PROJECT)


class TimeEntryFormTest(TestCase):
    def setUp(self):
        self.project = Project.objects.create(name='P')

    def test_valid(self):
        form = TimeEntryForm(data={'project': self.project.pk, 'hours': '1.5', 'description': 'Work'})
        self.assertTrue(form.is_valid(), form.errors)

    def test_project_required(self):
        form = TimeEntryForm(data={'project': '', 'hours': '1', 'description': 'Work'})
        self.assertFalse(form.is_valid())
        self.assertIn('project', form.errors)

    def test_hours_below_half_rejected(self):
        form = TimeEntryForm(data={'project': self.project.pk, 'hours': '0.25', 'description': 'Work'})
        self.assertFalse(form.is_valid())
        self.assertIn('hours', form.errors)

    def test_blank_description_rejected(self):
        form = TimeEntryForm(data={'project': self.project.pk, 'hours': '1', 'description': '   '})
        self.assertFalse(form.is_valid())
        self.assertIn('description', form.errors)


class TimeEntryGatewayTest(TestCase):
    def setUp(self):
        self.gateway = TimeEntryGateway()
        self.user = User.objects.create_user(username='u@example.com', password='p')
        self.other = User.objects.create_user(username='o@example.com', password='p')
        self.project = Project.objects.create(name='P')
        self.window = week_window(NOW)

    def _create(self, when, user=None, hours='1'):
        return TimeEntry.objects.create(
            user=user or self.user, project=self.project, hours=Decimal(hours), description='d', date=when
        )

    def test_list_projects(self):
        Project.objects.create(name='A')
        self.assertEqual([p.name for p in self.gateway.list_projects()], ['A', 'P'])

    def test_window_is_inclusive(self):
        at_start = self._create(self.window.start)
        at_end = self._create(self.window.end)
        self._create(self.window.start - timedelta(seconds=1))
        self._create(self.window.end + timedelta(seconds=1))
        entries = self.gateway.list_time_entries(self.user.pk, self.window)
        self.assertEqual({e.pk for e in entries}, {at_start.pk, at_end.pk})

    def test_only_own_entries_newest_first(self):
        older = self._create(NOW - timedelta(days=1))
        newer = self._create(NOW)
        self._create(NOW, user=self.other)
        entries = self.gateway.list_time_entries(self.user.pk, self.window)
        self.assertEqual([e.pk for e in entries], [newer.pk, older.pk])
        self.assertEqual(entries[0].project.name, 'P')

    def test_insert(self):
        e = self.gateway.insert_time_entry(self.user.pk, self.project.pk, 'Done', Decimal('2'), NOW)
        self.assertTrue(TimeEntry.objects.filter(pk=e.pk, hours=Decimal('2')).exists())

    def test_insert_rejects_non_positive_hours(self):
        with self.assertRaises(GatewayError):
            self.gateway.insert_time_entry(self.user.pk, self.project.pk, 'Done', Decimal('0'), NOW)
        self.assertFalse(TimeEntry.objects.exists())


class FakeIdentity:
    def __init__(self, user):
        self.user = user

    def current_user(self):
        return self.user

    def sign_out(self):
        self.user = None


class FakeGateway:
    """In-memory gateway recording every call."""

    def __init__(self, projects=(), entries=()):
        self.projects = list(projects)
        self.entries = list(entries)
        self.calls = []
        self.fail_reads = False
        self.fail_insert = False

    def list_projects(self):
        self.calls.append('list_projects')
        if self.fail_reads:
            raise GatewayError('projects unavailable')
        return list(self.projects)

    def list_time_entries(self, user_id, window):
        self.calls.append('list_time_entries')
        if self.fail_reads:
            raise GatewayError('entries unavailable')
        return [e for e in self.entries if window.contains(e.date)]

    def insert_time_entry(self, user_id, project_id, description, hours, date):
        self.calls.append('insert_time_entry')
        if self.fail_insert:
            raise GatewayError('insert failed')
        project = next(p for p in self.projects if p.pk == project_id)
        new = SimpleNamespace(project=project, hours=hours, date=date, description=description)
        self.entries.append(new)
        return new


class WeeklyDashboardTest(TestCase):
    def setUp(self):
        self.user = SimpleNamespace(pk=1)
        self.identity = FakeIdentity(self.user)
        self.project_a = Project.objects.create(name='A')
        self.project_b = Project.objects.create(name='B')
        self.gateway = FakeGateway(
            projects=[self.project_a, self.project_b],
            entries=[
                SimpleNamespace(project=self.project_a, hours=Decimal('2'), date=NOW),
                SimpleNamespace(project=self.project_b, hours=Decimal('1.5'), date=NOW),
                SimpleNamespace(project=self.project_a, hours=Decimal('0.5'), date=NOW),
                SimpleNamespace(project=self.project_b, hours=Decimal('8'), date=NOW - timedelta(days=7)),
            ],
        )
        self.dashboard = WeeklyDashboard(self.identity, gateway=self.gateway, clock=lambda: NOW)

    def _form(self, **overrides):
        data = {'project': self.project_a.pk, 'hours': '3', 'description': 'Feature work'}
        data.update(overrides)
        return TimeEntryForm(data=data)

    def test_defaults(self):
        self.assertEqual(self.dashboard.initial_form_data(), {'project': '', 'description': '', 'hours': DEFAULT_HOURS})
        self.assertEqual(self.dashboard.window, WeekWindow(datetime(2025, 2, 10), datetime(2025, 2, 16, 23, 59, 59, 999999)))

    def test_load_computes_week_totals(self):
        self.dashboard.load()
        self.assertEqual(len(self.dashboard.projects), 2)
        self.assertEqual(len(self.dashboard.time_entries), 3)
        self.assertEqual(self.dashboard.project_totals, {'A': Decimal('2.5'), 'B': Decimal('1.5')})
        self.assertEqual(self.dashboard.total_hours, Decimal('4'))
        self.assertEqual(self.dashboard.errors, [])

    def test_project_without_entries_is_absent(self):
        Project.objects.create(name='Idle')
        self.dashboard.load()
        self.assertNotIn('Idle', self.dashboard.project_totals)

    def test_load_without_user_makes_no_fetch(self):
        self.identity.user = None
        with self.assertRaises(NotAuthenticated):
            self.dashboard.load()
        self.assertEqual(self.gateway.calls, [])

    def test_failed_fetch_keeps_previous_state(self):
        self.dashboard.load()
        self.gateway.fail_reads = True
        with self.assertLogs('time_tracking.dashboard', level='WARNING'):
            self.dashboard.load()
        self.assertEqual(len(self.dashboard.projects), 2)
        self.assertEqual(len(self.dashboard.time_entries), 3)
        self.assertEqual(self.dashboard.project_totals, {'A': Decimal('2.5'), 'B': Decimal('1.5')})
        self.assertEqual(len(self.dashboard.errors), 2)

    def test_submit_adds_to_project_total(self):
        self.dashboard.load()
        self.assertTrue(self.dashboard.submit(self._form()))
        self.assertEqual(self.dashboard.project_totals['A'], Decimal('5.5'))

    def test_submit_resets_description_and_hours_only(self):
        self.dashboard.submit(self._form(hours='2.5'))
        self.assertEqual(self.dashboard.description, '')
        self.assertEqual(self.dashboard.hours, DEFAULT_HOURS)
        self.assertEqual(self.dashboard.selected_project_id, str(self.project_a.pk))

    def test_submit_without_project_writes_nothing(self):
        self.assertFalse(self.dashboard.submit(self._form(project='')))
        self.assertNotIn('insert_time_entry', self.gateway.calls)

    def test_failed_insert_keeps_input(self):
        self.gateway.fail_insert = True
        with self.assertLogs('time_tracking.dashboard', level='WARNING'):
            ok = self.dashboard.submit(self._form(hours='2.5', description='Keep me'))
        self.assertFalse(ok)
        self.assertEqual(self.dashboard.description, 'Keep me')
        self.assertEqual(self.dashboard.hours, Decimal('2.5'))
        self.assertEqual(len(self.dashboard.errors), 1)

    def test_sign_out_blocks_further_fetches(self):
        self.dashboard.load()
        calls = len(self.gateway.calls)
        self.dashboard.sign_out()
        with self.assertRaises(NotAuthenticated):
            self.dashboard.load()
        self.assertEqual(len(self.gateway.calls), calls)


class FailingGateway(TimeEntryGateway):
    def list_projects(self):
        raise GatewayError('projects unavailable')

    def list_time_entries(self, user_id, window):
        raise GatewayError('entries unavailable')

    def insert_time_entry(self, *args, **kwargs):
        raise GatewayError('insert failed')


class DashboardViewsTest(TestCase):
    def setUp(self):
        self.client = Client()
        self.factory = RequestFactory()
        self.user = User.objects.create_user(username='u@example.com', password='pass')
        self.other = User.objects.create_user(username='o@example.com', password='pass')
        self.project = Project.objects.create(name='Website')
        self.other_project = Project.objects.create(name='Mobile')
        now = timezone.now()
        TimeEntry.objects.create(user=self.user, project=self.project, hours=Decimal('2'), description='Mockups', date=now)
        TimeEntry.objects.create(user=self.user, project=self.project, hours=Decimal('0.5'), description='Standup', date=now)
        TimeEntry.objects.create(
            user=self.user, project=self.other_project, hours=Decimal('5'), description='Last week task', date=now - timedelta(days=8)
        )
        TimeEntry.objects.create(user=self.other, project=self.other_project, hours=Decimal('7'), description='Not mine', date=now)

    def test_requires_login(self):
        r = self.client.get(reverse('dashboard'))
        self.assertEqual(r.status_code, 302)
        self.assertIn(reverse('login'), r.url)

    def test_dashboard_ok(self):
        request = self.factory.get(reverse('dashboard'))
        request.user = self.user
        r = DashboardView.as_view()(request)
        self.assertEqual(r.status_code, 200)

    def test_dashboard_shows_week_totals(self):
        self.client.login(username='u@example.com', password='pass')
        r = self.client.get(reverse('dashboard'))
        self.assertEqual(r.status_code, 200)
        self.assertEqual(r.context['project_totals'], {'Website': Decimal('2.5')})
        self.assertEqual(len(r.context['entries']), 2)
        self.assertContains(r, '2.5 hours')
        self.assertNotContains(r, 'Not mine')
        self.assertNotContains(r, 'Last week task')
        self.assertEqual(r.context['form'].initial['hours'], DEFAULT_HOURS)

    def test_add_time_entry(self):
        self.client.login(username='u@example.com', password='pass')
        r = self.client.post(reverse('dashboard'), {
            'project': self.other_project.pk,
            'hours': '3',
            'description': 'Done stuff',
        })
        self.assertEqual(r.status_code, 302)
        self.assertIn(f'project={self.other_project.pk}', r.url)
        self.assertTrue(TimeEntry.objects.filter(user=self.user, hours=Decimal('3'), description='Done stuff').exists())

        r = self.client.get(r.url)
        self.assertEqual(r.context['project_totals']['Mobile'], Decimal('3'))
        form = r.context['form']
        self.assertEqual(str(form.initial['project']), str(self.other_project.pk))
        self.assertEqual(form.initial['description'], '')
        self.assertEqual(form.initial['hours'], DEFAULT_HOURS)
        self.assertContains(r, 'Time entry added.')

    def test_missing_project_rejected(self):
        self.client.login(username='u@example.com', password='pass')
        before = TimeEntry.objects.count()
        r = self.client.post(reverse('dashboard'), {'project': '', 'hours': '1', 'description': 'x'})
        self.assertEqual(r.status_code, 200)
        self.assertIn('project', r.context['form'].errors)
        self.assertEqual(TimeEntry.objects.count(), before)

    def test_deleted_project_listed_as_unknown(self):
        self.project.delete()
        self.client.login(username='u@example.com', password='pass')
        r = self.client.get(reverse('dashboard'))
        self.assertContains(r, UNKNOWN_PROJECT)
        self.assertEqual(r.context['project_totals'], {})

    def test_fetch_failure_is_not_fatal(self):
        self.client.login(username='u@example.com', password='pass')
        with mock.patch.object(DashboardView, 'gateway', FailingGateway()):
            with self.assertLogs('time_tracking.dashboard', level='WARNING'):
                r = self.client.get(reverse('dashboard'))
        self.assertEqual(r.status_code, 200)
        self.assertEqual(r.context['entries'], [])
        self.assertContains(r, 'Time entries could not be loaded.')

    def test_insert_failure_keeps_form_input(self):
        self.client.login(username='u@example.com', password='pass')
        before = TimeEntry.objects.count()
        with mock.patch.object(DashboardView, 'gateway', FailingGateway()):
            with self.assertLogs('time_tracking.dashboard', level='WARNING'):
                r = self.client.post(reverse('dashboard'), {
                    'project': self.project.pk, 'hours': '2.5', 'description': 'Keep me',
                })
        self.assertEqual(r.status_code, 200)
        self.assertEqual(r.context['form'].data['description'], 'Keep me')
        self.assertContains(r, 'could not be saved')
        self.assertEqual(TimeEntry.objects.count(), before)


class DashboardSummaryViewTest(TestCase):
    def setUp(self):
        self.client = Client()
        self.user = User.objects.create_user(username='u@example.com', password='pass')
        a = Project.objects.create(name='A')
        b = Project.objects.create(name='B')
        now = timezone.now()
        for project, hours in ((a, '2'), (b, '1.5'), (a, '0.5')):
            TimeEntry.objects.create(user=self.user, project=project, hours=Decimal(hours), description='d', date=now)

    def test_requires_login(self):
        r = self.client.get(reverse('dashboard_summary'))
        self.assertEqual(r.status_code, 302)

    def test_summary_json(self):
        self.client.login(username='u@example.com', password='pass')
        r = self.client.get(reverse('dashboard_summary'))
        self.assertEqual(r.status_code, 200)
        data = r.json()
        self.assertEqual({k: Decimal(v) for k, v in data['project_totals'].items()}, {'A': Decimal('2.5'), 'B': Decimal('1.5')})
        self.assertEqual(Decimal(data['total_hours']), Decimal('4'))
        self.assertEqual(len(data['time_entries']), 3)
        self.assertEqual([p['name'] for p in data['projects']], ['A', 'B'])
        self.assertIn('start', data['window'])


class SeedTimeEntriesCommandTest(TestCase):
    def test_seed_creates_week_of_entries(self):
        out = StringIO()
        call_command('seed_time_entries', '--email', 'Demo@Example.com', stdout=out)
        user = User.objects.get(username='demo@example.com')
        self.assertTrue(user.check_password('devpass'))
        self.assertEqual(Project.objects.count(), 3)
        window = week_window(timezone.now())
        entries = TimeEntryGateway().list_time_entries(user.pk, window)
        self.assertEqual(len(entries), 5)
        self.assertEqual(project_totals(entries)['Website Redesign'], Decimal('5.5'))
        self.assertIn('Created 5 time entries', out.getvalue())

    def test_seed_is_repeatable(self):
        call_command('seed_time_entries', stdout=StringIO())
        call_command('seed_time_entries', stdout=StringIO())
        self.assertEqual(TimeEntry.objects.count(), 5)
        self.assertEqual(Project.objects.count(), 3)
