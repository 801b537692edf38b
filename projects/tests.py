from decimal import Decimal

from django.test import TestCase, Client
from django.urls import reverse
from django.contrib.auth import get_user_model

from projects.models import Project
from time_tracking.models import TimeEntry

User = get_user_model()


class ProjectModelTest(TestCase):
    def test_create_project(self):
        p = Project.objects.create(name='Test Project')
        self.assertEqual(str(p), 'Test Project')
        self.assertEqual(len(str(p.pk)), 36)

    def test_ordered_by_name(self):
        Project.objects.create(name='Zeta')
        Project.objects.create(name='Alpha')
        self.assertEqual(list(Project.objects.values_list('name', flat=True)), ['Alpha', 'Zeta'])


class ProjectAdminTest(TestCase):
    def setUp(self):
        self.client = Client()
        self.admin = User.objects.create_superuser(username='admin', email='admin@example.com', password='pass')
        self.project = Project.objects.create(name='Website')
        TimeEntry.objects.create(
            user=self.admin, project=self.project, hours=Decimal('1'), description='d'
        )

    def test_changelist_shows_entry_count(self):
        self.client.login(username='admin', password='pass')
        r = self.client.get(reverse('admin:projects_project_changelist'))
        self.assertEqual(r.status_code, 200)
        self.assertContains(r, 'Website')

    def test_time_entry_changelist(self):
        self.client.login(username='admin', password='pass')
        r = self.client.get(reverse('admin:time_tracking_timeentry_changelist'))
        self.assertEqual(r.status_code, 200)
        self.assertContains(r, 'Website')
