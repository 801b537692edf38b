"""
Seed dev data: one user, a few projects, and time entries spread over the current week.
Usage: python manage.py seed_time_entries [--email EMAIL] [--password PASSWORD]
"""
from datetime import datetime, time, timedelta
from decimal import Decimal

from django.core.management.base import BaseCommand
from django.contrib.auth import get_user_model
from django.utils import timezone

from projects.models import Project
from time_tracking.models import TimeEntry
from time_tracking.summary import week_window

User = get_user_model()

SAMPLE_PROJECTS = ('Website Redesign', 'Mobile App', 'Internal Tools')

# (day offset from week start, project index, hours, description)
SAMPLE_ENTRIES = (
    (0, 0, '2', 'Homepage wireframes'),
    (0, 1, '1.5', 'Push notification spike'),
    (1, 0, '3.5', 'Design review'),
    (2, 2, '1', 'CI cleanup'),
    (3, 1, '4', 'Offline sync screens'),
)


class Command(BaseCommand):
    help = 'Create a sample user, projects, and this week\'s time entries.'

    def add_arguments(self, parser):
        parser.add_argument('--email', default='demo@example.com', help='Email (and username) of the seed user.')
        parser.add_argument('--password', default='devpass', help='Password for the seed user.')

    def handle(self, *args, **options):
        email = options['email'].strip().lower()
        user, created = User.objects.get_or_create(username=email, defaults={'email': email})
        user.set_password(options['password'])
        user.save()
        self.stdout.write(f"{'Created' if created else 'Updated'} user {email}")

        projects = []
        for name in SAMPLE_PROJECTS:
            project, _ = Project.objects.get_or_create(name=name)
            projects.append(project)
        self.stdout.write(f'Projects: {", ".join(p.name for p in projects)}')

        # Replace this user's entries so the dashboard totals match the sample
        TimeEntry.objects.filter(user=user).delete()

        window = week_window(timezone.now())
        for offset, project_index, hours, description in SAMPLE_ENTRIES:
            day = window.start.date() + timedelta(days=offset)
            TimeEntry.objects.create(
                user=user,
                project=projects[project_index],
                description=description,
                hours=Decimal(hours),
                date=datetime.combine(day, time(hour=9)),
            )
        self.stdout.write(self.style.SUCCESS(f'Created {len(SAMPLE_ENTRIES)} time entries for {email}.'))
