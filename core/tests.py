from decimal import Decimal

from django.test import TestCase, SimpleTestCase, Client, RequestFactory
from django.urls import reverse
from django.contrib.auth import get_user_model
from django.contrib.auth.models import AnonymousUser

from core.identity import RequestIdentity
from core.templatetags.core_extras import hours

User = get_user_model()


class HoursFilterTest(SimpleTestCase):
    def test_strips_trailing_zeros(self):
        self.assertEqual(hours(Decimal('2.50')), '2.5')
        self.assertEqual(hours(Decimal('3.00')), '3')
        self.assertEqual(hours(Decimal('10')), '10')
        self.assertEqual(hours(Decimal('0.00')), '0')

    def test_floats_and_blanks(self):
        self.assertEqual(hours(1.5), '1.5')
        self.assertEqual(hours(None), '')
        self.assertEqual(hours('n/a'), 'n/a')


class RequestIdentityTest(TestCase):
    def setUp(self):
        self.factory = RequestFactory()
        self.user = User.objects.create_user(username='u@example.com', password='pass')

    def test_anonymous_has_no_user(self):
        request = self.factory.get('/')
        request.user = AnonymousUser()
        self.assertIsNone(RequestIdentity(request).current_user())

    def test_authenticated_user(self):
        request = self.factory.get('/')
        request.user = self.user
        self.assertEqual(RequestIdentity(request).current_user(), self.user)


class LoginViewTest(TestCase):
    def setUp(self):
        self.client = Client()
        self.user = User.objects.create_user(username='jane@example.com', email='jane@example.com', password='secret123')

    def test_renders_sign_in_form(self):
        r = self.client.get(reverse('login'))
        self.assertEqual(r.status_code, 200)
        self.assertContains(r, 'Email address')
        self.assertContains(r, 'Password')
        self.assertContains(r, '<button type="submit">Sign in</button>', html=True)
        self.assertContains(r, 'Sign up')

    def test_toggles_to_sign_up(self):
        r = self.client.get(reverse('login'), {'mode': 'signup'})
        self.assertContains(r, 'Create your account')
        self.assertContains(r, '<button type="submit">Sign up</button>', html=True)
        self.assertContains(r, 'Already have an account? Sign in')

    def test_sign_in(self):
        r = self.client.post(reverse('login'), {'email': 'Jane@Example.com', 'password': 'secret123'})
        self.assertRedirects(r, reverse('dashboard'))
        self.assertEqual(int(self.client.session['_auth_user_id']), self.user.pk)

    def test_sign_in_wrong_password(self):
        r = self.client.post(reverse('login'), {'email': 'jane@example.com', 'password': 'nope'})
        self.assertEqual(r.status_code, 200)
        self.assertContains(r, 'Invalid email or password.')
        self.assertNotIn('_auth_user_id', self.client.session)

    def test_sign_in_respects_next(self):
        r = self.client.post(
            reverse('login'),
            {'email': 'jane@example.com', 'password': 'secret123', 'next': reverse('dashboard_summary')},
        )
        self.assertRedirects(r, reverse('dashboard_summary'))

    def test_sign_in_ignores_external_next(self):
        r = self.client.post(
            reverse('login'),
            {'email': 'jane@example.com', 'password': 'secret123', 'next': 'https://evil.example.com/'},
        )
        self.assertRedirects(r, reverse('dashboard'))

    def test_sign_up_creates_account(self):
        r = self.client.post(reverse('login'), {'mode': 'signup', 'email': 'new@example.com', 'password': 'secret123'})
        self.assertRedirects(r, reverse('dashboard'))
        user = User.objects.get(username='new@example.com')
        self.assertEqual(user.email, 'new@example.com')
        self.assertEqual(int(self.client.session['_auth_user_id']), user.pk)

    def test_sign_up_duplicate_email(self):
        r = self.client.post(reverse('login'), {'mode': 'signup', 'email': 'jane@example.com', 'password': 'secret123'})
        self.assertEqual(r.status_code, 200)
        self.assertIn('email', r.context['form'].errors)

    def test_signed_in_user_redirected_to_dashboard(self):
        self.client.login(username='jane@example.com', password='secret123')
        r = self.client.get(reverse('login'))
        self.assertRedirects(r, reverse('dashboard'))


class LogoutViewTest(TestCase):
    def setUp(self):
        self.client = Client()
        User.objects.create_user(username='jane@example.com', password='secret123')

    def test_sign_out_ends_session(self):
        self.client.login(username='jane@example.com', password='secret123')
        r = self.client.post(reverse('logout'))
        self.assertRedirects(r, reverse('login'))
        self.assertNotIn('_auth_user_id', self.client.session)
        r = self.client.get(reverse('dashboard_summary'))
        self.assertEqual(r.status_code, 302)
        self.assertIn(reverse('login'), r.url)

    def test_get_not_allowed(self):
        self.client.login(username='jane@example.com', password='secret123')
        r = self.client.get(reverse('logout'))
        self.assertEqual(r.status_code, 405)
