from django.contrib.auth import get_user_model
from django.test import SimpleTestCase, override_settings
from rest_framework.test import APITestCase, APIClient

from reports.exceptions import BackendError
from .access import AccessGate
from .session import Identity, notify_session_change, on_session_change

User = get_user_model()


class StubProfiles:
    def __init__(self, profiles=None, error=None):
        self.profiles = profiles or {}
        self.error = error
        self.lookups = []

    def get_profile(self, user_id):
        self.lookups.append(user_id)
        if self.error:
            raise self.error
        return self.profiles.get(user_id)


class AccessGateTest(SimpleTestCase):
    def test_no_identity_is_unknown(self):
        self.assertIsNone(AccessGate(StubProfiles()).check(None))

    def test_allowlist_wins_over_profile(self):
        backend = StubProfiles({1: {'is_admin': False}})
        gate = AccessGate(backend, ['Boss@Example.com'])
        self.assertTrue(gate.check(Identity(1, 'boss@example.com')))
        self.assertEqual(backend.lookups, [])

    def test_falls_back_to_profile(self):
        gate = AccessGate(StubProfiles({1: {'is_admin': True}, 2: {'is_admin': False}}), ['boss@example.com'])
        self.assertTrue(gate.check(Identity(1, 'a@example.com')))
        self.assertFalse(gate.check(Identity(2, 'b@example.com')))

    def test_missing_profile_is_not_admin(self):
        self.assertFalse(AccessGate(StubProfiles()).check(Identity(3, 'c@example.com')))

    def test_backend_failure_is_not_admin(self):
        gate = AccessGate(StubProfiles(error=BackendError('down')))
        self.assertFalse(gate.check(Identity(1, 'a@example.com')))


class SessionEventsTest(SimpleTestCase):
    def test_subscribe_and_unsubscribe(self):
        seen = []
        unsubscribe = on_session_change(lambda identity, event: seen.append((identity, event)))
        identity = Identity(1, 'a@example.com')

        notify_session_change(identity, 'login')
        unsubscribe()
        notify_session_change(None, 'logout')

        self.assertEqual(seen, [(identity, 'login')])


class AuthAPITest(APITestCase):
    def setUp(self):
        self.client = APIClient()
        self.user = User.objects.create_user(
            username="test@example.com",
            email="test@example.com",
            password="Secret#123",
        )

    def login(self):
        res = self.client.post('/auth/login/', {
            'email': 'test@example.com',
            'password': 'Secret#123'
        })
        self.assertEqual(res.status_code, 200)
        return res.data

    def test_login_announces_session(self):
        events = []
        unsubscribe = on_session_change(lambda identity, event: events.append((identity.email, event)))
        try:
            tokens = self.login()
        finally:
            unsubscribe()
        self.assertIn('access', tokens)
        self.assertIn('refresh', tokens)
        self.assertEqual(events, [('test@example.com', 'login')])

    def test_wrong_password(self):
        res = self.client.post('/auth/login/', {'email': 'test@example.com', 'password': 'nope'})
        self.assertEqual(res.status_code, 401)

    def test_me(self):
        tokens = self.login()
        self.client.credentials(HTTP_AUTHORIZATION='Bearer ' + tokens['access'])
        res = self.client.get('/auth/me/')
        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.data['email'], 'test@example.com')
        self.assertFalse(res.data['is_admin'])

    @override_settings(CHECKLIST={
        'DATA_BACKEND': 'reports.backends.DjangoDataBackend',
        'ADMIN_EMAILS': ['test@example.com'],
        'COMPENSATE_ORPHANED_REPORTS': True,
    })
    def test_me_allowlisted(self):
        self.client.force_authenticate(user=self.user)
        res = self.client.get('/auth/me/')
        self.assertTrue(res.data['is_admin'])

    def test_me_requires_login(self):
        res = self.client.get('/auth/me/')
        self.assertEqual(res.status_code, 401)

    def test_logout_blacklists_refresh_token(self):
        tokens = self.login()
        self.client.credentials(HTTP_AUTHORIZATION='Bearer ' + tokens['access'])

        res = self.client.post('/auth/logout/', {'refresh': tokens['refresh']})
        self.assertEqual(res.status_code, 200)

        res = self.client.post('/auth/refresh/', {'refresh': tokens['refresh']})
        self.assertEqual(res.status_code, 401)

    def test_logout_requires_refresh_token(self):
        self.client.force_authenticate(user=self.user)
        res = self.client.post('/auth/logout/', {})
        self.assertEqual(res.status_code, 400)

    def test_register(self):
        res = self.client.post('/auth/register/', {
            'email': 'New@Example.com',
            'first_name': 'New',
            'password': 'Strong#Pass1',
            'confirm_password': 'Strong#Pass1',
        })
        self.assertEqual(res.status_code, 201)
        user = User.objects.get(email='new@example.com')
        self.assertFalse(user.profile.is_admin)

        res = self.client.post('/auth/login/', {'email': 'New@Example.com', 'password': 'Strong#Pass1'})
        self.assertEqual(res.status_code, 200)

    def test_login_ignores_email_case(self):
        res = self.client.post('/auth/login/', {'email': ' TEST@example.com', 'password': 'Secret#123'})
        self.assertEqual(res.status_code, 200)
        self.assertIn('access', res.data)

    def test_register_rejects_weak_password(self):
        res = self.client.post('/auth/register/', {
            'email': 'weak@example.com',
            'password': 'weakpass',
            'confirm_password': 'weakpass',
        })
        self.assertEqual(res.status_code, 400)
        self.assertIn('password', res.data)

    def test_register_rejects_mismatch_and_duplicates(self):
        res = self.client.post('/auth/register/', {
            'email': 'test@example.com',
            'password': 'Strong#Pass1',
            'confirm_password': 'Strong#Pass2',
        })
        self.assertEqual(res.status_code, 400)
        self.assertIn('email', res.data)
