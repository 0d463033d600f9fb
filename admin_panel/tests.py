from datetime import datetime, timezone as dt_timezone

from django.contrib.auth import get_user_model
from django.test import override_settings
from rest_framework import status
from rest_framework.test import APITestCase, APIClient

from reports.models import Report, ReportTask

User = get_user_model()

ALLOWLIST_SETTINGS = {
    'DATA_BACKEND': 'reports.backends.DjangoDataBackend',
    'ADMIN_EMAILS': ['boss@example.com'],
    'COMPENSATE_ORPHANED_REPORTS': True,
}


class AdminPanelAPITests(APITestCase):
    def setUp(self):
        self.admin = User.objects.create_user(username="admin@example.com", email="admin@example.com", password="Secret#123")
        self.admin.profile.is_admin = True
        self.admin.profile.save()

        self.member = User.objects.create_user(username="member@example.com", email="member@example.com", password="Secret#123")
        self.boss = User.objects.create_user(username="boss@example.com", email="boss@example.com", password="Secret#123")

        self.older = Report.objects.create(
            user=self.member,
            owner='Member',
            device_name='Laptop',
            completion_pct=55,
            points=60,
            created_at=datetime(2025, 1, 1, tzinfo=dt_timezone.utc),
        )
        self.newer = Report.objects.create(
            user=self.member,
            owner='Member',
            device_name='Desktop',
            completion_pct=100,
            points=130,
            next_maintenance_at=datetime(2025, 7, 1, tzinfo=dt_timezone.utc),
            created_at=datetime(2025, 2, 1, tzinfo=dt_timezone.utc),
        )
        ReportTask.objects.create(report=self.newer, task_id='hibp', title='Run Have I Been Pwned check', category='Security', done=True, note='Clean')
        ReportTask.objects.create(report=self.newer, task_id='os_updates', title='Install OS updates & reboot', category='Updates', done=False)

        self.client = APIClient()

    def test_list_reports_newest_first(self):
        self.client.force_authenticate(user=self.admin)
        res = self.client.get('/panel/reports/')
        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual([r['id'] for r in res.data], [self.newer.id, self.older.id])
        self.assertEqual(res.data[0]['points'], 130)

    def test_non_admin_is_denied(self):
        self.client.force_authenticate(user=self.member)
        res = self.client.get('/panel/reports/')
        self.assertEqual(res.status_code, status.HTTP_403_FORBIDDEN)

    def test_anonymous_is_unauthenticated(self):
        res = self.client.get('/panel/reports/')
        self.assertEqual(res.status_code, status.HTTP_401_UNAUTHORIZED)

    @override_settings(CHECKLIST=ALLOWLIST_SETTINGS)
    def test_allowlisted_email_without_profile_flag(self):
        self.client.force_authenticate(user=self.boss)
        res = self.client.get('/panel/reports/')
        self.assertEqual(res.status_code, status.HTTP_200_OK)

    def test_jwt_admin(self):
        login = self.client.post('/auth/login/', {'email': 'admin@example.com', 'password': 'Secret#123'})
        self.assertEqual(login.status_code, 200)
        self.client.credentials(HTTP_AUTHORIZATION='Bearer ' + login.data['access'])
        res = self.client.get('/panel/reports/')
        self.assertEqual(res.status_code, status.HTTP_200_OK)

    def test_view_report(self):
        self.client.force_authenticate(user=self.admin)
        res = self.client.get(f'/panel/report/{self.newer.id}/')
        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.data['device_name'], 'Desktop')
        self.assertEqual([t['task_id'] for t in res.data['tasks']], ['hibp', 'os_updates'])
        self.assertEqual(res.data['tasks'][0]['note'], 'Clean')

    def test_view_missing_report(self):
        self.client.force_authenticate(user=self.admin)
        self.assertEqual(self.client.get('/panel/report/999999/').status_code, 404)
        self.assertEqual(self.client.get('/panel/report/abc/').status_code, 404)

    def test_export_csv(self):
        self.client.force_authenticate(user=self.admin)
        res = self.client.get(f'/panel/report/{self.newer.id}/export/csv/')
        self.assertEqual(res.status_code, 200)
        self.assertEqual(res['Content-Type'], 'text/csv')
        body = res.content.decode()
        lines = body.splitlines()
        self.assertEqual(lines[0], 'section,label,value')
        self.assertIn('Meta,Owner,Member', body)
        self.assertIn('Security,Run Have I Been Pwned check,Done - Clean', body)
        self.assertIn('Updates,Install OS updates & reboot,Open', body)

    def test_export_csv_denied_for_member(self):
        self.client.force_authenticate(user=self.member)
        res = self.client.get(f'/panel/report/{self.newer.id}/export/csv/')
        self.assertEqual(res.status_code, 403)
