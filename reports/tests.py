from datetime import datetime, timezone as dt_timezone
from unittest import mock

from django.contrib.auth import get_user_model
from django.core.exceptions import ImproperlyConfigured
from django.test import SimpleTestCase, TestCase, override_settings
from rest_framework.test import APITestCase, APIClient

from authentication.session import Identity
from tasks.checklist import Checklist
from .backends import DjangoDataBackend, SupabaseDataBackend
from .exceptions import BackendError, SubmissionFailed, Unauthenticated
from .models import Report, ReportTask
from .submission import ReportDraft, ReportSubmission, SubmissionState, parse_maintenance_date

User = get_user_model()


class FakeBackend:
    """In-memory backend that records calls and can be told to fail."""

    def __init__(self, fail_on=()):
        self.fail_on = set(fail_on)
        self.calls = []
        self.reports = {}
        self.report_tasks = []

    def _call(self, name):
        self.calls.append(name)
        if name in self.fail_on:
            raise BackendError(f'{name} failed', RuntimeError('boom'))

    def get_profile(self, user_id):
        self._call('get_profile')
        return None

    def insert_report(self, record):
        self._call('insert_report')
        report = dict(record, id=len(self.reports) + 1, created_at=datetime.now(dt_timezone.utc))
        self.reports[report['id']] = report
        return report

    def insert_report_tasks(self, records):
        self._call('insert_report_tasks')
        self.report_tasks.extend(records)

    def delete_report(self, report_id):
        self._call('delete_report')
        self.reports.pop(report_id, None)


def checklist_with(done=0):
    checklist = Checklist.from_defaults()
    for task in checklist.tasks[:done]:
        checklist.toggle(task.id)
    return checklist


IDENTITY = Identity(user_id=7, email='owner@example.com')


class ReportSubmissionTest(SimpleTestCase):
    def test_success_writes_header_then_tasks(self):
        backend = FakeBackend()
        checklist = checklist_with(6)
        checklist.set_note('hibp', 'No breaches')
        submission = ReportSubmission(backend, checklist)

        report = submission.submit(IDENTITY, ReportDraft(owner='Sam', device_name='Laptop'))

        self.assertEqual(submission.state, SubmissionState.SUCCEEDED)
        self.assertEqual(backend.calls, ['insert_report', 'insert_report_tasks'])
        self.assertEqual(report['completion_pct'], 55)
        self.assertEqual(report['points'], 60)
        self.assertEqual(report['owner'], 'Sam')
        self.assertEqual(report['device_name'], 'Laptop')
        self.assertEqual(report['user_id'], 7)
        self.assertEqual(len(backend.report_tasks), 11)
        self.assertTrue(all(row['report_id'] == report['id'] for row in backend.report_tasks))
        self.assertEqual([row['task_id'] for row in backend.report_tasks], [t.id for t in checklist.tasks])
        hibp = next(row for row in backend.report_tasks if row['task_id'] == 'hibp')
        self.assertEqual(hibp['note'], 'No breaches')

    def test_blank_owner_defaults_to_email(self):
        backend = FakeBackend()
        report = ReportSubmission(backend, checklist_with()).submit(IDENTITY, ReportDraft(owner='  '))
        self.assertEqual(report['owner'], 'owner@example.com')
        self.assertIsNone(report['device_name'])
        self.assertIsNone(report['next_maintenance_at'])

    def test_no_identity_never_touches_backend(self):
        backend = FakeBackend()
        submission = ReportSubmission(backend, checklist_with(3))
        with self.assertRaises(Unauthenticated):
            submission.submit(None, ReportDraft())
        self.assertEqual(backend.calls, [])
        self.assertEqual(submission.state, SubmissionState.FAILED)

    def test_report_insert_failure_skips_tasks(self):
        backend = FakeBackend(fail_on={'insert_report'})
        submission = ReportSubmission(backend, checklist_with(3))
        with self.assertRaises(SubmissionFailed) as ctx:
            submission.submit(IDENTITY)
        self.assertEqual(backend.calls, ['insert_report'])
        self.assertIsNone(ctx.exception.report_id)
        self.assertIsInstance(ctx.exception.cause, BackendError)
        self.assertEqual(submission.state, SubmissionState.FAILED)

    def test_task_insert_failure_leaves_orphan_without_compensation(self):
        backend = FakeBackend(fail_on={'insert_report_tasks'})
        submission = ReportSubmission(backend, checklist_with(3), compensate=False)
        with self.assertRaises(SubmissionFailed) as ctx:
            submission.submit(IDENTITY)
        self.assertEqual(backend.calls, ['insert_report', 'insert_report_tasks'])
        self.assertEqual(ctx.exception.report_id, 1)
        self.assertFalse(ctx.exception.compensated)
        self.assertIn(1, backend.reports)

    def test_task_insert_failure_removes_orphan_with_compensation(self):
        backend = FakeBackend(fail_on={'insert_report_tasks'})
        submission = ReportSubmission(backend, checklist_with(3))
        with self.assertRaises(SubmissionFailed) as ctx:
            submission.submit(IDENTITY)
        self.assertEqual(backend.calls, ['insert_report', 'insert_report_tasks', 'delete_report'])
        self.assertTrue(ctx.exception.compensated)
        self.assertEqual(backend.reports, {})

    def test_failed_compensation_is_reported(self):
        backend = FakeBackend(fail_on={'insert_report_tasks', 'delete_report'})
        with self.assertRaises(SubmissionFailed) as ctx:
            ReportSubmission(backend, checklist_with()).submit(IDENTITY)
        self.assertFalse(ctx.exception.compensated)
        self.assertEqual(ctx.exception.report_id, 1)

    def test_task_rows_copy_notes_and_device_verbatim(self):
        backend = FakeBackend()
        checklist = checklist_with()
        checklist.set_note('hibp', '')
        report = ReportSubmission(backend, checklist).submit(IDENTITY, ReportDraft(device_name='  Laptop '))

        self.assertEqual(report['device_name'], '  Laptop ')
        notes = {row['task_id']: row['note'] for row in backend.report_tasks}
        self.assertEqual(notes['hibp'], '')
        self.assertIsNone(notes['os_updates'])

    def test_bad_date_fails_before_any_write(self):
        backend = FakeBackend()
        submission = ReportSubmission(backend, checklist_with())
        with self.assertRaises(ValueError):
            submission.submit(IDENTITY, ReportDraft(next_maintenance_at='next tuesday'))
        self.assertEqual(submission.state, SubmissionState.FAILED)
        self.assertIsInstance(submission.error, ValueError)
        self.assertEqual(backend.calls, [])

    def test_two_submissions_make_two_reports(self):
        backend = FakeBackend()
        checklist = checklist_with(2)
        ReportSubmission(backend, checklist).submit(IDENTITY)
        ReportSubmission(backend, checklist).submit(IDENTITY)
        self.assertEqual(len(backend.reports), 2)


class MaintenanceDateTest(SimpleTestCase):
    def test_blank(self):
        self.assertIsNone(parse_maintenance_date(None))
        self.assertIsNone(parse_maintenance_date(''))
        self.assertIsNone(parse_maintenance_date('   '))

    def test_bare_date_is_midnight_utc(self):
        self.assertEqual(
            parse_maintenance_date('2025-03-14'),
            datetime(2025, 3, 14, tzinfo=dt_timezone.utc),
        )

    def test_offset_is_normalised_to_utc(self):
        self.assertEqual(
            parse_maintenance_date('2025-03-14T10:00:00+02:00'),
            datetime(2025, 3, 14, 8, tzinfo=dt_timezone.utc),
        )

    def test_invalid(self):
        with self.assertRaises(ValueError):
            parse_maintenance_date('next tuesday')


class DjangoDataBackendTest(TestCase):
    def setUp(self):
        self.backend = DjangoDataBackend()
        self.user = User.objects.create_user(username='dana', email='dana@example.com', password='Secret#123')

    def test_profile_created_with_user(self):
        self.assertEqual(self.backend.get_profile(self.user.pk), {'is_admin': False})
        self.assertIsNone(self.backend.get_profile(999))

    def test_insert_and_read_back(self):
        report = self.backend.insert_report({
            'user_id': self.user.pk,
            'owner': 'Dana',
            'device_name': 'Desktop',
            'next_maintenance_at': None,
            'completion_pct': 50,
            'points': 40,
        })
        self.assertIsNotNone(report['id'])
        self.assertIsNotNone(report['created_at'])
        self.backend.insert_report_tasks([
            {'report_id': report['id'], 'task_id': 'hibp', 'title': 'Run check', 'category': 'Security', 'done': True, 'note': None},
        ])

        self.assertEqual(self.backend.get_report(report['id'])['owner'], 'Dana')
        self.assertEqual(len(self.backend.list_report_tasks(report['id'])), 1)
        self.assertEqual(len(self.backend.list_reports(user_id=self.user.pk)), 1)
        self.assertEqual(self.backend.list_reports(user_id=999), [])

        self.backend.delete_report(report['id'])
        self.assertIsNone(self.backend.get_report(report['id']))
        self.assertFalse(ReportTask.objects.exists())

    def test_invalid_id_is_not_found(self):
        self.assertIsNone(self.backend.get_report('not-a-number'))
        self.assertEqual(self.backend.list_report_tasks('not-a-number'), [])


class SupabaseDataBackendTest(SimpleTestCase):
    def setUp(self):
        self.client = mock.MagicMock()
        self.backend = SupabaseDataBackend(client=self.client)

    def test_insert_report_serialises_dates(self):
        self.client.table.return_value.insert.return_value.execute.return_value = mock.Mock(
            data=[{'id': 5, 'created_at': '2025-01-01T00:00:00+00:00', 'next_maintenance_at': None}]
        )
        report = self.backend.insert_report({
            'user_id': 1,
            'owner': 'a@example.com',
            'device_name': None,
            'next_maintenance_at': datetime(2025, 3, 14, tzinfo=dt_timezone.utc),
            'completion_pct': 0,
            'points': 0,
        })
        self.client.table.assert_called_with('reports')
        payload = self.client.table.return_value.insert.call_args[0][0]
        self.assertEqual(payload['next_maintenance_at'], '2025-03-14T00:00:00+00:00')
        self.assertNotIn('id', payload)
        self.assertEqual(report['id'], 5)
        self.assertEqual(report['created_at'], datetime(2025, 1, 1, tzinfo=dt_timezone.utc))

    def test_errors_become_backend_errors(self):
        self.client.table.return_value.insert.return_value.execute.side_effect = RuntimeError('offline')
        with self.assertRaises(BackendError) as ctx:
            self.backend.insert_report_tasks([{'report_id': 1, 'task_id': 'hibp'}])
        self.assertIsInstance(ctx.exception.cause, RuntimeError)

    def test_missing_profile(self):
        query = self.client.table.return_value.select.return_value.eq.return_value.limit.return_value
        query.execute.return_value = mock.Mock(data=[])
        self.assertIsNone(self.backend.get_profile(1))
        query.execute.return_value = mock.Mock(data=[{'is_admin': True}])
        self.assertEqual(self.backend.get_profile(1), {'is_admin': True})

    @override_settings(SUPABASE_URL='', SUPABASE_KEY='')
    def test_unconfigured(self):
        with self.assertRaises(ImproperlyConfigured):
            SupabaseDataBackend().client


class ReportAPITest(APITestCase):
    def setUp(self):
        self.user = User.objects.create_user(
            username="owner@example.com",
            email="owner@example.com",
            password="Secret#123",
        )
        self.client = APIClient()
        self.client.force_authenticate(user=self.user)

    def tick(self, *task_ids):
        for task_id in task_ids:
            self.client.post('/checklist/toggle/', {'task_id': task_id}, format='json')

    def test_submit_report(self):
        self.tick('startup_apps', 'clear_cache', 'local_storage', 'camera_test', 'user_habits', 'battery_report')
        self.client.post('/checklist/note/', {'task_id': 'hibp', 'note': 'Later'}, format='json')

        res = self.client.post('/reports/submit/', {
            'device_name': 'ThinkPad',
            'next_maintenance_at': '2025-06-01',
        }, format='json')

        self.assertEqual(res.status_code, 201)
        self.assertEqual(res.data['completion_pct'], 55)
        self.assertEqual(res.data['points'], 60)
        self.assertEqual(res.data['owner'], 'owner@example.com')
        self.assertEqual(len(res.data['tasks']), 11)

        report = Report.objects.get(id=res.data['id'])
        self.assertEqual(report.user, self.user)
        self.assertEqual(report.next_maintenance_at, datetime(2025, 6, 1, tzinfo=dt_timezone.utc))
        self.assertEqual(report.tasks.count(), 11)
        self.assertEqual(report.tasks.filter(done=True).count(), 6)
        self.assertEqual(report.tasks.get(task_id='hibp').note, 'Later')

    def test_scores_are_not_taken_from_request(self):
        res = self.client.post('/reports/submit/', {'completion_pct': 100, 'points': 999}, format='json')
        self.assertEqual(res.status_code, 201)
        self.assertEqual(res.data['completion_pct'], 0)
        self.assertEqual(res.data['points'], 0)

    def test_anonymous_submit_is_rejected(self):
        res = APIClient().post('/reports/submit/', {}, format='json')
        self.assertEqual(res.status_code, 401)
        self.assertFalse(Report.objects.exists())

    def test_bad_date(self):
        res = self.client.post('/reports/submit/', {'next_maintenance_at': 'soon'}, format='json')
        self.assertEqual(res.status_code, 400)
        self.assertFalse(Report.objects.exists())

    def test_backend_failure(self):
        backend = FakeBackend(fail_on={'insert_report_tasks'})
        with mock.patch('reports.views.get_data_backend', return_value=backend):
            res = self.client.post('/reports/submit/', {}, format='json')
        self.assertEqual(res.status_code, 502)
        self.assertEqual(res.data['report_id'], 1)
        self.assertTrue(res.data['compensated'])

    def test_my_reports(self):
        other = User.objects.create_user(username="other@example.com", email="other@example.com", password="Secret#123")
        Report.objects.create(user=other, owner='Other')
        self.client.post('/reports/submit/', {'owner': 'Mine'}, format='json')

        res = self.client.get('/reports/mine/')
        self.assertEqual(res.status_code, 200)
        self.assertEqual([r['owner'] for r in res.data], ['Mine'])
