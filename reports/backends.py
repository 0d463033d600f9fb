"""
Data backends: where profiles, reports and report task rows live.

Records cross this boundary as plain dicts keyed by column name, so the
rest of the app does not care whether they come from the local database or
from a hosted Supabase project. Every failure is raised as BackendError.
"""
import functools
import logging

from django.conf import settings
from django.core.exceptions import ImproperlyConfigured
from django.db import DatabaseError
from django.utils.dateparse import parse_datetime
from django.utils.module_loading import import_string
from supabase import create_client

from authentication.models import Profile
from .exceptions import BackendError
from .models import Report, ReportTask

logger = logging.getLogger(__name__)

REPORT_FIELDS = (
    'id', 'user_id', 'owner', 'device_name', 'next_maintenance_at',
    'completion_pct', 'points', 'created_at',
)
REPORT_TASK_FIELDS = ('report_id', 'task_id', 'title', 'category', 'done', 'note')


class DataBackend:
    """Interface every data backend implements."""

    def get_profile(self, user_id):
        """Return ``{'is_admin': bool}`` for the user, or None if there is no profile."""
        raise NotImplementedError

    def insert_report(self, record):
        """Insert a report header; return it with ``id`` and ``created_at`` filled in."""
        raise NotImplementedError

    def insert_report_tasks(self, records):
        raise NotImplementedError

    def delete_report(self, report_id):
        raise NotImplementedError

    def list_reports(self, user_id=None):
        """Report headers, newest first, optionally only those of one user."""
        raise NotImplementedError

    def get_report(self, report_id):
        raise NotImplementedError

    def list_report_tasks(self, report_id):
        raise NotImplementedError


class DjangoDataBackend(DataBackend):
    """Stores everything in the project's own database through the ORM."""

    def get_profile(self, user_id):
        try:
            return Profile.objects.filter(user_id=user_id).values('is_admin').first()
        except DatabaseError as exc:
            raise BackendError('Failed to fetch profile', exc) from exc

    def insert_report(self, record):
        fields = {key: record.get(key) for key in REPORT_FIELDS if key not in ('id', 'created_at')}
        try:
            report = Report.objects.create(**fields)
        except DatabaseError as exc:
            raise BackendError('Failed to insert report', exc) from exc
        return {key: getattr(report, key) for key in REPORT_FIELDS}

    def insert_report_tasks(self, records):
        rows = [ReportTask(**{key: r.get(key) for key in REPORT_TASK_FIELDS}) for r in records]
        try:
            ReportTask.objects.bulk_create(rows)
        except DatabaseError as exc:
            raise BackendError('Failed to insert report tasks', exc) from exc

    def delete_report(self, report_id):
        try:
            Report.objects.filter(id=report_id).delete()
        except DatabaseError as exc:
            raise BackendError('Failed to delete report', exc) from exc

    def list_reports(self, user_id=None):
        reports = Report.objects.order_by('-created_at')
        if user_id is not None:
            reports = reports.filter(user_id=user_id)
        try:
            return list(reports.values(*REPORT_FIELDS))
        except DatabaseError as exc:
            raise BackendError('Failed to list reports', exc) from exc

    def get_report(self, report_id):
        try:
            return Report.objects.filter(id=report_id).values(*REPORT_FIELDS).first()
        except ValueError:
            # not a valid primary key, so no such report
            return None
        except DatabaseError as exc:
            raise BackendError('Failed to fetch report', exc) from exc

    def list_report_tasks(self, report_id):
        try:
            return list(ReportTask.objects.filter(report_id=report_id).values(*REPORT_TASK_FIELDS))
        except ValueError:
            return []
        except DatabaseError as exc:
            raise BackendError('Failed to fetch report tasks', exc) from exc


class SupabaseDataBackend(DataBackend):
    """
    Talks to the ``profiles``, ``reports`` and ``report_tasks`` tables of a
    hosted Supabase project. The client is created on first use from
    SUPABASE_URL and SUPABASE_KEY.
    """

    def __init__(self, client=None):
        self._client = client

    @property
    def client(self):
        if self._client is None:
            if not settings.SUPABASE_URL or not settings.SUPABASE_KEY:
                raise ImproperlyConfigured("Please set SUPABASE_URL and SUPABASE_KEY environment variables")
            self._client = create_client(settings.SUPABASE_URL, settings.SUPABASE_KEY)
        return self._client

    def _run(self, action, query):
        try:
            return query()
        except Exception as exc:
            logger.error("Supabase request failed (%s): %s", action, exc)
            raise BackendError(f'Failed to {action}', exc) from exc

    @staticmethod
    def _to_payload(record, fields):
        payload = {}
        for key in fields:
            if key in ('id', 'created_at'):
                continue
            value = record.get(key)
            payload[key] = value.isoformat() if hasattr(value, 'isoformat') else value
        return payload

    @staticmethod
    def _from_row(row):
        row = dict(row)
        for key in ('created_at', 'next_maintenance_at'):
            if isinstance(row.get(key), str):
                row[key] = parse_datetime(row[key])
        return row

    def get_profile(self, user_id):
        client = self.client
        result = self._run(
            'fetch profile',
            lambda: client.table('profiles').select('is_admin').eq('id', user_id).limit(1).execute(),
        )
        if not result.data:
            return None
        return {'is_admin': bool(result.data[0].get('is_admin'))}

    def insert_report(self, record):
        client = self.client
        payload = self._to_payload(record, REPORT_FIELDS)
        result = self._run('insert report', lambda: client.table('reports').insert(payload).execute())
        if not result.data:
            raise BackendError('Failed to insert report: no row returned')
        return self._from_row(result.data[0])

    def insert_report_tasks(self, records):
        client = self.client
        payload = [self._to_payload(r, REPORT_TASK_FIELDS) for r in records]
        self._run('insert report tasks', lambda: client.table('report_tasks').insert(payload).execute())

    def delete_report(self, report_id):
        client = self.client
        self._run('delete report', lambda: client.table('reports').delete().eq('id', report_id).execute())

    def list_reports(self, user_id=None):
        client = self.client

        def query():
            q = client.table('reports').select(', '.join(REPORT_FIELDS))
            if user_id is not None:
                q = q.eq('user_id', user_id)
            return q.order('created_at', desc=True).execute()

        result = self._run('list reports', query)
        return [self._from_row(row) for row in result.data or []]

    def get_report(self, report_id):
        client = self.client
        result = self._run(
            'fetch report',
            lambda: client.table('reports').select(', '.join(REPORT_FIELDS)).eq('id', report_id).limit(1).execute(),
        )
        if not result.data:
            return None
        return self._from_row(result.data[0])

    def list_report_tasks(self, report_id):
        client = self.client
        result = self._run(
            'fetch report tasks',
            lambda: client.table('report_tasks').select(', '.join(REPORT_TASK_FIELDS)).eq('report_id', report_id).order('id').execute(),
        )
        return list(result.data or [])


@functools.lru_cache(maxsize=None)
def _load_backend(path):
    return import_string(path)()


def get_data_backend():
    """The backend named by ``settings.CHECKLIST['DATA_BACKEND']``."""
    return _load_backend(settings.CHECKLIST['DATA_BACKEND'])
