"""
Report submission workflow.

Saving a report is two writes against the data backend: the report header,
then one row per checklist task referencing it. The writes are not atomic;
when the second one fails the header is deleted again if compensation is
enabled, otherwise it is left behind and its id is reported on the error.
"""
import enum
import logging
from dataclasses import dataclass
from datetime import datetime, time, timezone as dt_timezone
from typing import Optional

from django.utils import timezone
from django.utils.dateparse import parse_date, parse_datetime

from .exceptions import BackendError, SubmissionFailed, Unauthenticated

logger = logging.getLogger(__name__)


class SubmissionState(enum.Enum):
    IDLE = 'idle'
    SUBMITTING = 'submitting'
    SUCCEEDED = 'succeeded'
    FAILED = 'failed'


@dataclass
class ReportDraft:
    owner: str = ''
    device_name: str = ''
    next_maintenance_at: Optional[str] = None


def parse_maintenance_date(value):
    """
    Turn the user's next-maintenance input into an aware UTC datetime.

    Blank input gives None. A bare date means midnight UTC on that day and a
    naive datetime is read as UTC. Raises ValueError for anything else.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        parsed = value
    else:
        value = str(value).strip()
        if not value:
            return None
        parsed = parse_datetime(value)
        if parsed is None:
            day = parse_date(value)
            if day is None:
                raise ValueError(f"Invalid date: {value!r}")
            parsed = datetime.combine(day, time.min)
    if timezone.is_naive(parsed):
        parsed = timezone.make_aware(parsed, dt_timezone.utc)
    return parsed.astimezone(dt_timezone.utc)


class ReportSubmission:
    """
    One attempt to save the given checklist as a report.

    The instance moves IDLE -> SUBMITTING -> SUCCEEDED or FAILED and keeps
    the saved report (``report``) or the raised error (``error``).
    """

    def __init__(self, backend, checklist, compensate=True):
        self.backend = backend
        self.checklist = checklist
        self.compensate = compensate
        self.state = SubmissionState.IDLE
        self.report = None
        self.tasks = []
        self.error = None

    def _fail(self, error):
        self.state = SubmissionState.FAILED
        self.error = error
        return error

    def build_report(self, identity, draft):
        completion = self.checklist.completion
        return {
            'user_id': identity.user_id,
            'owner': (draft.owner or '').strip() or identity.email,
            'device_name': draft.device_name or None,
            'next_maintenance_at': parse_maintenance_date(draft.next_maintenance_at),
            'completion_pct': completion.pct,
            'points': self.checklist.points,
        }

    def build_tasks(self, report_id):
        return [
            {
                'report_id': report_id,
                'task_id': task.id,
                'title': task.title,
                'category': task.category,
                'done': task.done,
                'note': task.note,
            }
            for task in self.checklist.tasks
        ]

    def submit(self, identity, draft=None):
        """
        Save the report for ``identity`` and return the stored header.

        Raises Unauthenticated without touching the backend when there is
        no identity, ValueError for an unreadable maintenance date, and
        SubmissionFailed when either write fails.
        """
        if identity is None:
            raise self._fail(Unauthenticated())

        try:
            record = self.build_report(identity, draft or ReportDraft())
        except ValueError as exc:
            raise self._fail(exc)
        self.state = SubmissionState.SUBMITTING

        try:
            report = self.backend.insert_report(record)
        except BackendError as exc:
            logger.error("Report insert failed for %s: %s", identity.email, exc)
            raise self._fail(SubmissionFailed('Failed to save report', cause=exc)) from exc

        tasks = self.build_tasks(report['id'])
        try:
            self.backend.insert_report_tasks(tasks)
        except BackendError as exc:
            logger.error("Report task insert failed for report %s: %s", report['id'], exc)
            error = SubmissionFailed(
                'Failed to save report tasks',
                cause=exc,
                report_id=report['id'],
                compensated=self._remove_orphan(report['id']),
            )
            raise self._fail(error) from exc

        self.report = report
        self.tasks = tasks
        self.state = SubmissionState.SUCCEEDED
        logger.info(
            "Saved report %s for %s (%s%%, %s pts)",
            report['id'], identity.email, record['completion_pct'], record['points'],
        )
        return report

    def _remove_orphan(self, report_id):
        if not self.compensate:
            logger.warning("Report %s left without task rows", report_id)
            return False
        try:
            self.backend.delete_report(report_id)
        except BackendError as exc:
            logger.error("Could not remove orphaned report %s: %s", report_id, exc)
            return False
        logger.info("Removed orphaned report %s", report_id)
        return True
