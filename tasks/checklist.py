"""
In-memory maintenance checklist for one editing session.

Only the mutable part of each task (done flag and note) is written to the
Django session between requests; titles, categories and help text always
come from the catalog.
"""
import copy
from dataclasses import asdict, dataclass
from typing import Optional

from .catalog import DEFAULT_TASKS
from .progress import compute_completion, compute_points, earned_badges

SESSION_KEY = 'checklist'


@dataclass
class Task:
    id: str
    title: str
    category: str
    help: Optional[str] = None
    link: Optional[str] = None
    done: bool = False
    note: Optional[str] = None


class Checklist:
    def __init__(self, tasks):
        self.tasks = list(tasks)

    @classmethod
    def from_defaults(cls):
        return cls(Task(**copy.deepcopy(entry)) for entry in DEFAULT_TASKS)

    @classmethod
    def from_session(cls, session):
        checklist = cls.from_defaults()
        for entry in session.get(SESSION_KEY, []):
            task = checklist.get(entry.get('id'))
            if task is None:
                continue
            task.done = bool(entry.get('done'))
            task.note = entry.get('note')
        return checklist

    def store(self, session):
        session[SESSION_KEY] = [
            {'id': task.id, 'done': task.done, 'note': task.note}
            for task in self.tasks
        ]

    def get(self, task_id):
        for task in self.tasks:
            if task.id == task_id:
                return task
        return None

    def toggle(self, task_id):
        """Flip the done flag of ``task_id``. Returns False if there is no such task."""
        task = self.get(task_id)
        if task is None:
            return False
        task.done = not task.done
        return True

    def set_note(self, task_id, text):
        """Replace the note of ``task_id``. Returns False if there is no such task."""
        task = self.get(task_id)
        if task is None:
            return False
        task.note = text
        return True

    def reset(self):
        self.tasks = Checklist.from_defaults().tasks

    @property
    def completion(self):
        return compute_completion(self.tasks)

    @property
    def points(self):
        return compute_points(self.completion)

    def summary(self):
        completion = self.completion
        return {
            'tasks': [asdict(task) for task in self.tasks],
            'completion': completion._asdict(),
            'points': compute_points(completion),
            'badges': earned_badges(completion),
        }
