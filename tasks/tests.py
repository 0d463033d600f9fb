from django.test import SimpleTestCase
from rest_framework.test import APITestCase, APIClient

from .catalog import CATEGORIES, DEFAULT_TASKS
from .checklist import Checklist, SESSION_KEY
from .progress import Completion, compute_completion, compute_points, earned_badges, round_pct


def complete(checklist, count):
    for task in checklist.tasks[:count]:
        checklist.toggle(task.id)
    return checklist


class ProgressTest(SimpleTestCase):
    def test_default_catalog(self):
        self.assertEqual(len(DEFAULT_TASKS), 11)
        self.assertEqual({t['category'] for t in DEFAULT_TASKS}, set(CATEGORIES))
        self.assertEqual(len({t['id'] for t in DEFAULT_TASKS}), 11)

    def test_nothing_done(self):
        checklist = Checklist.from_defaults()
        self.assertEqual(checklist.completion, Completion(done=0, total=11, pct=0))
        self.assertEqual(checklist.points, 0)

    def test_six_of_eleven(self):
        checklist = complete(Checklist.from_defaults(), 6)
        self.assertEqual(checklist.completion.pct, 55)
        self.assertEqual(checklist.points, 60)

    def test_all_done_gets_bonus(self):
        checklist = complete(Checklist.from_defaults(), 11)
        self.assertEqual(checklist.completion.pct, 100)
        self.assertEqual(checklist.points, 130)

    def test_empty_task_list(self):
        completion = compute_completion([])
        self.assertEqual(completion, Completion(done=0, total=0, pct=0))
        self.assertEqual(compute_points(completion), 0)

    def test_halves_round_up(self):
        self.assertEqual(round_pct(1, 8), 13)
        self.assertEqual(round_pct(3, 8), 38)
        self.assertEqual(round_pct(5, 8), 63)
        self.assertEqual(round_pct(7, 8), 88)
        self.assertEqual(round_pct(1, 40), 3)

    def test_non_ties_round_to_nearest(self):
        self.assertEqual(round_pct(1, 3), 33)
        self.assertEqual(round_pct(2, 3), 67)
        self.assertEqual(round_pct(1, 11), 9)
        self.assertEqual(round_pct(10, 11), 91)

    def test_pct_bounds(self):
        for total in range(0, 30):
            for done in range(0, total + 1):
                pct = round_pct(done, total)
                self.assertTrue(0 <= pct <= 100, (done, total, pct))

    def test_points_never_decrease(self):
        checklist = Checklist.from_defaults()
        previous = checklist.points
        for task in checklist.tasks:
            checklist.toggle(task.id)
            self.assertLessEqual(checklist.completion.done, checklist.completion.total)
            self.assertGreaterEqual(checklist.points, previous)
            previous = checklist.points

    def test_badges(self):
        self.assertEqual(earned_badges(Completion(0, 10, 0)), [])
        self.assertEqual(earned_badges(Completion(3, 10, 30)), ['Starter'])
        self.assertEqual(earned_badges(Completion(6, 10, 60)), ['Starter', 'Optimiser'])
        self.assertEqual(earned_badges(Completion(10, 10, 100)), ['Starter', 'Optimiser', 'All Clear'])


class ChecklistTest(SimpleTestCase):
    def test_toggle_flips_flag(self):
        checklist = Checklist.from_defaults()
        self.assertTrue(checklist.toggle('hibp'))
        self.assertTrue(checklist.get('hibp').done)
        self.assertTrue(checklist.toggle('hibp'))
        self.assertFalse(checklist.get('hibp').done)

    def test_unknown_task_is_noop(self):
        checklist = Checklist.from_defaults()
        before = checklist.summary()
        self.assertFalse(checklist.toggle('nope'))
        self.assertFalse(checklist.set_note('nope', 'text'))
        self.assertEqual(checklist.summary(), before)

    def test_set_note(self):
        checklist = Checklist.from_defaults()
        checklist.set_note('os_updates', 'Rebooted twice')
        self.assertEqual(checklist.get('os_updates').note, 'Rebooted twice')

    def test_defaults_are_not_shared(self):
        first = Checklist.from_defaults()
        first.toggle('clear_cache')
        self.assertFalse(Checklist.from_defaults().get('clear_cache').done)

    def test_session_round_trip_ignores_unknown_ids(self):
        session = {}
        checklist = Checklist.from_defaults()
        checklist.toggle('driver_fw')
        checklist.set_note('driver_fw', 'BIOS 1.2')
        checklist.store(session)
        session[SESSION_KEY].append({'id': 'retired_task', 'done': True})

        restored = Checklist.from_session(session)
        self.assertEqual(len(restored.tasks), 11)
        self.assertTrue(restored.get('driver_fw').done)
        self.assertEqual(restored.get('driver_fw').note, 'BIOS 1.2')
        self.assertIsNone(restored.get('retired_task'))

    def test_reset(self):
        checklist = complete(Checklist.from_defaults(), 4)
        checklist.reset()
        self.assertEqual(checklist.completion.done, 0)


class ChecklistAPITest(APITestCase):
    def setUp(self):
        self.client = APIClient()

    def test_initial_state(self):
        res = self.client.get('/checklist/')
        self.assertEqual(res.status_code, 200)
        self.assertEqual(len(res.data['tasks']), 11)
        self.assertEqual(res.data['completion'], {'done': 0, 'total': 11, 'pct': 0})
        self.assertEqual(res.data['points'], 0)
        self.assertEqual(res.data['badges'], [])

    def test_toggle_persists_in_session(self):
        for task in DEFAULT_TASKS[:6]:
            res = self.client.post('/checklist/toggle/', {'task_id': task['id']}, format='json')
            self.assertEqual(res.status_code, 200)

        res = self.client.get('/checklist/')
        self.assertEqual(res.data['completion']['pct'], 55)
        self.assertEqual(res.data['points'], 60)
        self.assertEqual(res.data['badges'], ['Starter'])

    def test_sessions_are_independent(self):
        self.client.post('/checklist/toggle/', {'task_id': 'hibp'}, format='json')
        other = APIClient()
        res = other.get('/checklist/')
        self.assertEqual(res.data['completion']['done'], 0)

    def test_note(self):
        res = self.client.post('/checklist/note/', {'task_id': 'camera_test', 'note': 'Mic crackles'}, format='json')
        self.assertEqual(res.status_code, 200)
        task = next(t for t in res.data['tasks'] if t['id'] == 'camera_test')
        self.assertEqual(task['note'], 'Mic crackles')

    def test_unknown_task(self):
        res = self.client.post('/checklist/toggle/', {'task_id': 'nope'}, format='json')
        self.assertEqual(res.status_code, 404)
        res = self.client.post('/checklist/note/', {'task_id': 'nope', 'note': 'x'}, format='json')
        self.assertEqual(res.status_code, 404)

    def test_missing_task_id(self):
        res = self.client.post('/checklist/toggle/', {}, format='json')
        self.assertEqual(res.status_code, 400)

    def test_reset(self):
        self.client.post('/checklist/toggle/', {'task_id': 'hibp'}, format='json')
        res = self.client.post('/checklist/reset/')
        self.assertEqual(res.data['completion']['done'], 0)
