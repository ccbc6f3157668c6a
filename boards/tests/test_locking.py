"""
Tests for the per-board write serialization: which database errors are
retried, the delay between attempts, and real concurrent check-ins.
"""

import threading
from datetime import date
from django.test import SimpleTestCase, TestCase, TransactionTestCase, override_settings
from django.contrib.auth.models import User
from django.db import IntegrityError, OperationalError, connection
from unittest.mock import patch

from boards.exceptions import ConcurrentUpdateConflict
from boards.models import Board, CheckIn
from boards.services.checkin_service import CheckInService
from boards.services.locking import backoff_delay, is_transient, run_locked


class IsTransientTestCase(SimpleTestCase):

    def test_sqlite_session_collision(self):
        error = IntegrityError(
            'UNIQUE constraint failed: boards_checkin.board_id, boards_checkin.date, boards_checkin.session_number'
        )
        self.assertTrue(is_transient(error))

    def test_named_session_constraint(self):
        error = IntegrityError(
            'duplicate key value violates unique constraint "unique_session_per_board_day"'
        )
        self.assertTrue(is_transient(error))

    def test_not_null_violation_is_not_retried(self):
        self.assertFalse(is_transient(IntegrityError('NOT NULL constraint failed: boards_checkin.date')))

    def test_foreign_key_violation_is_not_retried(self):
        self.assertFalse(is_transient(IntegrityError('FOREIGN KEY constraint failed')))

    def test_other_unique_violation_is_not_retried(self):
        self.assertFalse(is_transient(IntegrityError('UNIQUE constraint failed: boards_board.user_id, boards_board.name')))

    def test_lock_contention(self):
        self.assertTrue(is_transient(OperationalError('database is locked')))
        self.assertTrue(is_transient(OperationalError('Deadlock found when trying to get lock')))

    def test_other_operational_error(self):
        self.assertFalse(is_transient(OperationalError('no such table: boards_checkin')))


class BackoffDelayTestCase(SimpleTestCase):

    @override_settings(STREAKBOARD={'CHECKIN_RETRY_BACKOFF': 0.1, 'CHECKIN_RETRY_MAX_BACKOFF': 0.3})
    def test_delay_grows_and_is_capped(self):
        with patch('boards.services.locking.random.uniform', side_effect=lambda low, high: high):
            delays = [backoff_delay(attempt) for attempt in range(1, 5)]

        self.assertEqual(delays, [0.1, 0.2, 0.3, 0.3])

    def test_delay_is_jittered_within_bounds(self):
        for attempt in range(1, 6):
            delay = backoff_delay(attempt)
            self.assertGreaterEqual(delay, 0)
            self.assertLessEqual(delay, 1.0)


class RunLockedTestCase(TestCase):

    def setUp(self):
        self.user = User.objects.create_user(username='locker', password='testpass123')
        self.board = Board.objects.create(user=self.user, name="Stretching")

    def test_waits_between_attempts(self):
        def collide():
            raise IntegrityError('UNIQUE constraint failed: boards_checkin.session_number')

        with patch('boards.services.locking.time.sleep') as mock_sleep:
            with self.assertRaises(ConcurrentUpdateConflict):
                run_locked(collide, "test write", max_attempts=3)

        self.assertEqual(mock_sleep.call_count, 2)

    def test_non_session_integrity_error_propagates(self):
        attempts = []

        def write_invalid_row():
            attempts.append(1)
            CheckIn.objects.create(board=self.board, user=self.user, date=None)

        with patch('boards.services.locking.time.sleep') as mock_sleep:
            with self.assertRaises(IntegrityError):
                run_locked(write_invalid_row, "invalid check-in")

        self.assertEqual(len(attempts), 1)
        mock_sleep.assert_not_called()
        self.assertEqual(CheckIn.objects.count(), 0)


class ConcurrentCheckInTestCase(TransactionTestCase):
    """Several threads check in on the same board and day at once."""

    workers = 5

    def setUp(self):
        if connection.vendor == 'sqlite' and connection.is_in_memory_db():
            self.skipTest("needs a file-backed database shared between threads")
        self.user = User.objects.create_user(username='parallel', password='testpass123')
        self.board = Board.objects.create(user=self.user, name="Water")
        self.today = date(2024, 1, 10)

    def test_parallel_same_day_check_ins_all_land(self):
        barrier = threading.Barrier(self.workers)
        errors = []

        def check_in():
            try:
                barrier.wait()
                CheckInService(self.user, today=self.today).record_check_in(self.board.id)
            except Exception as e:
                errors.append(e)
            finally:
                connection.close()

        threads = [threading.Thread(target=check_in) for _ in range(self.workers)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        self.assertEqual(errors, [])
        sessions = sorted(CheckIn.objects.filter(board=self.board).values_list('session_number', flat=True))
        self.assertEqual(sessions, list(range(1, self.workers + 1)))

        self.board.refresh_from_db()
        self.assertEqual(self.board.total_check_ins, CheckIn.objects.filter(board=self.board).count())
        self.assertEqual(self.board.total_check_ins, self.workers)
        self.assertEqual(self.board.current_streak, 1)
