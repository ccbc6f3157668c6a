"""
Tests for check-in recording, deletion and the aggregate recompute that
follows every write.
"""

from datetime import date, timedelta
from decimal import Decimal
from django.test import TestCase
from django.contrib.auth.models import User
from django.db import transaction
from django.forms.models import model_to_dict
from unittest.mock import patch

from boards.exceptions import ConcurrentUpdateConflict, FutureDateError, NotFoundError
from boards.models import Board, CheckIn
from boards.services import checkin_service
from boards.services.aggregates import AggregateMaintainer
from boards.services.checkin_service import CheckInService


class CheckInServiceTestCase(TestCase):

    def setUp(self):
        self.user = User.objects.create_user(
            username='testuser',
            email='test@example.com',
            password='testpass123'
        )
        self.other_user = User.objects.create_user(
            username='otheruser',
            email='other@example.com',
            password='testpass123'
        )
        self.today = date(2024, 1, 10)
        self.service = CheckInService(self.user, today=self.today)
        self.board = self.create_board()

    def create_board(self, name="Reading", user=None, **kwargs):
        """Helper method to create a test board."""
        return Board.objects.create(user=user or self.user, name=name, **kwargs)

    def check_in_days_ago(self, *offsets, board=None):
        board = board or self.board
        for n in offsets:
            self.service.record_check_in(board.id, requested_date=self.today - timedelta(days=n))
        board.refresh_from_db()
        return board

    def test_defaults_to_today(self):
        check_in, board = self.service.record_check_in(self.board.id)

        self.assertEqual(check_in.date, self.today)
        self.assertEqual(check_in.session_number, 1)
        self.assertEqual(check_in.user, self.user)
        self.assertEqual(board.current_streak, 1)
        self.assertEqual(board.longest_streak, 1)
        self.assertEqual(board.total_check_ins, 1)
        self.assertEqual(board.last_check_in_date, self.today)

    def test_amount_and_note_are_stored(self):
        check_in, board = self.service.record_check_in(self.board.id, amount=Decimal('2.5'), note="Chapter 3")

        check_in.refresh_from_db()
        self.assertEqual(check_in.amount, Decimal('2.50'))
        self.assertEqual(check_in.note, "Chapter 3")

    def test_future_date_is_rejected_and_nothing_persisted(self):
        with self.assertRaises(FutureDateError):
            self.service.record_check_in(self.board.id, requested_date=self.today + timedelta(days=1))

        self.assertEqual(CheckIn.objects.count(), 0)
        self.board.refresh_from_db()
        self.assertEqual(self.board.total_check_ins, 0)

    def test_backdated_check_in_is_allowed(self):
        check_in, board = self.service.record_check_in(self.board.id, requested_date=date(2023, 6, 1))

        self.assertEqual(check_in.date, date(2023, 6, 1))
        self.assertEqual(board.current_streak, 0)
        self.assertEqual(board.last_check_in_date, date(2023, 6, 1))

    def test_unknown_board_is_not_found(self):
        with self.assertRaises(NotFoundError):
            self.service.record_check_in(999999)

    def test_other_users_board_is_not_found(self):
        foreign_board = self.create_board(name="Theirs", user=self.other_user)

        with self.assertRaises(NotFoundError):
            self.service.record_check_in(foreign_board.id)
        self.assertFalse(CheckIn.objects.filter(board=foreign_board).exists())

    def test_grace_period_through_service(self):
        board = self.check_in_days_ago(2, 1)

        self.assertEqual(board.current_streak, 2)
        self.assertEqual(board.last_check_in_date, self.today - timedelta(days=1))

    def test_gap_of_two_days_resets_streak(self):
        board = self.check_in_days_ago(3, 2)

        self.assertEqual(board.current_streak, 0)
        self.assertEqual(board.longest_streak, 0)

    def test_same_day_sessions_are_numbered(self):
        sessions = [self.service.record_check_in(self.board.id)[0].session_number for _ in range(3)]

        self.assertEqual(sessions, [1, 2, 3])
        self.board.refresh_from_db()
        self.assertEqual(self.board.total_check_ins, 3)
        self.assertEqual(self.board.current_streak, 1)

    def test_session_numbers_are_per_day_and_per_board(self):
        yesterday = self.today - timedelta(days=1)
        other_board = self.create_board(name="Running")

        self.service.record_check_in(self.board.id)
        first_yesterday, _ = self.service.record_check_in(self.board.id, requested_date=yesterday)
        first_other, _ = self.service.record_check_in(other_board.id)

        self.assertEqual(first_yesterday.session_number, 1)
        self.assertEqual(first_other.session_number, 1)

    def test_deleting_middle_session_does_not_renumber(self):
        first, _ = self.service.record_check_in(self.board.id)
        middle, _ = self.service.record_check_in(self.board.id)
        last, _ = self.service.record_check_in(self.board.id)

        board = self.service.delete_check_in(middle.id)

        remaining = list(CheckIn.objects.filter(board=self.board).order_by('session_number').values_list('session_number', flat=True))
        self.assertEqual(remaining, [1, 3])
        self.assertEqual(board.total_check_ins, 2)

        # The gap is not reused
        next_check_in, _ = self.service.record_check_in(self.board.id)
        self.assertEqual(next_check_in.session_number, 4)

    def test_longest_streak_survives_deletions(self):
        board = self.check_in_days_ago(4, 3, 2, 1, 0)
        self.assertEqual(board.current_streak, 5)
        self.assertEqual(board.longest_streak, 5)

        for check_in in CheckIn.objects.filter(board=self.board, date__gte=self.today - timedelta(days=1)):
            board = self.service.delete_check_in(check_in.id)

        self.assertEqual(board.current_streak, 0)
        self.assertEqual(board.longest_streak, 5)

    def test_total_matches_row_count_after_mixed_writes(self):
        created = []
        for n in (0, 0, 1, 2, 5):
            check_in, _ = self.service.record_check_in(self.board.id, requested_date=self.today - timedelta(days=n))
            created.append(check_in)
        self.service.delete_check_in(created[1].id)
        self.service.delete_check_in(created[4].id)
        self.service.record_check_in(self.board.id, requested_date=self.today - timedelta(days=3))

        self.board.refresh_from_db()
        self.assertEqual(self.board.total_check_ins, CheckIn.objects.filter(board=self.board).count())
        self.assertEqual(self.board.total_check_ins, 4)
        self.assertEqual(self.board.current_streak, 4)

    def test_deleting_last_check_in_clears_last_date(self):
        check_in, _ = self.service.record_check_in(self.board.id)

        board = self.service.delete_check_in(check_in.id)

        self.assertEqual(board.total_check_ins, 0)
        self.assertIsNone(board.last_check_in_date)
        self.assertEqual(board.current_streak, 0)
        self.assertEqual(board.longest_streak, 1)

    def test_delete_other_users_check_in_is_not_found(self):
        foreign_board = self.create_board(name="Theirs", user=self.other_user)
        foreign_service = CheckInService(self.other_user, today=self.today)
        foreign_check_in, _ = foreign_service.record_check_in(foreign_board.id)

        with self.assertRaises(NotFoundError):
            self.service.delete_check_in(foreign_check_in.id)
        self.assertTrue(CheckIn.objects.filter(id=foreign_check_in.id).exists())

    def test_update_changes_only_given_fields_without_recompute(self):
        check_in, _ = self.service.record_check_in(self.board.id, amount=Decimal('1'), note="first")

        with patch.object(AggregateMaintainer, 'recompute') as mock_recompute:
            updated = self.service.update_check_in(check_in.id, note="edited")

        mock_recompute.assert_not_called()
        updated.refresh_from_db()
        self.assertEqual(updated.note, "edited")
        self.assertEqual(updated.amount, Decimal('1.00'))

    def test_update_can_clear_amount(self):
        check_in, _ = self.service.record_check_in(self.board.id, amount=Decimal('3'))

        updated = self.service.update_check_in(check_in.id, amount=None)

        updated.refresh_from_db()
        self.assertIsNone(updated.amount)

    def test_update_missing_check_in(self):
        with self.assertRaises(NotFoundError):
            self.service.update_check_in(424242, note="nope")

    def test_quick_check_in_by_name(self):
        check_in, board = self.service.quick_check_in(board_name="Reading", note="quick")

        self.assertEqual(check_in.board_id, self.board.id)
        self.assertEqual(check_in.date, self.today)
        self.assertEqual(board.total_check_ins, 1)

    def test_quick_check_in_skips_archived_boards(self):
        self.board.archive()

        with self.assertRaises(NotFoundError):
            self.service.quick_check_in(board_id=self.board.id)
        with self.assertRaises(NotFoundError):
            self.service.quick_check_in(board_name="Reading")

    def test_quick_check_in_needs_a_board(self):
        with self.assertRaises(NotFoundError):
            self.service.quick_check_in()


class RecomputeTestCase(TestCase):

    def setUp(self):
        self.user = User.objects.create_user(username='recompute', password='testpass123')
        self.today = date(2024, 1, 10)
        self.board = Board.objects.create(user=self.user, name="Meditation")
        for n in (0, 1, 1, 3):
            CheckIn.objects.create(
                board=self.board,
                user=self.user,
                date=self.today - timedelta(days=n),
                session_number=CheckIn.objects.filter(board=self.board, date=self.today - timedelta(days=n)).count() + 1,
            )

    def test_recompute_is_idempotent(self):
        with transaction.atomic():
            AggregateMaintainer.recompute(self.board, self.today)
        self.board.refresh_from_db()
        first = model_to_dict(self.board)
        first_updated_at = self.board.updated_at

        with transaction.atomic():
            AggregateMaintainer.recompute(self.board, self.today)
        self.board.refresh_from_db()

        self.assertEqual(model_to_dict(self.board), first)
        self.assertEqual(self.board.updated_at, first_updated_at)
        self.assertEqual(first['current_streak'], 2)
        self.assertEqual(first['total_check_ins'], 4)

    def test_rebuild_from_history_raises_longest_only(self):
        board = AggregateMaintainer.rebuild(self.board.id, self.today)
        self.assertEqual(board.longest_streak, 2)

        for n in (5, 6, 7, 8):
            CheckIn.objects.create(board=self.board, user=self.user, date=self.today - timedelta(days=n))
        board = AggregateMaintainer.rebuild(self.board.id, self.today, from_history=True)
        self.assertEqual(board.longest_streak, 4)

        Board.objects.filter(id=self.board.id).update(longest_streak=10)
        board = AggregateMaintainer.rebuild(self.board.id, self.today, from_history=True)
        self.assertEqual(board.longest_streak, 10)


class ConflictRetryTestCase(TestCase):
    """Simulates a racing writer by handing out a stale session number."""

    def setUp(self):
        self.user = User.objects.create_user(username='racer', password='testpass123')
        self.today = date(2024, 1, 10)
        self.board = Board.objects.create(user=self.user, name="Push-ups")
        self.service = CheckInService(self.user, today=self.today)
        self.service.record_check_in(self.board.id)

    def test_stale_session_number_is_retried(self):
        real_next_session_number = checkin_service.next_session_number
        calls = []

        def stale_then_real(board, check_in_date):
            calls.append(check_in_date)
            if len(calls) == 1:
                return 1  # as if counted before the other request committed
            return real_next_session_number(board, check_in_date)

        with patch('boards.services.checkin_service.next_session_number', side_effect=stale_then_real):
            check_in, board = self.service.record_check_in(self.board.id)

        self.assertEqual(len(calls), 2)
        self.assertEqual(check_in.session_number, 2)
        self.assertEqual(board.total_check_ins, 2)

    def test_conflict_surfaces_after_bounded_attempts(self):
        with patch('boards.services.checkin_service.next_session_number', return_value=1) as mock_next:
            with self.assertRaises(ConcurrentUpdateConflict):
                self.service.record_check_in(self.board.id)

        self.assertEqual(mock_next.call_count, 3)
        self.board.refresh_from_db()
        self.assertEqual(self.board.total_check_ins, 1)
        self.assertEqual(CheckIn.objects.filter(board=self.board).count(), 1)
