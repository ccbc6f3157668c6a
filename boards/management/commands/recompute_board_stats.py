from django.core.management.base import BaseCommand, CommandError

from boards.models import Board
from boards.services.aggregates import AggregateMaintainer
from boards.timezones import today_for_user


class Command(BaseCommand):
    help = 'Re-derive board statistics from their check-ins (backfill / repair)'

    def add_arguments(self, parser):
        parser.add_argument(
            '--user',
            type=str,
            help='Only boards owned by this username',
        )
        parser.add_argument(
            '--board',
            type=int,
            help='Only this board id',
        )
        parser.add_argument(
            '--from-history',
            action='store_true',
            help='Also raise longest streaks to the longest run found in the history',
        )

    def handle(self, *args, **options):
        boards = Board.objects.select_related('user').order_by('id')
        if options['user']:
            boards = boards.filter(user__username=options['user'])
        if options['board']:
            boards = boards.filter(id=options['board'])

        if not boards.exists():
            raise CommandError("No boards matched")

        self.stdout.write(f"Recomputing statistics for {boards.count()} board(s)...")

        changed = 0
        for board in boards:
            before = (board.current_streak, board.longest_streak, board.total_check_ins, board.last_check_in_date)
            board = AggregateMaintainer.rebuild(
                board.id,
                today_for_user(board.user),
                from_history=options['from_history'],
            )
            after = (board.current_streak, board.longest_streak, board.total_check_ins, board.last_check_in_date)

            if before != after:
                changed += 1
                self.stdout.write(
                    f"  {board.name} (#{board.id}): streak {before[0]} -> {after[0]}, "
                    f"longest {before[1]} -> {after[1]}, total {before[2]} -> {after[2]}"
                )

        self.stdout.write(self.style.SUCCESS(f"Done. {changed} board(s) changed."))
