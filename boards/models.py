from django.db import models
from django.contrib.auth.models import User
from django.core.validators import MinValueValidator
from django.utils import timezone

from .conf import get_setting


class Board(models.Model):
    """A trackable habit and the statistics derived from its check-ins."""

    UNIT_TYPE_CHOICES = [
        ('boolean', 'Done / not done'),
        ('quantity', 'Quantity'),
        ('duration', 'Duration'),
    ]

    user = models.ForeignKey(User, on_delete=models.CASCADE, related_name='boards')
    name = models.CharField(max_length=50, help_text="Unique per owner")
    description = models.CharField(max_length=500, blank=True, null=True)
    emoji = models.CharField(max_length=10, default='📊')
    color = models.CharField(
        max_length=7,
        default='#3B82F6',
        help_text="Hex color code for board visualization"
    )
    unit_type = models.CharField(max_length=20, choices=UNIT_TYPE_CHOICES, default='boolean')
    unit = models.CharField(max_length=20, blank=True, null=True, help_text="Unit label (e.g., pages, minutes)")
    target_amount = models.DecimalField(
        max_digits=10, decimal_places=2, null=True, blank=True,
        validators=[MinValueValidator(0)],
        help_text="Daily target used for heatmap intensity"
    )

    # Derived from the check-in set by AggregateMaintainer only
    current_streak = models.PositiveIntegerField(default=0)
    longest_streak = models.PositiveIntegerField(default=0)
    total_check_ins = models.PositiveIntegerField(default=0)
    last_check_in_date = models.DateField(null=True, blank=True)

    is_archived = models.BooleanField(default=False)
    archived_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    AGGREGATE_FIELDS = ['current_streak', 'longest_streak', 'total_check_ins', 'last_check_in_date']

    class Meta:
        ordering = ['-updated_at']
        constraints = [
            models.UniqueConstraint(fields=['user', 'name'], name='unique_board_name_per_user'),
        ]
        indexes = [
            models.Index(fields=['user', 'is_archived'], name='board_user_archived_idx'),
        ]

    def __str__(self):
        return f"{self.emoji} {self.name}"

    def archive(self):
        self.is_archived = True
        self.archived_at = timezone.now()
        self.save(update_fields=['is_archived', 'archived_at', 'updated_at'])

    def restore(self):
        self.is_archived = False
        self.archived_at = None
        self.save(update_fields=['is_archived', 'archived_at', 'updated_at'])

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'description': self.description,
            'emoji': self.emoji,
            'color': self.color,
            'unitType': self.unit_type,
            'unit': self.unit,
            'targetAmount': float(self.target_amount) if self.target_amount is not None else None,
            'currentStreak': self.current_streak,
            'longestStreak': self.longest_streak,
            'totalCheckIns': self.total_check_ins,
            'isArchived': self.is_archived,
            'archivedAt': self.archived_at.isoformat() if self.archived_at else None,
            'lastCheckInDate': self.last_check_in_date.isoformat() if self.last_check_in_date else None,
            'createdAt': self.created_at.isoformat() if self.created_at else None,
            'updatedAt': self.updated_at.isoformat() if self.updated_at else None,
        }


class CheckIn(models.Model):
    """One recorded completion of a board's habit."""

    SESSION_CONSTRAINT = 'unique_session_per_board_day'

    board = models.ForeignKey(Board, on_delete=models.CASCADE, related_name='check_ins')
    # Denormalized from board so ownership checks skip the join
    user = models.ForeignKey(User, on_delete=models.CASCADE, related_name='check_ins')
    date = models.DateField(help_text="Calendar date in the owner's timezone")
    timestamp = models.DateTimeField(default=timezone.now)
    amount = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)
    note = models.CharField(max_length=500, blank=True, null=True)
    session_number = models.PositiveIntegerField(
        default=1,
        help_text="1-based ordinal among same-day check-ins; never renumbered"
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-date', '-timestamp']
        constraints = [
            models.UniqueConstraint(
                fields=['board', 'date', 'session_number'],
                name='unique_session_per_board_day',
            ),
        ]
        indexes = [
            models.Index(fields=['board', 'date'], name='checkin_board_date_idx'),
            models.Index(fields=['user', 'date'], name='checkin_user_date_idx'),
            models.Index(fields=['board', 'timestamp'], name='checkin_board_timestamp_idx'),
        ]

    def __str__(self):
        return f"{self.board.name} - {self.date} #{self.session_number}"

    def to_dict(self, include_board=False):
        data = {
            'id': self.id,
            'date': self.date.isoformat(),
            'timestamp': self.timestamp.isoformat(),
            'amount': float(self.amount) if self.amount is not None else None,
            'note': self.note,
            'sessionNumber': self.session_number,
            'createdAt': self.created_at.isoformat() if self.created_at else None,
        }
        if include_board:
            data['boardId'] = self.board_id
        return data


class UserPreference(models.Model):
    """Per-user settings that affect how "today" is resolved."""

    user = models.OneToOneField(User, on_delete=models.CASCADE, related_name='board_preferences')
    timezone = models.CharField(max_length=64, default='UTC', help_text="IANA timezone name, e.g. Europe/Berlin")

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = 'User Preference'
        verbose_name_plural = 'User Preferences'

    def __str__(self):
        return f"Preferences for {self.user.username}"

    @classmethod
    def get_or_create_for_user(cls, user):
        """Get or create board preferences for a user."""
        prefs, created = cls.objects.get_or_create(
            user=user,
            defaults={'timezone': get_setting('DEFAULT_TIMEZONE')}
        )
        return prefs
