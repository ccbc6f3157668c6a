from django.contrib import admin

from .models import Board, CheckIn, UserPreference
from .services.aggregates import AggregateMaintainer
from .timezones import today_for_user


@admin.register(Board)
class BoardAdmin(admin.ModelAdmin):
    list_display = ('name', 'emoji', 'user', 'unit_type', 'current_streak', 'longest_streak', 'total_check_ins', 'last_check_in_date', 'is_archived', 'updated_at')
    list_filter = ('unit_type', 'is_archived', 'created_at', 'user')
    search_fields = ('name', 'description', 'user__username', 'user__email')
    readonly_fields = ('current_streak', 'longest_streak', 'total_check_ins', 'last_check_in_date', 'archived_at', 'created_at', 'updated_at')
    date_hierarchy = 'created_at'
    actions = ['recompute_statistics']

    fieldsets = (
        ('Basic Information', {
            'fields': ('user', 'name', 'description', 'emoji', 'color')
        }),
        ('Units & Target', {
            'fields': ('unit_type', 'unit', 'target_amount')
        }),
        ('Statistics', {
            'fields': ('current_streak', 'longest_streak', 'total_check_ins', 'last_check_in_date'),
            'classes': ('collapse',)
        }),
        ('Status & Timestamps', {
            'fields': ('is_archived', 'archived_at', 'created_at', 'updated_at'),
            'classes': ('collapse',)
        })
    )

    def get_queryset(self, request):
        return super().get_queryset(request).select_related('user')

    @admin.action(description="Recompute statistics from check-ins")
    def recompute_statistics(self, request, queryset):
        for board in queryset:
            AggregateMaintainer.rebuild(board.id, today_for_user(board.user))
        self.message_user(request, f"Recomputed statistics for {queryset.count()} board(s).")


@admin.register(CheckIn)
class CheckInAdmin(admin.ModelAdmin):
    list_display = ('board', 'user', 'date', 'session_number', 'amount', 'timestamp')
    list_filter = ('date', 'board__unit_type', 'user')
    search_fields = ('board__name', 'user__username', 'note')
    # Creating or deleting here would bypass the aggregate recompute
    readonly_fields = ('board', 'user', 'date', 'session_number', 'timestamp', 'created_at', 'updated_at')
    date_hierarchy = 'date'

    fieldsets = (
        ('Check-in', {
            'fields': ('board', 'user', 'date', 'session_number', 'timestamp')
        }),
        ('Details', {
            'fields': ('amount', 'note')
        }),
        ('Timestamps', {
            'fields': ('created_at', 'updated_at'),
            'classes': ('collapse',)
        })
    )

    def get_queryset(self, request):
        return super().get_queryset(request).select_related('board', 'user')

    def has_add_permission(self, request):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


@admin.register(UserPreference)
class UserPreferenceAdmin(admin.ModelAdmin):
    list_display = ('user', 'timezone', 'updated_at')
    search_fields = ('user__username', 'user__email', 'timezone')
    raw_id_fields = ('user',)
