from django.contrib import admin

from .models import ApiKey


@admin.register(ApiKey)
class ApiKeyAdmin(admin.ModelAdmin):
    list_display = ('name', 'user', 'key_prefix', 'scopes', 'is_revoked', 'expires_at', 'last_used_at', 'created_at')
    list_filter = ('is_revoked', 'created_at', 'user')
    search_fields = ('name', 'key_prefix', 'user__username', 'user__email')
    readonly_fields = ('key_hash', 'key_prefix', 'last_used_at', 'last_used_ip', 'revoked_at', 'created_at', 'updated_at')
    raw_id_fields = ('user',)

    fieldsets = (
        ('Key', {
            'fields': ('user', 'name', 'scopes', 'expires_at')
        }),
        ('Status', {
            'fields': ('is_revoked', 'revoked_at', 'last_used_at', 'last_used_ip')
        }),
        ('Stored Secret', {
            'fields': ('key_prefix', 'key_hash'),
            'classes': ('collapse',)
        }),
        ('Timestamps', {
            'fields': ('created_at', 'updated_at'),
            'classes': ('collapse',)
        })
    )

    def get_queryset(self, request):
        return super().get_queryset(request).select_related('user')
