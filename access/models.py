from django.db import models
from django.contrib.auth.models import User
from django.utils import timezone


class ApiKey(models.Model):
    """Bearer credential granting a user a set of scopes."""

    SCOPE_CHOICES = [
        ('read', 'Read'),
        ('write', 'Write'),
        ('delete', 'Delete'),
        ('admin', 'Admin'),
    ]
    SCOPES = [value for value, label in SCOPE_CHOICES]

    user = models.ForeignKey(User, on_delete=models.CASCADE, related_name='api_keys')
    name = models.CharField(max_length=100)
    key_hash = models.CharField(max_length=64, unique=True, help_text="SHA-256 of the raw key")
    key_prefix = models.CharField(max_length=12, db_index=True)
    scopes = models.JSONField(default=list)
    expires_at = models.DateTimeField(null=True, blank=True)
    last_used_at = models.DateTimeField(null=True, blank=True)
    last_used_ip = models.GenericIPAddressField(null=True, blank=True)
    is_revoked = models.BooleanField(default=False)
    revoked_at = models.DateTimeField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-created_at']
        verbose_name = 'API Key'
        verbose_name_plural = 'API Keys'

    def __str__(self):
        return f"{self.name} ({self.key_prefix}…) for {self.user.username}"

    def has_scope(self, scope):
        return scope in self.scopes or 'admin' in self.scopes

    @property
    def is_expired(self):
        return self.expires_at is not None and self.expires_at < timezone.now()

    def is_valid(self):
        return not self.is_revoked and not self.is_expired

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'keyPrefix': self.key_prefix,
            'scopes': self.scopes,
            'expiresAt': self.expires_at.isoformat() if self.expires_at else None,
            'lastUsedAt': self.last_used_at.isoformat() if self.last_used_at else None,
            'lastUsedIp': self.last_used_ip,
            'isRevoked': self.is_revoked,
            'revokedAt': self.revoked_at.isoformat() if self.revoked_at else None,
            'createdAt': self.created_at.isoformat() if self.created_at else None,
        }
