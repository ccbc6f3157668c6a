import hashlib
import logging
import re
import secrets
from datetime import timedelta

from django.utils import timezone

from .models import ApiKey

logger = logging.getLogger(__name__)

KEY_PATTERN = re.compile(r'^chk_(live|test)_[A-Za-z0-9_-]{43}$')
PREFIX_LENGTH = 12


class ApiKeyService:
    """Issue, look up and revoke API keys. Raw keys are never stored."""

    @staticmethod
    def generate_key(environment='live'):
        """Return (raw_key, key_hash, key_prefix) for a fresh key."""
        raw_key = f"chk_{environment}_{secrets.token_urlsafe(32)}"
        return raw_key, ApiKeyService.hash_key(raw_key), raw_key[:PREFIX_LENGTH]

    @staticmethod
    def hash_key(raw_key):
        return hashlib.sha256(raw_key.encode('utf-8')).hexdigest()

    @staticmethod
    def is_valid_format(raw_key):
        return bool(KEY_PATTERN.match(raw_key or ''))

    @staticmethod
    def find_by_key(raw_key):
        """Return the non-revoked ApiKey matching ``raw_key``, or None."""
        if not ApiKeyService.is_valid_format(raw_key):
            return None

        return ApiKey.objects.select_related('user').filter(
            key_prefix=raw_key[:PREFIX_LENGTH],
            key_hash=ApiKeyService.hash_key(raw_key),
            is_revoked=False,
        ).first()

    @staticmethod
    def create_for_user(user, name, scopes=None, expires_in_days=None):
        """Create a key and return (api_key, raw_key). The raw key is shown once."""
        raw_key, key_hash, key_prefix = ApiKeyService.generate_key()
        expires_at = timezone.now() + timedelta(days=expires_in_days) if expires_in_days else None

        api_key = ApiKey.objects.create(
            user=user,
            name=name,
            key_hash=key_hash,
            key_prefix=key_prefix,
            scopes=list(scopes or ['read']),
            expires_at=expires_at,
        )
        logger.info(f"API key {api_key.id} created for user {user.id} with scopes {api_key.scopes}")
        return api_key, raw_key

    @staticmethod
    def revoke(api_key):
        api_key.is_revoked = True
        api_key.revoked_at = timezone.now()
        api_key.save(update_fields=['is_revoked', 'revoked_at', 'updated_at'])
        logger.info(f"API key {api_key.id} revoked")
        return api_key

    @staticmethod
    def record_usage(api_key, ip_address):
        api_key.last_used_at = timezone.now()
        api_key.last_used_ip = ip_address
        api_key.save(update_fields=['last_used_at', 'last_used_ip', 'updated_at'])


def extract_key(request):
    """Read the raw key from X-API-Key or an Authorization: Bearer header."""
    api_key_header = request.headers.get('X-API-Key')
    if api_key_header:
        return api_key_header

    auth_header = request.headers.get('Authorization', '')
    if auth_header.startswith('Bearer '):
        return auth_header[len('Bearer '):]
    return None
