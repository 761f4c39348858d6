# Startup check for the bridge permission table
from typing import Mapping

from core.errors import ConfigError

# Entries shipped in the example config
EXAMPLE_PERMISSION_KEYS = ("*", "example.com", "@admin:example.com")


def validate_permissions(permissions: Mapping[str, str]) -> None:
    """Refuse a permission table that holds nothing but the example entries."""

    example_count = sum(1 for key in EXAMPLE_PERMISSION_KEYS if key in permissions)
    if len(permissions) <= example_count:
        raise ConfigError("permissions not configured")
