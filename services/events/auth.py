"""
Permission-based API key authentication for the Events Service.

Uses the common api_key_auth implementation to provide consistent
authentication patterns across platform services.
"""

from typing import Any, Callable, Dict, List

from fastapi import Request

from services.common.api_key_auth import (
    APIKeyConfig,
    make_service_permission_required,
)
from services.events.settings import get_settings

# API Key configurations mapped by settings key names
API_KEY_CONFIGS: Dict[str, APIKeyConfig] = {
    "api_frontend_events_key": APIKeyConfig(
        client="frontend",
        service="events-service-access",
        permissions=["read_events", "write_events"],
        settings_key="api_frontend_events_key",
    ),
}


def service_permission_required(
    required_permissions: List[str],
) -> Callable[[Request], Any]:
    """Require specific permissions for API key authentication."""
    return make_service_permission_required(
        required_permissions,
        API_KEY_CONFIGS,
        get_settings,
    )
