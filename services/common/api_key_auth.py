"""
Shared API key authentication and authorization helpers for platform services.

Each service declares its own ``API_KEY_CONFIGS`` (which settings attribute
holds a key, which client uses it, and what it may do) together with its
``get_settings`` function, and builds FastAPI dependencies from them here.
"""

from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional

from fastapi import Request

from services.common.http_errors import AuthError, ErrorCode
from services.common.logging_config import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class APIKeyConfig:
    client: str
    service: str
    permissions: List[str]
    settings_key: str  # Attribute on the settings object holding the key value


def build_api_key_mapping(
    api_key_configs: Dict[str, APIKeyConfig], get_settings: Callable[[], Any]
) -> Dict[str, APIKeyConfig]:
    """
    Build a mapping from actual API key values to their configurations.
    """
    settings = get_settings()
    api_key_mapping = {}
    for config in api_key_configs.values():
        actual_key_value = getattr(settings, config.settings_key, None)
        if actual_key_value:
            api_key_mapping[actual_key_value] = config
        else:
            logger.warning(f"API key not found in settings: {config.settings_key}")
    return api_key_mapping


def get_api_key_from_request(request: Request) -> Optional[str]:
    """
    Extract the API key from X-API-Key, Authorization: Bearer or X-Service-Key.
    """
    api_key = request.headers.get("X-API-Key")
    if api_key:
        return api_key
    authorization = request.headers.get("Authorization")
    if authorization and authorization.startswith("Bearer "):
        return authorization[7:]
    service_key = request.headers.get("X-Service-Key")
    if service_key:
        return service_key
    return None


def has_permissions(
    api_key: str,
    required_permissions: List[str],
    api_key_mapping: Dict[str, APIKeyConfig],
) -> bool:
    key_config = api_key_mapping.get(api_key)
    if not key_config:
        return False
    return all(perm in key_config.permissions for perm in required_permissions)


def make_verify_service_authentication(
    api_key_configs: Dict[str, APIKeyConfig], get_settings: Callable[[], Any]
) -> Callable[[Request], str]:
    def verify_service_authentication(request: Request) -> str:
        """Verify the request's API key and return the service name it unlocks."""
        api_key = get_api_key_from_request(request)
        if not api_key:
            logger.warning("Missing API key in request headers")
            raise AuthError(message="API key required", status_code=401)

        key_config = build_api_key_mapping(api_key_configs, get_settings).get(api_key)
        if not key_config:
            logger.warning(f"Invalid API key: {api_key[:8]}...")
            raise AuthError(
                message="Invalid API key",
                code=ErrorCode.ACCESS_DENIED,
                status_code=403,
            )

        request.state.api_key = api_key
        request.state.service_name = key_config.service
        request.state.client_name = key_config.client
        logger.debug(
            f"Service authenticated: {key_config.service} (client: {key_config.client})"
        )
        return key_config.service

    return verify_service_authentication


def make_service_permission_required(
    required_permissions: List[str],
    api_key_configs: Dict[str, APIKeyConfig],
    get_settings: Callable[[], Any],
) -> Callable[[Request], Any]:
    verify_service_authentication = make_verify_service_authentication(
        api_key_configs, get_settings
    )

    async def dependency(request: Request) -> str:
        service_name = verify_service_authentication(request)
        api_key = request.state.api_key
        api_key_mapping = build_api_key_mapping(api_key_configs, get_settings)

        if not has_permissions(api_key, required_permissions, api_key_mapping):
            client_name = getattr(request.state, "client_name", "unknown")
            logger.warning(
                f"Permission denied: {client_name} lacks permissions {required_permissions}",
                service=service_name,
                client=client_name,
                api_key_prefix=api_key[:8],
            )
            raise AuthError(
                message=f"Insufficient permissions. Required: {required_permissions}",
                code=ErrorCode.ACCESS_DENIED,
                status_code=403,
            )
        return service_name

    return dependency
