"""
Dependency injection container using dependency-injector.
Wires configuration, the authorization gate and the health check.
"""

from dependency_injector import containers, providers

from contact_directory.core.config import settings
from contact_directory.controllers.health_controller import HealthController
from contact_directory.deps.auth import TokenAuthorizationGate
from contact_directory.services.health_service import HealthService


class Container(containers.DeclarativeContainer):
    """Dependency injection container."""

    # Configuration
    config = providers.Configuration()

    # Authorization gate
    authorization_gate = providers.Singleton(
        TokenAuthorizationGate,
        tokens=config.admin_api_tokens,
    )

    # Services
    health_service = providers.Singleton(
        HealthService,
    )

    # Controllers
    health_controller = providers.Factory(
        HealthController,
        health_service=health_service,
    )


def build_container() -> Container:
    """Create a container configured from application settings."""
    container = Container()
    container.config.from_dict({
        "database_url": settings.DATABASE_URL,
        "admin_api_tokens": list(settings.ADMIN_API_TOKENS),
    })
    return container


# Global container instance
_container: Container = None


def get_container() -> Container:
    """Get the global dependency injection container."""
    global _container
    if _container is None:
        _container = build_container()
    return _container


def set_container(container: Container) -> None:
    """Install ``container`` as the global instance."""
    global _container
    _container = container
