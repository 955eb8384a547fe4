"""
Client for a private module registry: create, publish and delete versioned modules and observe
their provisioning status.

Example:
    from tfe_registry import Client, Context, RegistryModuleCreateOptions, load_config

    with Client.from_config(load_config()) as client:
        ctx = Context.background().with_timeout(30)
        module = client.registry_modules.create(
            ctx, RegistryModuleCreateOptions(name="vpc", provider="aws")
        )
        client.registry_modules.delete_provider(ctx, "acme", "vpc", "aws")
"""

from __future__ import annotations

from tfe_registry.client import Client
from tfe_registry.config import get_registry_section, load_config
from tfe_registry.context import Context
from tfe_registry.errors import (
    ConflictError,
    DeadlineExceeded,
    DecodeError,
    NotFoundError,
    OperationCancelled,
    RegistryError,
    RemoteError,
    UnauthorizedError,
    ValidationError,
)
from tfe_registry.logging import configure_logging, get_logger
from tfe_registry.models import (
    Organization,
    RegistryModule,
    RegistryModuleCreateOptions,
    RegistryModuleCreateVersionOptions,
    RegistryModuleCreateWithVCSConnectionOptions,
    RegistryModulePermissions,
    RegistryModuleStatus,
    RegistryModuleVersion,
    RegistryModuleVersionStatus,
    RegistryModuleVersionStatuses,
    VCSRepoOptions,
    is_legal_transition,
)
from tfe_registry.registry_modules import RegistryModules

__all__ = [
    "Client",
    "ConflictError",
    "Context",
    "DeadlineExceeded",
    "DecodeError",
    "NotFoundError",
    "OperationCancelled",
    "Organization",
    "RegistryError",
    "RegistryModule",
    "RegistryModuleCreateOptions",
    "RegistryModuleCreateVersionOptions",
    "RegistryModuleCreateWithVCSConnectionOptions",
    "RegistryModulePermissions",
    "RegistryModuleStatus",
    "RegistryModuleVersion",
    "RegistryModuleVersionStatus",
    "RegistryModuleVersionStatuses",
    "RegistryModules",
    "RemoteError",
    "UnauthorizedError",
    "ValidationError",
    "VCSRepoOptions",
    "configure_logging",
    "get_logger",
    "get_registry_section",
    "is_legal_transition",
    "load_config",
]
