"""
Registry module operations: create, publish from VCS, read, create version, and the delete family.

Every operation checks the caller's context, validates identifiers in parameter order
(organization, name, provider, version), builds a path from individually escaped segments and
sends exactly one request through the transport. Nothing is retried or recovered here.

Deletion cascades on the server: deleting a module removes all of its providers and versions,
deleting a provider removes all of its versions, deleting a version removes only that version.
The server models this as an explicit action (POST registry-modules/actions/delete/...), not a
DELETE on the resource path. Repeating a create or delete is expected to fail on the server
(duplicate / not found) and that failure is surfaced as-is.
"""

from __future__ import annotations

import logging
from typing import Any, Protocol

from tfe_registry import paths
from tfe_registry.context import Context
from tfe_registry.errors import DecodeError, ValidationError
from tfe_registry.models import (
    RegistryModule,
    RegistryModuleCreateOptions,
    RegistryModuleCreateVersionOptions,
    RegistryModuleCreateWithVCSConnectionOptions,
    RegistryModuleVersion,
    VCSRepoOptions,
)
from tfe_registry.schema import (
    decode_registry_module,
    decode_registry_module_version,
    encode_create_options,
    encode_create_version_options,
)
from tfe_registry.validation import require_id, require_organization, require_string

logger = logging.getLogger(__name__)


class Transport(Protocol):
    def request(
        self,
        ctx: Context,
        method: str,
        path: str,
        body: dict[str, Any] | None = None,
    ) -> dict[str, Any] | None: ...


def _validate_vcs_repo(vcs_repo: VCSRepoOptions) -> None:
    require_string("identifier", vcs_repo.identifier)
    require_string("oauth token id", vcs_repo.oauth_token_id)


def _validate_module_address(
    organization: str, name: str, *fields: tuple[str, str]
) -> None:
    """Check organization, name, then each (field, value) pair in order; first failure wins."""
    require_organization(organization)
    require_id("name", name)
    for field, value in fields:
        require_id(field, value)


class RegistryModules:
    """
    Registry module operations against one registry service.
    Holds no per-call state; safe to share between threads if the transport is.
    """

    def __init__(self, transport: Transport, strict_decoding: bool = True) -> None:
        """
        Args:
            transport: Object performing request(ctx, method, path, body)
            strict_decoding: Reject version-status records whose error message disagrees
                with their status instead of logging and accepting them
        """
        self._transport = transport
        self._strict = strict_decoding

    def _expect_document(self, result: dict[str, Any] | None, what: str) -> dict[str, Any]:
        if result is None:
            raise DecodeError(f"empty response for {what}")
        return result

    def create(
        self, ctx: Context, options: RegistryModuleCreateOptions
    ) -> RegistryModule:
        """
        Create a registry module without publishing it from VCS.
        Without a VCS repo, name and provider are required. The new module reports pending.
        """
        ctx.check()
        if options.vcs_repo is None:
            require_id("name", options.name)
            require_id("provider", options.provider)
        else:
            if options.name is not None:
                require_id("name", options.name)
            if options.provider is not None:
                require_id("provider", options.provider)
            _validate_vcs_repo(options.vcs_repo)

        result = self._transport.request(
            ctx, "POST", paths.collection_path(), encode_create_options(options)
        )
        module = decode_registry_module(
            self._expect_document(result, "create"), strict=self._strict
        )
        logger.info(
            "Created registry module %s/%s (%s)", module.name, module.provider, module.id
        )
        return module

    def create_with_vcs_connection(
        self, ctx: Context, options: RegistryModuleCreateWithVCSConnectionOptions
    ) -> RegistryModule:
        """
        Create a module and start publishing it from a VCS repository.
        Publishing (clone and ingest) is asynchronous: the returned module is normally pending;
        read() it later to observe setup_complete or setup_failed.
        """
        ctx.check()
        if options.vcs_repo is None:
            raise ValidationError("vcs repo is required")
        _validate_vcs_repo(options.vcs_repo)

        result = self._transport.request(
            ctx, "POST", paths.collection_path(), encode_create_options(options)
        )
        module = decode_registry_module(
            self._expect_document(result, "create with VCS connection"),
            strict=self._strict,
        )
        logger.info(
            "Publishing registry module %s from %s",
            module.id,
            options.vcs_repo.identifier,
        )
        return module

    def read(
        self, ctx: Context, organization: str, name: str, provider: str
    ) -> RegistryModule:
        """Fetch the current state of a module. Use repeated reads to poll its status."""
        ctx.check()
        _validate_module_address(organization, name, ("provider", provider))

        path = paths.collection_path(paths.show_path(organization, name, provider))
        result = self._transport.request(ctx, "GET", path)
        return decode_registry_module(
            self._expect_document(result, "read"), strict=self._strict
        )

    def create_version(
        self,
        ctx: Context,
        organization: str,
        name: str,
        provider: str,
        options: RegistryModuleCreateVersionOptions,
    ) -> RegistryModuleVersion:
        """
        Register a new version for a non-VCS module.
        The returned version carries the upload link the tarball must be sent to.
        """
        ctx.check()
        _validate_module_address(organization, name, ("provider", provider))
        require_id("version", options.version)

        path = paths.collection_path(paths.versions_path(organization, name, provider))
        result = self._transport.request(
            ctx, "POST", path, encode_create_version_options(options)
        )
        return decode_registry_module_version(
            self._expect_document(result, "create version")
        )

    def delete(self, ctx: Context, organization: str, name: str) -> None:
        """Delete a whole module: every provider and every version under it."""
        ctx.check()
        _validate_module_address(organization, name)

        path = paths.collection_path(paths.delete_path(organization, name))
        self._transport.request(ctx, "POST", path)
        logger.info("Deleted registry module %s/%s", organization, name)

    def delete_provider(
        self, ctx: Context, organization: str, name: str, provider: str
    ) -> None:
        """Delete one provider of a module and all of that provider's versions."""
        ctx.check()
        _validate_module_address(organization, name, ("provider", provider))

        path = paths.collection_path(paths.delete_path(organization, name, provider))
        self._transport.request(ctx, "POST", path)
        logger.info(
            "Deleted registry module provider %s/%s/%s", organization, name, provider
        )

    def delete_version(
        self,
        ctx: Context,
        organization: str,
        name: str,
        provider: str,
        version: str,
    ) -> None:
        """Delete a single module version. Sibling versions are not affected."""
        ctx.check()
        _validate_module_address(
            organization, name, ("provider", provider), ("version", version)
        )

        path = paths.collection_path(
            paths.delete_path(organization, name, provider, version)
        )
        self._transport.request(ctx, "POST", path)
        logger.info(
            "Deleted registry module version %s/%s/%s/%s",
            organization,
            name,
            provider,
            version,
        )
