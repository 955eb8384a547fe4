"""
JSON:API encoding and decoding for registry resources.
Each entity declares its wire names once, in the mapping tables below.
"""

from __future__ import annotations

import logging
from typing import Any

from tfe_registry.errors import DecodeError
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
)

logger = logging.getLogger(__name__)

REGISTRY_MODULES_TYPE = "registry-modules"
REGISTRY_MODULE_VERSIONS_TYPE = "registry-module-versions"

# python attribute -> wire attribute
REGISTRY_MODULE_ATTRIBUTES: dict[str, str] = {
    "name": "name",
    "provider": "provider",
    "status": "status",
    "version_statuses": "version-statuses",
    "permissions": "permissions",
    "created_at": "created-at",
    "updated_at": "updated-at",
}
REGISTRY_MODULE_RELATIONS: dict[str, str] = {"organization": "organization"}

VERSION_STATUS_ATTRIBUTES: dict[str, str] = {
    "version": "version",
    "status": "status",
    "error": "error",
}

PERMISSIONS_ATTRIBUTES: dict[str, str] = {
    "can_delete": "can-delete",
    "can_resync": "can-resync",
    "can_retry": "can-retry",
}

REGISTRY_MODULE_VERSION_ATTRIBUTES: dict[str, str] = {
    "version": "version",
    "source": "source",
    "status": "status",
    "created_at": "created-at",
    "updated_at": "updated-at",
}
REGISTRY_MODULE_VERSION_RELATIONS: dict[str, str] = {
    "registry_module_id": "registry-module",
}

VCS_REPO_ATTRIBUTES: dict[str, str] = {
    "identifier": "identifier",
    "oauth_token_id": "oauth-token-id",
    "display_identifier": "display-identifier",
    "branch": "branch",
}

CREATE_OPTIONS_ATTRIBUTES: dict[str, str] = {
    "name": "name",
    "provider": "provider",
    "vcs_repo": "vcs-repo",
}

CREATE_VERSION_OPTIONS_ATTRIBUTES: dict[str, str] = {"version": "version"}


# ---- encoding ----


def encode_vcs_repo(vcs_repo: VCSRepoOptions) -> dict[str, Any]:
    """Encode VCS repo options, omitting unset optional fields."""
    out: dict[str, Any] = {}
    for attr, wire in VCS_REPO_ATTRIBUTES.items():
        value = getattr(vcs_repo, attr)
        if value is not None:
            out[wire] = value
    return out


def _document(resource_type: str, attributes: dict[str, Any]) -> dict[str, Any]:
    return {"data": {"type": resource_type, "attributes": attributes}}


def encode_create_options(
    options: RegistryModuleCreateOptions | RegistryModuleCreateWithVCSConnectionOptions,
) -> dict[str, Any]:
    """Encode either create-options type as a registry-modules request document."""
    attributes: dict[str, Any] = {}
    for attr, wire in CREATE_OPTIONS_ATTRIBUTES.items():
        value = getattr(options, attr, None)
        if value is None:
            continue
        if isinstance(value, VCSRepoOptions):
            value = encode_vcs_repo(value)
        attributes[wire] = value
    return _document(REGISTRY_MODULES_TYPE, attributes)


def encode_create_version_options(
    options: RegistryModuleCreateVersionOptions,
) -> dict[str, Any]:
    attributes = {
        wire: getattr(options, attr)
        for attr, wire in CREATE_VERSION_OPTIONS_ATTRIBUTES.items()
        if getattr(options, attr) is not None
    }
    return _document(REGISTRY_MODULE_VERSIONS_TYPE, attributes)


# ---- decoding ----


def _primary(document: Any, expected_type: str) -> dict[str, Any]:
    if not isinstance(document, dict) or not isinstance(document.get("data"), dict):
        raise DecodeError("response has no JSON:API data object")
    data = document["data"]
    resource_type = data.get("type")
    if resource_type != expected_type:
        raise DecodeError(
            f"expected resource type {expected_type!r}, got {resource_type!r}"
        )
    if not data.get("id"):
        raise DecodeError(f"{expected_type} resource has no id")
    return data


def _string(attributes: dict[str, Any], wire: str) -> str:
    value = attributes.get(wire)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise DecodeError(f"attribute {wire!r} must be a string")
    return value


def _relation_id(data: dict[str, Any], wire: str) -> str | None:
    rel = (data.get("relationships") or {}).get(wire) or {}
    target = rel.get("data")
    if isinstance(target, dict) and target.get("id"):
        return str(target["id"])
    return None


def decode_permissions(raw: Any) -> RegistryModulePermissions | None:
    if raw is None:
        return None
    if not isinstance(raw, dict):
        raise DecodeError("attribute 'permissions' must be an object")
    return RegistryModulePermissions(
        **{attr: bool(raw.get(wire, False)) for attr, wire in PERMISSIONS_ATTRIBUTES.items()}
    )


def decode_version_status(raw: Any, strict: bool = True) -> RegistryModuleVersionStatuses:
    """
    Decode one version-statuses entry.
    An error message must be present exactly when the status is a failed one. In strict mode a
    mismatch raises DecodeError; otherwise it is logged and the record kept as reported.
    """
    if not isinstance(raw, dict):
        raise DecodeError("version-statuses entries must be objects")
    version = _string(raw, VERSION_STATUS_ATTRIBUTES["version"])
    status_raw = _string(raw, VERSION_STATUS_ATTRIBUTES["status"])
    error = _string(raw, VERSION_STATUS_ATTRIBUTES["error"])
    status = RegistryModuleVersionStatus(status_raw)
    if status is RegistryModuleVersionStatus.UNKNOWN:
        logger.debug("Unrecognized version status %r for %s", status_raw, version)
    elif status.is_failed != bool(error):
        if status.is_failed:
            msg = f"version {version!r} reports {status_raw} without an error message"
        else:
            msg = f"version {version!r} reports {status_raw} with error {error!r}"
        if strict:
            raise DecodeError(msg)
        logger.warning("Inconsistent version status: %s", msg)
    return RegistryModuleVersionStatuses(
        version=version, status=status, error=error, status_raw=status_raw
    )


def decode_registry_module(document: Any, strict: bool = True) -> RegistryModule:
    """Decode a registry-modules JSON:API document into a RegistryModule."""
    data = _primary(document, REGISTRY_MODULES_TYPE)
    attributes = data.get("attributes") or {}
    wire = REGISTRY_MODULE_ATTRIBUTES

    status_raw = _string(attributes, wire["status"])
    status = RegistryModuleStatus(status_raw)
    if status is RegistryModuleStatus.UNKNOWN:
        logger.debug("Unrecognized module status %r for %s", status_raw, data["id"])

    raw_versions = attributes.get(wire["version_statuses"]) or []
    if not isinstance(raw_versions, list):
        raise DecodeError("attribute 'version-statuses' must be an array")

    org_name = _relation_id(data, REGISTRY_MODULE_RELATIONS["organization"])
    return RegistryModule(
        id=str(data["id"]),
        name=_string(attributes, wire["name"]),
        provider=_string(attributes, wire["provider"]),
        status=status,
        status_raw=status_raw,
        version_statuses=[decode_version_status(v, strict=strict) for v in raw_versions],
        permissions=decode_permissions(attributes.get(wire["permissions"])),
        created_at=_string(attributes, wire["created_at"]),
        updated_at=_string(attributes, wire["updated_at"]),
        organization=Organization(name=org_name) if org_name else None,
    )


def decode_registry_module_version(document: Any) -> RegistryModuleVersion:
    data = _primary(document, REGISTRY_MODULE_VERSIONS_TYPE)
    attributes = data.get("attributes") or {}
    wire = REGISTRY_MODULE_VERSION_ATTRIBUTES
    status_raw = _string(attributes, wire["status"])
    status = RegistryModuleVersionStatus(status_raw)
    if status is RegistryModuleVersionStatus.UNKNOWN:
        logger.debug("Unrecognized module version status %r for %s", status_raw, data["id"])
    links = data.get("links") or {}
    if not isinstance(links, dict):
        raise DecodeError("resource 'links' must be an object")
    return RegistryModuleVersion(
        id=str(data["id"]),
        version=_string(attributes, wire["version"]),
        source=_string(attributes, wire["source"]),
        status=status,
        status_raw=status_raw,
        created_at=_string(attributes, wire["created_at"]),
        updated_at=_string(attributes, wire["updated_at"]),
        links={str(k): str(v) for k, v in links.items() if v is not None},
        registry_module_id=_relation_id(
            data, REGISTRY_MODULE_VERSION_RELATIONS["registry_module_id"]
        ),
    )
