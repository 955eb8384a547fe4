"""
Registry module resource model: statuses, version-status records, permissions.
Values are produced by decoding server responses (see tfe_registry.schema); the client never
computes a status itself.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class RegistryModuleStatus(Enum):
    """
    Module-level provisioning state. UNKNOWN absorbs statuses this client does not know and
    responses that carry no status; the record's status_raw keeps what the server sent.
    """

    PENDING = "pending"
    NO_VERSION_TAGS = "no_version_tags"
    SETUP_FAILED = "setup_failed"
    SETUP_COMPLETE = "setup_complete"
    UNKNOWN = "unknown"

    @classmethod
    def _missing_(cls, value: object) -> RegistryModuleStatus:
        return cls.UNKNOWN

    @property
    def is_failed(self) -> bool:
        return self is RegistryModuleStatus.SETUP_FAILED


class RegistryModuleVersionStatus(Enum):
    """Per-version ingestion state."""

    PENDING = "pending"
    CLONING = "cloning"
    CLONE_FAILED = "clone_failed"
    REG_INGRESS_REQ_FAILED = "reg_ingress_req_failed"
    REG_INGRESSING = "reg_ingressing"
    REG_INGRESS_FAILED = "reg_ingress_failed"
    OK = "ok"
    UNKNOWN = "unknown"

    @classmethod
    def _missing_(cls, value: object) -> RegistryModuleVersionStatus:
        return cls.UNKNOWN

    @property
    def is_failed(self) -> bool:
        return self in _FAILED_VERSION_STATUSES

    @property
    def is_terminal(self) -> bool:
        return self is RegistryModuleVersionStatus.OK or self.is_failed


_FAILED_VERSION_STATUSES = frozenset(
    {
        RegistryModuleVersionStatus.CLONE_FAILED,
        RegistryModuleVersionStatus.REG_INGRESS_REQ_FAILED,
        RegistryModuleVersionStatus.REG_INGRESS_FAILED,
    }
)

# Server-driven edges as observed from the client. Every non-pending module state may move to
# setup_complete, and setup_complete can regress on resync.
MODULE_STATUS_TRANSITIONS: dict[RegistryModuleStatus, frozenset[RegistryModuleStatus]] = {
    RegistryModuleStatus.PENDING: frozenset(
        {
            RegistryModuleStatus.NO_VERSION_TAGS,
            RegistryModuleStatus.SETUP_FAILED,
            RegistryModuleStatus.SETUP_COMPLETE,
        }
    ),
    RegistryModuleStatus.NO_VERSION_TAGS: frozenset(
        {RegistryModuleStatus.SETUP_COMPLETE, RegistryModuleStatus.SETUP_FAILED}
    ),
    RegistryModuleStatus.SETUP_FAILED: frozenset(
        {RegistryModuleStatus.SETUP_COMPLETE, RegistryModuleStatus.NO_VERSION_TAGS}
    ),
    RegistryModuleStatus.SETUP_COMPLETE: frozenset(
        {RegistryModuleStatus.NO_VERSION_TAGS, RegistryModuleStatus.SETUP_FAILED}
    ),
}

VERSION_STATUS_TRANSITIONS: dict[
    RegistryModuleVersionStatus, frozenset[RegistryModuleVersionStatus]
] = {
    RegistryModuleVersionStatus.PENDING: frozenset(
        {RegistryModuleVersionStatus.CLONING}
    ),
    RegistryModuleVersionStatus.CLONING: frozenset(
        {
            RegistryModuleVersionStatus.CLONE_FAILED,
            RegistryModuleVersionStatus.REG_INGRESS_REQ_FAILED,
            RegistryModuleVersionStatus.REG_INGRESSING,
        }
    ),
    RegistryModuleVersionStatus.REG_INGRESSING: frozenset(
        {
            RegistryModuleVersionStatus.REG_INGRESS_FAILED,
            RegistryModuleVersionStatus.OK,
        }
    ),
}


def is_legal_transition(
    previous: RegistryModuleStatus | RegistryModuleVersionStatus,
    current: RegistryModuleStatus | RegistryModuleVersionStatus,
) -> bool:
    """
    True if two successive observations are consistent with the status graph.
    Unchanged status is always legal; UNKNOWN on either side is never judged illegal.
    Poll-based observation can skip intermediate states, so reachability is checked, not adjacency.
    """
    if type(previous) is not type(current):
        raise TypeError("cannot compare module and version statuses")
    if previous == current or previous.value == "unknown" or current.value == "unknown":
        return True
    table = (
        MODULE_STATUS_TRANSITIONS
        if isinstance(previous, RegistryModuleStatus)
        else VERSION_STATUS_TRANSITIONS
    )
    seen = {previous}
    frontier = [previous]
    while frontier:
        for nxt in table.get(frontier.pop(), frozenset()):
            if nxt == current:
                return True
            if nxt not in seen:
                seen.add(nxt)
                frontier.append(nxt)
    return False


@dataclass
class RegistryModulePermissions:
    """What the token may do with the module. Advisory; not enforced client-side."""

    can_delete: bool = False
    can_resync: bool = False
    can_retry: bool = False


@dataclass
class RegistryModuleVersionStatuses:
    """One entry per version tag the registry has seen for a module."""

    version: str
    status: RegistryModuleVersionStatus
    error: str = ""
    status_raw: str = ""


@dataclass
class Organization:
    name: str


@dataclass
class RegistryModule:
    """A module namespace within an organization, keyed by (organization, name, provider)."""

    id: str
    name: str
    provider: str
    status: RegistryModuleStatus
    # Server string, kept verbatim so an UNKNOWN status can still be inspected.
    status_raw: str = ""
    version_statuses: list[RegistryModuleVersionStatuses] = field(default_factory=list)
    permissions: RegistryModulePermissions | None = None
    created_at: str = ""
    updated_at: str = ""

    # Relations
    organization: Organization | None = None

    def version_status(self, version: str) -> RegistryModuleVersionStatuses | None:
        """Return the status record for a version tag, or None if the registry has not seen it."""
        for vs in self.version_statuses:
            if vs.version == version:
                return vs
        return None


@dataclass
class RegistryModuleVersion:
    """A single module version created through the API (tarball upload flow)."""

    id: str
    version: str
    status: RegistryModuleVersionStatus
    status_raw: str = ""
    source: str = ""
    created_at: str = ""
    updated_at: str = ""
    links: dict[str, str] = field(default_factory=dict)

    # Relations
    registry_module_id: str | None = None

    @property
    def upload_url(self) -> str | None:
        return self.links.get("upload")


@dataclass
class VCSRepoOptions:
    """VCS repository to link a module to."""

    identifier: str
    oauth_token_id: str
    display_identifier: str | None = None
    branch: str | None = None


@dataclass
class RegistryModuleCreateOptions:
    """Create a module. Without a VCS repo, name and provider identify the new module."""

    name: str | None = None
    provider: str | None = None
    vcs_repo: VCSRepoOptions | None = None


@dataclass
class RegistryModuleCreateWithVCSConnectionOptions:
    """Create and publish a module from a VCS repo; vcs_repo is required."""

    vcs_repo: VCSRepoOptions | None = None


@dataclass
class RegistryModuleCreateVersionOptions:
    version: str | None = None
