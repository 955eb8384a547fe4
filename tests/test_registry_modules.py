"""Tests for tfe_registry.registry_modules: validation order, request shape, error propagation."""

from __future__ import annotations

import pytest
import requests

from fake_registry import RecordingTransport, module_document
from tfe_registry.context import Context
from tfe_registry.errors import (
    ConflictError,
    DecodeError,
    NotFoundError,
    OperationCancelled,
    ValidationError,
)
from tfe_registry.models import (
    RegistryModuleCreateOptions,
    RegistryModuleCreateVersionOptions,
    RegistryModuleCreateWithVCSConnectionOptions,
    RegistryModuleStatus,
    RegistryModuleVersionStatus,
    VCSRepoOptions,
)
from tfe_registry.registry_modules import RegistryModules

VCS = VCSRepoOptions(identifier="acme/terraform-aws-vpc", oauth_token_id="ot-123")


@pytest.fixture
def ctx() -> Context:
    return Context.background()


# ---- validation: field-named errors, zero requests ----


@pytest.mark.parametrize(
    "args,message",
    [
        (("", "vpc"), "invalid value for organization"),
        (("acme corp", "vpc"), "invalid value for organization"),
        (("acme", ""), "name is required"),
        (("acme", "my/vpc"), "invalid value for name"),
    ],
)
def test_delete_validation(ctx: Context, args: tuple, message: str) -> None:
    transport = RecordingTransport()
    with pytest.raises(ValidationError, match=f"^{message}$"):
        RegistryModules(transport).delete(ctx, *args)
    assert transport.calls == []


@pytest.mark.parametrize(
    "args,message",
    [
        (("", "vpc", "aws"), "invalid value for organization"),
        (("acme", "", "aws"), "name is required"),
        (("acme", "v pc", "aws"), "invalid value for name"),
        (("acme", "vpc", ""), "provider is required"),
        (("acme", "vpc", "aws/gov"), "invalid value for provider"),
    ],
)
def test_delete_provider_validation(ctx: Context, args: tuple, message: str) -> None:
    transport = RecordingTransport()
    with pytest.raises(ValidationError, match=f"^{message}$"):
        RegistryModules(transport).delete_provider(ctx, *args)
    assert transport.calls == []


@pytest.mark.parametrize(
    "args,message",
    [
        (("", "vpc", "aws", "1.0.0"), "invalid value for organization"),
        (("acme", "", "aws", "1.0.0"), "name is required"),
        (("acme", "vpc!", "aws", "1.0.0"), "invalid value for name"),
        (("acme", "vpc", "", "1.0.0"), "provider is required"),
        (("acme", "vpc", "a ws", "1.0.0"), "invalid value for provider"),
        (("acme", "vpc", "aws", ""), "version is required"),
        (("acme", "vpc", "aws", "1.0.0/beta"), "invalid value for version"),
    ],
)
def test_delete_version_validation(ctx: Context, args: tuple, message: str) -> None:
    transport = RecordingTransport()
    with pytest.raises(ValidationError, match=f"^{message}$"):
        RegistryModules(transport).delete_version(ctx, *args)
    assert transport.calls == []


@pytest.mark.parametrize(
    "args,message",
    [
        (("", "", "", ""), "invalid value for organization"),
        (("acme", "", "", ""), "name is required"),
        (("acme", "vpc", "", "bad/version"), "provider is required"),
        (("acme", "v/pc", "a ws", ""), "invalid value for name"),
        (("acme", "vpc", "a/ws", ""), "invalid value for provider"),
    ],
)
def test_validation_reports_earliest_field(ctx: Context, args: tuple, message: str) -> None:
    transport = RecordingTransport()
    with pytest.raises(ValidationError, match=f"^{message}$"):
        RegistryModules(transport).delete_version(ctx, *args)
    assert transport.calls == []


def test_none_identifiers_are_rejected(ctx: Context) -> None:
    transport = RecordingTransport()
    with pytest.raises(ValidationError, match="^provider is required$"):
        RegistryModules(transport).delete_provider(ctx, "acme", "vpc", None)
    with pytest.raises(ValidationError, match="^invalid value for organization$"):
        RegistryModules(transport).delete(ctx, None, "vpc")
    assert transport.calls == []


@pytest.mark.parametrize(
    "options,message",
    [
        (RegistryModuleCreateOptions(), "name is required"),
        (RegistryModuleCreateOptions(name="vpc"), "provider is required"),
        (RegistryModuleCreateOptions(name="my vpc", provider="aws"), "invalid value for name"),
        (
            RegistryModuleCreateOptions(vcs_repo=VCSRepoOptions("", "ot-1")),
            "identifier is required",
        ),
        (
            RegistryModuleCreateOptions(vcs_repo=VCSRepoOptions("acme/repo", "")),
            "oauth token id is required",
        ),
    ],
)
def test_create_validation(ctx: Context, options, message: str) -> None:
    transport = RecordingTransport()
    with pytest.raises(ValidationError, match=f"^{message}$"):
        RegistryModules(transport).create(ctx, options)
    assert transport.calls == []


def test_create_with_vcs_requires_repo(ctx: Context) -> None:
    transport = RecordingTransport()
    with pytest.raises(ValidationError, match="^vcs repo is required$"):
        RegistryModules(transport).create_with_vcs_connection(
            ctx, RegistryModuleCreateWithVCSConnectionOptions()
        )
    assert transport.calls == []


def test_create_version_validation(ctx: Context) -> None:
    transport = RecordingTransport()
    rm = RegistryModules(transport)
    with pytest.raises(ValidationError, match="^version is required$"):
        rm.create_version(ctx, "acme", "vpc", "aws", RegistryModuleCreateVersionOptions())
    with pytest.raises(ValidationError, match="^invalid value for version$"):
        rm.create_version(
            ctx, "acme", "vpc", "aws", RegistryModuleCreateVersionOptions("1.0 beta")
        )
    assert transport.calls == []


# ---- request shape ----


def test_delete_sends_one_post_without_body(ctx: Context) -> None:
    transport = RecordingTransport()
    assert RegistryModules(transport).delete(ctx, "acme", "vpc") is None
    assert transport.calls == [
        {
            "ctx": ctx,
            "method": "POST",
            "path": "registry-modules/actions/delete/acme/vpc",
            "body": None,
        }
    ]


def test_delete_provider_path(ctx: Context) -> None:
    transport = RecordingTransport()
    RegistryModules(transport).delete_provider(ctx, "acme", "vpc", "aws")
    assert len(transport.calls) == 1
    call = transport.calls[0]
    assert (call["method"], call["path"], call["body"]) == (
        "POST",
        "registry-modules/actions/delete/acme/vpc/aws",
        None,
    )


def test_delete_version_path(ctx: Context) -> None:
    transport = RecordingTransport()
    RegistryModules(transport).delete_version(ctx, "acme", "vpc", "aws", "1.0.0")
    assert len(transport.calls) == 1
    call = transport.calls[0]
    assert (call["method"], call["path"], call["body"]) == (
        "POST",
        "registry-modules/actions/delete/acme/vpc/aws/1.0.0",
        None,
    )


def test_context_passed_to_transport_unchanged(ctx: Context) -> None:
    transport = RecordingTransport(module_document())
    child = ctx.with_timeout(30)
    RegistryModules(transport).read(child, "acme", "vpc", "aws")
    assert transport.calls[0]["ctx"] is child


def test_create_posts_to_collection(ctx: Context) -> None:
    transport = RecordingTransport(module_document())
    m = RegistryModules(transport).create(
        ctx, RegistryModuleCreateOptions(name="vpc", provider="aws")
    )
    assert m.status is RegistryModuleStatus.PENDING
    assert m.version_statuses == []
    call = transport.calls[0]
    assert call["method"] == "POST"
    assert call["path"] == "registry-modules"
    assert call["body"]["data"]["attributes"] == {"name": "vpc", "provider": "aws"}


def test_create_with_vcs_posts_to_collection(ctx: Context) -> None:
    transport = RecordingTransport(module_document())
    m = RegistryModules(transport).create_with_vcs_connection(
        ctx, RegistryModuleCreateWithVCSConnectionOptions(vcs_repo=VCS)
    )
    assert m.status is RegistryModuleStatus.PENDING
    call = transport.calls[0]
    assert call["path"] == "registry-modules"
    assert call["body"]["data"]["attributes"]["vcs-repo"]["oauth-token-id"] == "ot-123"


def test_read_uses_show_path(ctx: Context) -> None:
    transport = RecordingTransport(module_document("setup_complete"))
    m = RegistryModules(transport).read(ctx, "acme", "vpc", "aws")
    assert m.status is RegistryModuleStatus.SETUP_COMPLETE
    assert transport.calls[0]["method"] == "GET"
    assert transport.calls[0]["path"] == "registry-modules/show/acme/vpc/aws"


def test_read_without_status_is_unknown(ctx: Context) -> None:
    doc = module_document()
    del doc["data"]["attributes"]["status"]
    m = RegistryModules(RecordingTransport(doc)).read(ctx, "acme", "vpc", "aws")
    assert m.status is RegistryModuleStatus.UNKNOWN
    assert m.status_raw == ""


def test_create_version_path(ctx: Context) -> None:
    doc = {"data": {"id": "modver-1", "type": "registry-module-versions"}}
    transport = RecordingTransport(doc)
    v = RegistryModules(transport).create_version(
        ctx, "acme", "vpc", "aws", RegistryModuleCreateVersionOptions("1.2.3")
    )
    assert v.id == "modver-1"
    assert v.status is RegistryModuleVersionStatus.UNKNOWN
    call = transport.calls[0]
    assert call["path"] == "registry-modules/acme/vpc/aws/versions"
    assert call["body"]["data"]["attributes"] == {"version": "1.2.3"}


# ---- error propagation ----


@pytest.mark.parametrize(
    "error",
    [
        NotFoundError("not found", status_code=404),
        ConflictError("Name has already been taken", status_code=422),
        requests.ConnectionError("connection refused"),
    ],
)
def test_transport_errors_propagate_unchanged(ctx: Context, error: Exception) -> None:
    transport = RecordingTransport(error)
    with pytest.raises(type(error)) as info:
        RegistryModules(transport).delete(ctx, "acme", "vpc")
    assert info.value is error


def test_empty_response_for_create_is_decode_error(ctx: Context) -> None:
    transport = RecordingTransport(None)
    with pytest.raises(DecodeError):
        RegistryModules(transport).create(
            ctx, RegistryModuleCreateOptions(name="vpc", provider="aws")
        )


def test_strict_decoding_can_be_relaxed(ctx: Context) -> None:
    doc = module_document(
        "setup_failed", [{"version": "0.1.0", "status": "clone_failed", "error": ""}]
    )
    with pytest.raises(DecodeError):
        RegistryModules(RecordingTransport(doc)).read(ctx, "acme", "vpc", "aws")
    m = RegistryModules(RecordingTransport(doc), strict_decoding=False).read(
        ctx, "acme", "vpc", "aws"
    )
    assert m.version_statuses[0].error == ""


# ---- cancellation ----


def _every_operation(rm: RegistryModules, ctx: Context) -> list:
    return [
        lambda: rm.create(ctx, RegistryModuleCreateOptions(name="vpc", provider="aws")),
        lambda: rm.create_with_vcs_connection(
            ctx, RegistryModuleCreateWithVCSConnectionOptions(vcs_repo=VCS)
        ),
        lambda: rm.read(ctx, "acme", "vpc", "aws"),
        lambda: rm.create_version(
            ctx, "acme", "vpc", "aws", RegistryModuleCreateVersionOptions("1.0.0")
        ),
        lambda: rm.delete(ctx, "acme", "vpc"),
        lambda: rm.delete_provider(ctx, "acme", "vpc", "aws"),
        lambda: rm.delete_version(ctx, "acme", "vpc", "aws", "1.0.0"),
    ]


def test_cancelled_context_fails_every_operation() -> None:
    ctx = Context.background()
    ctx.cancel()
    transport = RecordingTransport()
    rm = RegistryModules(transport)
    for op in _every_operation(rm, ctx):
        with pytest.raises(OperationCancelled):
            op()
    assert transport.calls == []


def test_cancellation_wins_over_invalid_input() -> None:
    ctx = Context.background()
    ctx.cancel()
    transport = RecordingTransport()
    with pytest.raises(OperationCancelled):
        RegistryModules(transport).delete_version(ctx, "", "", "", "")


def test_cancellation_from_transport_not_converted(ctx: Context) -> None:
    transport = RecordingTransport(OperationCancelled("context cancelled"))
    with pytest.raises(OperationCancelled):
        RegistryModules(transport).delete(ctx, "acme", "vpc")
