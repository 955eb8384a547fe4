"""
Path construction for registry module endpoints.
Every segment is percent-escaped on its own before joining; the joined path is never re-escaped.
"""

from __future__ import annotations

from urllib.parse import quote

COLLECTION = "registry-modules"


def escape_segment(segment: str) -> str:
    """Percent-encode one path segment. Space becomes %20 and / becomes %2F."""
    return quote(segment, safe="")


def join_segments(*segments: str) -> str:
    return "/".join(escape_segment(s) for s in segments)


def delete_path(
    organization: str,
    name: str,
    provider: str | None = None,
    version: str | None = None,
) -> str:
    """
    Action path for the delete family, relative to the registry-modules collection.

    delete_path("acme corp", "vpc", "aws", "1.0.0/beta")
        -> "actions/delete/acme%20corp/vpc/aws/1.0.0%2Fbeta"
    """
    segments = [organization, name]
    if provider is not None:
        segments.append(provider)
        if version is not None:
            segments.append(version)
    elif version is not None:
        raise ValueError("version requires provider")
    return "actions/delete/" + join_segments(*segments)


def show_path(organization: str, name: str, provider: str) -> str:
    return "show/" + join_segments(organization, name, provider)


def versions_path(organization: str, name: str, provider: str) -> str:
    return join_segments(organization, name, provider) + "/versions"


def collection_path(relative: str = "") -> str:
    """Prefix a relative path with the registry-modules collection."""
    if not relative:
        return COLLECTION
    return f"{COLLECTION}/{relative}"
