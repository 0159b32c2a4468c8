"""
Response Envelopes

Every success body is {success, data, ...}. Reads also carry `_metadata`
describing which fields the caller may edit.
"""

from typing import Any, Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field

from .permissions import FieldPolicy

T = TypeVar("T")


class PermissionMetadata(BaseModel):
    """Editable fields for the caller's role."""

    editable: list[str]
    editingEnabled: bool
    userRole: str


class DataResponse(BaseModel, Generic[T]):
    """Standard success envelope."""

    success: bool = True
    data: T


class DataMessageResponse(DataResponse[T], Generic[T]):
    message: str


class ReadResponse(DataResponse[T], Generic[T]):
    """Read envelope with field permissions."""

    model_config = ConfigDict(populate_by_name=True)

    metadata: PermissionMetadata = Field(alias="_metadata")


class MessageResponse(BaseModel):
    success: bool = True
    message: str


def ok(data: Any = None, **extra: Any) -> dict:
    """Wrap a payload as {success: true, data, ...}."""
    body = {"success": True, "data": data}
    body.update(extra)
    return body


def with_permissions(data: Any, policy: FieldPolicy, role: str, resource: str, **extra: Any) -> dict:
    """Envelope for reads, carrying which fields the caller may edit."""
    return ok(data, _metadata=policy.describe(role, resource), **extra)
