from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional, Sequence

from ..core.enums import FieldKind, SpaceStatus, SpaceType


@dataclass(frozen=True)
class CustomField:
    """One admin-defined input of a space; list order is form/export order."""

    field_id: str
    name: str
    kind: FieldKind = FieldKind.TEXT
    required: bool = True

    def to_json(self) -> dict:
        return {"id": self.field_id, "name": self.name, "type": self.kind.value, "required": self.required}


@dataclass(frozen=True)
class Space:
    """Domain entity: an attendance session."""

    space_id: str
    title: str
    space_type: SpaceType
    admin_id: str
    unique_code: str
    public_link: str
    status: SpaceStatus
    required_fields: Sequence[CustomField] = field(default_factory=tuple)
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    created_at: Optional[datetime] = None


@dataclass(frozen=True)
class SpaceSummary:
    """Read-model for the owner dashboard."""

    space: Space
    submission_count: int


def parse_custom_fields(raw: Any) -> tuple[CustomField, ...]:
    """Build CustomField values from the persisted JSON array.

    Anything that is not a list is treated as "no custom fields"; entries
    without a usable name are dropped; unknown types fall back to text.
    """

    if not isinstance(raw, list):
        return ()

    out: list[CustomField] = []
    for idx, item in enumerate(raw):
        if not isinstance(item, dict):
            continue
        name = str(item.get("name") or "").strip()
        if not name:
            continue
        try:
            kind = FieldKind(str(item.get("type") or "text").lower())
        except ValueError:
            kind = FieldKind.TEXT
        out.append(
            CustomField(
                field_id=str(item.get("id") or idx),
                name=name,
                kind=kind,
                required=bool(item.get("required", False)),
            )
        )
    return tuple(out)
