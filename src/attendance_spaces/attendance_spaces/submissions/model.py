from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Mapping, Optional


@dataclass(frozen=True)
class AttendanceRecord:
    """Domain entity: one stored submission (a snapshot of the form at submit time)."""

    record_id: str
    space_id: str
    user_id: Optional[str]
    fields: Mapping[str, str]
    submitted_at: datetime
    submission_token: Optional[str] = None
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None


@dataclass(frozen=True)
class RequestMeta:
    """Client details captured alongside a submission."""

    ip_address: Optional[str] = None
    user_agent: Optional[str] = None


@dataclass(frozen=True)
class NewSubmission:
    space_id: str
    user_id: Optional[str]
    fields: Mapping[str, str] = field(default_factory=dict)
    submission_token: Optional[str] = None
    meta: RequestMeta = field(default_factory=RequestMeta)
