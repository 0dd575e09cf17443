from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import AttendanceRecord, NewSubmission


class SubmissionRepository(Protocol):
    def insert_record(self, submission: NewSubmission) -> AttendanceRecord:
        """Single-row insert. id and submitted_at are assigned here, never by the client.

        Raises DuplicateKeyError when submission_token was already used.
        """

        raise NotImplementedError

    def list_for_space(self, space_id: str, *, limit: Optional[int] = None) -> Sequence[AttendanceRecord]:
        """Newest first; no limit when limit is None."""

        raise NotImplementedError
