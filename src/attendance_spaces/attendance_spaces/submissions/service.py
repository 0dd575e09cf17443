from __future__ import annotations

import logging
import secrets
import threading
from dataclasses import dataclass, field
from datetime import datetime
from typing import Mapping, Optional, Sequence

from ..core.exceptions import DuplicateKeyError, StoreError, SubmissionFailed, ValidationFailed
from ..spaces.model import Space
from ..spaces.resolver import Resolution, SessionResolver
from ..users.model import Identity
from .form import FormField, build_form, validate_submission
from .model import AttendanceRecord, NewSubmission, RequestMeta
from .prefill import IdentityPrefill
from .repository import SubmissionRepository

logger = logging.getLogger(__name__)


def new_submission_token() -> str:
    return secrets.token_urlsafe(24)


@dataclass(frozen=True)
class Notification:
    """Message for the presentation layer; category matches Flask flash categories."""

    title: str
    message: str
    category: str = "info"


@dataclass(frozen=True)
class FormView:
    """What the attendance page needs to render for one visit."""

    resolution: Resolution
    fields: Sequence[FormField] = field(default_factory=tuple)
    submission_token: Optional[str] = None


@dataclass(frozen=True)
class SubmissionOutcome:
    space: Space
    notification: Notification
    record: Optional[AttendanceRecord] = None
    duplicate: bool = False


SUBMITTED = Notification("Success", "Attendance submitted successfully!", "success")
ALREADY_SUBMITTED = Notification("Already submitted", "This attendance form was already submitted.", "info")


class SubmissionWriter:
    """Use case: show the attendance form for a code and record one submission."""

    def __init__(
        self,
        resolver: SessionResolver,
        submissions: SubmissionRepository,
        prefill: Optional[IdentityPrefill] = None,
    ):
        self._resolver = resolver
        self._submissions = submissions
        self._prefill = prefill
        self._lock = threading.Lock()
        self._inflight: set[str] = set()

    def open_form(self, code: Optional[str], identity: Optional[Identity] = None, *, now: Optional[datetime] = None) -> FormView:
        resolution = self._resolver.resolve(code, now=now)
        if not resolution.accepting:
            return FormView(resolution=resolution)

        prefill = self._prefill.fetch(identity) if self._prefill else None
        fields = build_form(resolution.space.required_fields, prefill)
        return FormView(resolution=resolution, fields=fields, submission_token=new_submission_token())

    def submit(
        self,
        code: Optional[str],
        values: Mapping[str, object],
        *,
        identity: Optional[Identity] = None,
        submission_token: Optional[str] = None,
        meta: Optional[RequestMeta] = None,
        now: Optional[datetime] = None,
    ) -> SubmissionOutcome:
        # Re-resolve: the space may have been paused/closed since the form was rendered.
        space = self._resolver.resolve(code, now=now).require_accepting()
        payload = validate_submission(build_form(space.required_fields), values)

        if submission_token is not None and not isinstance(submission_token, str):
            raise ValidationFailed({"submission_token": "Invalid submission token"})
        token = (submission_token or "").strip() or None
        if token is not None and not self._claim(token):
            logger.info("submission %s already in flight for space %s", token, space.space_id)
            return SubmissionOutcome(space=space, notification=ALREADY_SUBMITTED, duplicate=True)

        try:
            record = self._submissions.insert_record(
                NewSubmission(
                    space_id=space.space_id,
                    user_id=identity.user_id if identity else None,
                    fields=payload,
                    submission_token=token,
                    meta=meta or RequestMeta(),
                )
            )
        except DuplicateKeyError:
            logger.info("submission %s already stored for space %s", token, space.space_id)
            return SubmissionOutcome(space=space, notification=ALREADY_SUBMITTED, duplicate=True)
        except StoreError as e:
            logger.exception("insert failed for space %s", space.space_id)
            raise SubmissionFailed() from e
        finally:
            if token is not None:
                self._release(token)

        logger.info("recorded attendance %s for space %s", record.record_id, space.space_id)
        return SubmissionOutcome(space=space, notification=SUBMITTED, record=record)

    def _claim(self, token: str) -> bool:
        with self._lock:
            if token in self._inflight:
                return False
            self._inflight.add(token)
            return True

    def _release(self, token: str) -> None:
        with self._lock:
            self._inflight.discard(token)
