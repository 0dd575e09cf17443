from __future__ import annotations

import logging
import secrets
import string
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Optional, Sequence

from ..common.validators import require_non_empty
from ..core.constants import (
    FIXED_FIELD_EMAIL,
    FIXED_FIELD_NAME,
    SPACE_CODE_LENGTH,
    SPACE_CODE_MAX_ATTEMPTS,
    SPACE_CODE_PREFIX,
)
from ..core.enums import FieldKind, SpaceStatus, SpaceType
from ..core.exceptions import AuthorizationError, DuplicateKeyError, StoreError, ValidationError
from ..submissions.form import normalize_field_key
from .model import CustomField, Space, SpaceSummary
from .repository import SpaceRepository

logger = logging.getLogger(__name__)

_CODE_ALPHABET = string.ascii_uppercase + string.digits


def generate_space_code() -> str:
    return SPACE_CODE_PREFIX + "".join(secrets.choice(_CODE_ALPHABET) for _ in range(SPACE_CODE_LENGTH))


@dataclass(frozen=True)
class NewCustomField:
    name: str
    kind: str = FieldKind.TEXT.value
    required: bool = True


@dataclass(frozen=True)
class NewSpace:
    title: str
    space_type: str
    custom_fields: Sequence[NewCustomField] = ()
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None


class SpaceService:
    """Use case: create and administer attendance spaces (owner only)."""

    def __init__(
        self,
        spaces: SpaceRepository,
        *,
        code_generator: Callable[[], str] = generate_space_code,
        max_code_attempts: int = SPACE_CODE_MAX_ATTEMPTS,
    ):
        self._spaces = spaces
        self._code_generator = code_generator
        self._max_code_attempts = int(max_code_attempts)

    @staticmethod
    def _build_fields(custom_fields: Sequence[NewCustomField]) -> list[CustomField]:
        """Validate custom fields; normalized keys must be unique and not shadow name/email."""

        taken = {FIXED_FIELD_NAME: "Full Name", FIXED_FIELD_EMAIL: "Email"}
        out: list[CustomField] = []
        for idx, f in enumerate(custom_fields, start=1):
            name = require_non_empty(f.name, "Field name")
            try:
                kind = FieldKind((f.kind or "").lower())
            except ValueError:
                raise ValidationError(f"Unsupported field type: {f.kind}")

            key = normalize_field_key(name)
            if key in taken:
                raise ValidationError(f'Field "{name}" conflicts with "{taken[key]}"')
            taken[key] = name

            out.append(CustomField(field_id=str(idx), name=name, kind=kind, required=bool(f.required)))
        return out

    def create_space(self, *, admin_id: str, data: NewSpace, link_for: Callable[[str], str]) -> Space:
        title = require_non_empty(data.title, "Title")
        try:
            space_type = SpaceType(data.space_type)
        except ValueError:
            raise ValidationError("Type must be Class, Event or Custom")

        if data.start_time and data.end_time and data.end_time <= data.start_time:
            raise ValidationError("End time must be after start time")

        fields = self._build_fields(data.custom_fields)

        for attempt in range(1, self._max_code_attempts + 1):
            code = self._code_generator()
            try:
                space_id = self._spaces.create_space(
                    title=title,
                    space_type=space_type,
                    admin_id=admin_id,
                    required_fields=fields,
                    unique_code=code,
                    public_link=link_for(code),
                    start_time=data.start_time,
                    end_time=data.end_time,
                )
            except DuplicateKeyError:
                logger.warning("space code %s taken (attempt %d)", code, attempt)
                continue

            space = self._spaces.get_by_id(space_id)
            if space is None:
                raise StoreError(f"space {space_id} missing after insert")
            logger.info("space %s created with code %s", space_id, code)
            return space

        raise StoreError("could not allocate a unique space code")

    def get_owned_space(self, *, current_user_id: str, space_id: str) -> Space:
        space = self._spaces.get_by_id(space_id)
        if not space:
            raise ValidationError("Space not found")
        if space.admin_id != current_user_id:
            raise AuthorizationError("You do not manage this space")
        return space

    def set_status(self, *, current_user_id: str, space_id: str, status: str) -> Space:
        try:
            new_status = SpaceStatus(status)
        except ValueError:
            raise ValidationError("Status must be open, paused or closed")

        space = self.get_owned_space(current_user_id=current_user_id, space_id=space_id)
        if space.status != new_status:
            self._spaces.set_status(space_id=space.space_id, status=new_status)
            logger.info("space %s status %s -> %s", space.space_id, space.status.value, new_status.value)
        return self.get_owned_space(current_user_id=current_user_id, space_id=space_id)

    def list_dashboard(self, admin_id: str) -> Sequence[SpaceSummary]:
        return self._spaces.list_for_admin(admin_id)
