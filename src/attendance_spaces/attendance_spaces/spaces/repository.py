from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import SpaceStatus, SpaceType
from .model import CustomField, Space, SpaceSummary


class SpaceRepository(Protocol):
    def get_by_code(self, code: str) -> Optional[Space]:
        raise NotImplementedError

    def get_by_id(self, space_id: str) -> Optional[Space]:
        raise NotImplementedError

    def create_space(
        self,
        *,
        title: str,
        space_type: SpaceType,
        admin_id: str,
        required_fields: Sequence[CustomField],
        unique_code: str,
        public_link: str,
        start_time: Optional[datetime],
        end_time: Optional[datetime],
    ) -> str:
        """Insert a space; raises DuplicateKeyError when unique_code is taken."""

        raise NotImplementedError

    def set_status(self, *, space_id: str, status: SpaceStatus) -> bool:
        raise NotImplementedError

    def list_for_admin(self, admin_id: str) -> Sequence[SpaceSummary]:
        raise NotImplementedError
