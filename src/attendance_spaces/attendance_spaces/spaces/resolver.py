from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..common.datetime_utils import now_utc
from ..core.enums import RejectReason, ResolutionState, SpaceStatus
from ..core.exceptions import InvalidCode, SessionNotFound, SessionRejected, StoreError
from .model import Space
from .repository import SpaceRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Resolution:
    """Outcome of looking up a space by its code.

    `space` is set for ACCEPTING and REJECTED; `reason` only for REJECTED.
    """

    state: ResolutionState
    space: Optional[Space] = None
    reason: Optional[RejectReason] = None

    @property
    def accepting(self) -> bool:
        return self.state == ResolutionState.ACCEPTING

    def require_accepting(self) -> Space:
        if self.state == ResolutionState.NOT_FOUND or self.space is None:
            raise SessionNotFound()
        if self.state == ResolutionState.REJECTED:
            raise SessionRejected(self.reason.value if self.reason else "closed")
        return self.space


class SessionResolver:
    """Load a space by code and decide whether it takes submissions now."""

    def __init__(self, spaces: SpaceRepository):
        self._spaces = spaces

    def resolve(self, code: Optional[str], *, now: Optional[datetime] = None) -> Resolution:
        code = (code or "").strip()
        if not code:
            raise InvalidCode()

        try:
            space = self._spaces.get_by_code(code)
        except StoreError:
            logger.exception("space lookup failed for code %s", code)
            return Resolution(ResolutionState.NOT_FOUND)

        if space is None:
            return Resolution(ResolutionState.NOT_FOUND)

        if space.status != SpaceStatus.OPEN:
            return Resolution(ResolutionState.REJECTED, space, RejectReason(space.status.value))

        now = now or now_utc()
        if space.end_time is not None and space.end_time < now:
            return Resolution(ResolutionState.REJECTED, space, RejectReason.ENDED)

        return Resolution(ResolutionState.ACCEPTING, space)
