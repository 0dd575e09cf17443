from __future__ import annotations

import logging
from typing import Optional

from ..core.exceptions import PrefillFailed, StoreError
from ..users.model import Identity
from ..users.repository import UserRepository
from .form import Prefill

logger = logging.getLogger(__name__)


class IdentityPrefill:
    """Best-effort lookup of name/email for a signed-in submitter.

    Never raises: a failed lookup just means the form starts empty.
    """

    def __init__(self, users: UserRepository):
        self._users = users

    def fetch(self, identity: Optional[Identity]) -> Optional[Prefill]:
        if identity is None:
            return None
        try:
            return self._load(identity)
        except PrefillFailed as e:
            logger.warning("prefill skipped for %s: %s", identity.user_id, e)
            return None

    def _load(self, identity: Identity) -> Optional[Prefill]:
        try:
            profile = self._users.get_profile(identity.user_id)
        except StoreError as e:
            raise PrefillFailed(str(e)) from e

        if profile is None:
            logger.info("no profile for %s; form starts empty", identity.user_id)
            return None
        return Prefill(full_name=profile.full_name or "", email=profile.email or "")
