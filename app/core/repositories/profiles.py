"""
User profile repository.
"""

import logging
from typing import List, Optional, Tuple

from app.core.repositories.exceptions import NotFoundError
from app.core.repositories.models import UserProfile
from app.core.repositories.typed_map import EntityMap

logger = logging.getLogger(__name__)


class ProfileRepository:
    """Profiles keyed by user id. Saves overwrite wholesale; nothing is ever deleted."""

    def __init__(self, profiles: EntityMap[UserProfile]):
        self.profiles = profiles

    def put_profile(self, user_id: str, profile: UserProfile) -> UserProfile:
        self.profiles.put(user_id, profile)
        logger.debug(f"Saved profile for user {user_id}")
        return profile

    def get_profile(self, user_id: str) -> Optional[UserProfile]:
        return self.profiles.get(user_id)

    def get_profile_or_raise(self, user_id: str) -> UserProfile:
        profile = self.get_profile(user_id)
        if profile is None:
            raise NotFoundError(f"Profile for user {user_id} not found")
        return profile

    def list_profiles(self) -> List[Tuple[str, UserProfile]]:
        return self.profiles.items()
