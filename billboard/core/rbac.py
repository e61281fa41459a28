"""User-type gates for the business and advertiser namespaces."""

import logging

from fastapi import Depends

from billboard.core.security import RedirectRequired, get_current_profile
from billboard.models.user_profile import UserProfile, UserType

logger = logging.getLogger(__name__)

DASHBOARD_PATHS = {
    UserType.BUSINESS: "/business/dashboard",
    UserType.ADVERTISER: "/advertiser/dashboard",
}


def dashboard_path(user_type: str) -> str:
    return DASHBOARD_PATHS.get(user_type, "/auth/onboarding")


def require_user_type(user_type: UserType):
    """Return a dependency that sends other user types to their own dashboard."""

    async def _check(profile: UserProfile = Depends(get_current_profile)) -> UserProfile:
        if profile.user_type != user_type:
            logger.warning(
                "Unauthorized: profile %s is not a %s user", profile.id, user_type.value
            )
            raise RedirectRequired(dashboard_path(profile.user_type))
        return profile

    return _check


require_business = require_user_type(UserType.BUSINESS)
require_advertiser = require_user_type(UserType.ADVERTISER)
