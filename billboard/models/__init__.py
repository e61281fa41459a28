from billboard.models.user_profile import UserProfile
from billboard.models.campaign import Campaign
from billboard.models.application import Application
from billboard.models.waitlist import WaitlistSignup
from billboard.models.audit_log import AuditLog

__all__ = [
    "UserProfile",
    "Campaign",
    "Application",
    "WaitlistSignup",
    "AuditLog",
]
