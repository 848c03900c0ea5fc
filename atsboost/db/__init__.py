"""Database package."""

from atsboost.db.base import Base, get_db, init_db, session_scope
from atsboost.db.tables import (
    CV,
    ATSScore,
    Employer,
    JobMatch,
    JobPosting,
    Notification,
    PaymentTransaction,
    Plan,
    PremiumJobMatch,
    PremiumSeekerProfile,
    SAProfile,
    Subscription,
    User,
    utcnow,
)

__all__ = [
    "Base",
    "get_db",
    "init_db",
    "session_scope",
    "utcnow",
    "User",
    "CV",
    "ATSScore",
    "SAProfile",
    "Employer",
    "JobPosting",
    "JobMatch",
    "Plan",
    "Subscription",
    "PaymentTransaction",
    "PremiumSeekerProfile",
    "PremiumJobMatch",
    "Notification",
]
