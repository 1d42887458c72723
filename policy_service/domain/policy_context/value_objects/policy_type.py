"""
PolicyType Value Object.
"""

from enum import Enum


class PolicyType(str, Enum):
    """Категории политик организации."""
    CODE_OF_CONDUCT = "CODE_OF_CONDUCT"
    ANTI_HARASSMENT = "ANTI_HARASSMENT"
    ANTI_BRIBERY = "ANTI_BRIBERY"
    DATA_PRIVACY = "DATA_PRIVACY"
    INFORMATION_SECURITY = "INFORMATION_SECURITY"
    GIFT_ENTERTAINMENT = "GIFT_ENTERTAINMENT"
    CONFLICTS_OF_INTEREST = "CONFLICTS_OF_INTEREST"
    TRAVEL_EXPENSE = "TRAVEL_EXPENSE"
    WHISTLEBLOWER = "WHISTLEBLOWER"
    SOCIAL_MEDIA = "SOCIAL_MEDIA"
    ACCEPTABLE_USE = "ACCEPTABLE_USE"
    OTHER = "OTHER"
