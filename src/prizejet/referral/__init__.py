"""Referral module for PrizeJet.

Every entry gets a referral code. When a new participant enters through
that code, the referrer earns the campaign's referral points.
"""

from prizejet.referral.service import ReferralService, generate_referral_code

__all__ = ["ReferralService", "generate_referral_code"]
