"""PrizeJet - referral giveaway campaigns."""

__version__ = "1.0.0"
