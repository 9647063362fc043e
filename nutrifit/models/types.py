"""
Standard type definitions for database models.

Provides consistent types for monetary and multiplier fields across all models.
"""

from sqlalchemy import DECIMAL

# Standard money type for wallet credits and rewards
# Precision: 12 digits total, 2 after decimal point
MoneyType = DECIMAL(12, 2)

# Referral bonus multiplier (1.0, 1.2, 1.5, 2.0)
MultiplierType = DECIMAL(3, 1)
