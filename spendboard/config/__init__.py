"""
Configuration module for Spendboard.
"""

from spendboard.config.estimates import PROJECTION_FACTORS, get_projection_factor
from spendboard.config.settings import CREDENTIAL_KEYS, Settings

__all__ = ["CREDENTIAL_KEYS", "PROJECTION_FACTORS", "Settings", "get_projection_factor"]
