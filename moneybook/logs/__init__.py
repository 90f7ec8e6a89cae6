"""Logging package."""

from moneybook.logs.logger import configure_logging, mask_token

__all__ = ["configure_logging", "mask_token"]
