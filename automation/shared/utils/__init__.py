"""Shared helpers: UTC datetimes and identifier generation."""

from automation.shared.utils.datetime import utc_now
from automation.shared.utils.generators import generate_cuid

__all__ = ["utc_now", "generate_cuid"]
