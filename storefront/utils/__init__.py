"""Utilities package"""

from .helpers import utcnow, to_money, optimize_cloudinary_url
from .validators import sanitize_html, sanitize_filename, validate_file_extension

__all__ = [
    "utcnow",
    "to_money",
    "optimize_cloudinary_url",
    "sanitize_html",
    "sanitize_filename",
    "validate_file_extension",
]
