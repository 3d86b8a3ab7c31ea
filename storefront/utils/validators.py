"""Custom validators and sanitizers"""

import os
import re
from typing import Iterable, Optional

import bleach

# Tags a promo banner may use
PROMO_ALLOWED_TAGS = ['a', 'b', 'br', 'em', 'i', 'span', 'strong', 'u']
PROMO_ALLOWED_ATTRIBUTES = {
    'a': ['href', 'title', 'target'],
    'span': ['class'],
}


def sanitize_html(html: str, allowed_tags: Optional[list] = None) -> str:
    """Sanitize HTML content"""
    return bleach.clean(
        html,
        tags=allowed_tags if allowed_tags is not None else PROMO_ALLOWED_TAGS,
        attributes=PROMO_ALLOWED_ATTRIBUTES,
        strip=True
    ).strip()


def sanitize_filename(filename: str) -> str:
    """Sanitize filename for storage"""
    # Remove path separators and null bytes
    filename = os.path.basename(filename.replace("\\", "/")).replace("\x00", "")

    # Collapse anything outside a conservative character set
    filename = re.sub(r'[^A-Za-z0-9._-]+', '-', filename)

    name, ext = os.path.splitext(filename)
    if len(name) > 100:
        name = name[:100]

    return f"{name}{ext.lower()}".strip("-.") or "upload"


def validate_file_extension(filename: str, allowed: Iterable[str]) -> bool:
    """Validate file extension"""
    ext = os.path.splitext(filename)[1].lower()
    return ext in {e.lower() for e in allowed}
