"""Small shared helpers"""

from datetime import datetime, timezone
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional, Union

CENT = Decimal("0.01")

Number = Union[int, float, Decimal]


def utcnow() -> datetime:
    """Naive UTC timestamp, matching how DateTime columns are stored"""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def to_naive_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Normalise an incoming timestamp to naive UTC"""
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def to_money(value: Number) -> Decimal:
    """Round a number to cents, half-up"""
    if not isinstance(value, Decimal):
        value = Decimal(str(value))
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def optimize_cloudinary_url(
    url: str,
    width: Optional[int] = None,
    quality: str = "auto:good",
    fmt: str = "auto",
    responsive: bool = False,
    is_desktop: bool = False,
) -> str:
    """
    Add delivery transformations to a Cloudinary URL

    Non-Cloudinary URLs are returned unchanged; URLs that already carry a
    quality transformation are only upgraded to https.
    """
    if not url or "cloudinary.com" not in url:
        return url

    if url.startswith("http://"):
        url = "https://" + url[len("http://"):]

    if "/upload/" in url and "/upload/q_" not in url:
        if width:
            width_param = f"w_{width},"
        elif is_desktop:
            width_param = ""
        else:
            width_param = "w_768,"
        responsive_param = "c_limit," if responsive else ""
        transformation = f"{width_param}q_{quality},f_{fmt},dpr_auto,fl_progressive,{responsive_param}"
        url = url.replace("/upload/", f"/upload/{transformation}", 1)

    return url
