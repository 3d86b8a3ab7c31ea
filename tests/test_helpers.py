from datetime import datetime, timezone, timedelta
from decimal import Decimal

import pytest

from storefront.utils.helpers import (
    optimize_cloudinary_url,
    to_money,
    to_naive_utc,
)
from storefront.utils.validators import sanitize_filename, validate_file_extension

CLOUDINARY = "http://res.cloudinary.com/demo/image/upload/v1/banners/summer.jpg"


def test_cloudinary_url_gets_mobile_defaults():
    assert optimize_cloudinary_url(CLOUDINARY) == (
        "https://res.cloudinary.com/demo/image/upload/"
        "w_768,q_auto:good,f_auto,dpr_auto,fl_progressive,v1/banners/summer.jpg"
    )


def test_cloudinary_url_responsive_desktop():
    url = optimize_cloudinary_url(CLOUDINARY, responsive=True, is_desktop=True)
    assert "/upload/q_auto:good,f_auto,dpr_auto,fl_progressive,c_limit,v1/" in url


def test_cloudinary_url_explicit_width():
    url = optimize_cloudinary_url(CLOUDINARY, width=400, quality="auto")
    assert "/upload/w_400,q_auto,f_auto," in url


def test_already_optimised_url_is_only_upgraded():
    url = "http://res.cloudinary.com/demo/image/upload/q_auto/v1/a.jpg"
    assert optimize_cloudinary_url(url) == "https://res.cloudinary.com/demo/image/upload/q_auto/v1/a.jpg"


@pytest.mark.parametrize("url", ["", "/uploads/images/a.png", "https://cdn.example.com/upload/a.png"])
def test_other_urls_untouched(url):
    assert optimize_cloudinary_url(url) == url


@pytest.mark.parametrize(
    "value, expected",
    [(0.005, Decimal("0.01")), (10, Decimal("10.00")), (Decimal("2.675"), Decimal("2.68")), (4297, Decimal("4297.00"))],
)
def test_to_money_rounds_half_up(value, expected):
    assert to_money(value) == expected


def test_to_naive_utc():
    aware = datetime(2025, 6, 1, 12, 0, tzinfo=timezone(timedelta(hours=5, minutes=30)))

    assert to_naive_utc(aware) == datetime(2025, 6, 1, 6, 30)
    assert to_naive_utc(datetime(2025, 6, 1)) == datetime(2025, 6, 1)
    assert to_naive_utc(None) is None


def test_sanitize_filename():
    assert sanitize_filename("../../etc/passwd") == "passwd"
    assert sanitize_filename("My Summer Banner.PNG") == "My-Summer-Banner.png"
    assert sanitize_filename("") == "upload"


def test_validate_file_extension():
    assert validate_file_extension("a.JPG", [".jpg", ".png"]) is True
    assert validate_file_extension("a.exe", [".jpg", ".png"]) is False
