import pytest

from spotlight.utils.validators import is_trusted_asset_host, validate_asset_url, validate_url


@pytest.mark.parametrize(
    "url",
    ["https://chaico.example.com", "http://localhost:3000/path?q=1"],
)
def test_valid_urls(url):
    assert validate_url(url) == (True, None)


@pytest.mark.parametrize(
    "url",
    ["", "ftp://files.example.com/a", "javascript:alert(1)", "https://", "/relative/path"],
)
def test_invalid_urls(url):
    valid, error = validate_url(url, "to")
    assert valid is False
    assert error.startswith("to ") or error == "Invalid to format"


def test_overlong_url():
    valid, error = validate_url("https://example.com/" + "a" * 2100)
    assert valid is False
    assert "maximum length" in error


def test_trusted_hosts_match_subdomains_only():
    assert is_trusted_asset_host("bucket.s3.amazonaws.com")
    assert is_trusted_asset_host("imgur.com")
    assert not is_trusted_asset_host("notimgur.com")


def test_asset_url_rules():
    assert validate_asset_url(None) == (True, None)
    assert validate_asset_url("https://cdn.example.com/banner.WEBP")[0] is True
    assert validate_asset_url("https://res.cloudinary.com/demo/image/upload/abc")[0] is True
    assert validate_asset_url("https://cdn.example.com/banner.pdf")[0] is False
