import logging
from urllib.parse import parse_qs, urlparse

from spotlight import crud
from spotlight.services.redirect import log_redirect_click, merge_utm_params
from tests.utils.factories import create_test_campaign


def query_of(url):
    return parse_qs(urlparse(url).query)


def test_adds_tracking_params():
    url = merge_utm_params("https://chaico.example.com/offer", "cmp_1", "hero")

    assert query_of(url) == {
        "utm_source": ["jugnu"],
        "utm_medium": ["spotlight"],
        "utm_campaign": ["cmp_1"],
        "utm_content": ["hero"],
    }


def test_never_overwrites_existing_params():
    url = merge_utm_params(
        "https://chaico.example.com/offer?utm_source=newsletter&ref=abc#menu", "cmp_1"
    )

    params = query_of(url)
    assert params["utm_source"] == ["newsletter"]
    assert params["ref"] == ["abc"]
    assert params["utm_medium"] == ["spotlight"]
    assert "utm_content" not in params
    assert urlparse(url).fragment == "menu"


def test_click_logged_on_primary_placement(db):
    campaign = create_test_campaign(db, placements=["home_mid", "events_banner"])

    assert log_redirect_click(db, campaign_id=campaign.id) is True

    rows = crud.metrics.get_rows(db, campaign_id=campaign.id)
    assert len(rows) == 1
    assert rows[0].placement == "home_mid"
    assert rows[0].clicks == 1


def test_unknown_campaign_is_not_recorded(db, caplog):
    with caplog.at_level(logging.WARNING, logger="spotlight.services.redirect"):
        assert log_redirect_click(db, campaign_id="cmp_missing") is False

    assert crud.metrics.get_all_rows(db) == []
    assert "Redirect click for unknown campaign cmp_missing, not recorded" in caplog.text
