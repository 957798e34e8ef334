from starlette.responses import Response

from app.funding.cookie_settings import COOKIE_SETTINGS, cookie_settings_for
from app.funding.cookie_store import CookieStore, decode_cookie, encode_cookie
from app.funding.memory import is_funding_remembered, remember_funding
from app.funding.models import FundingEntry, FundingSourceConfig, SDKCookie

store = CookieStore(name="sdk_cookie", max_age=3600)

T0 = 1_700_000_000
WINDOW = 90 * 24 * 60 * 60
EXPIRING = {"card": FundingSourceConfig(expiry=WINDOW)}


def _remember(make_request, written_cookies, sources, cookies=None, now=T0, table=None):
    res = Response()
    remember_funding(
        make_request(cookies=cookies), res, sources, now=now, settings_table=table, store=store
    )
    return res, written_cookies(res)


def test_never_remembered_is_false(make_request):
    req = make_request()
    for source in ["paypal", "venmo", "card", "sepa"]:
        assert is_funding_remembered(req, source, now=T0, store=store) is False


def test_remember_without_expiry_lasts_forever(make_request, written_cookies):
    _, cookies = _remember(make_request, written_cookies, ["sepa"])
    req = make_request(cookies=cookies)
    assert is_funding_remembered(req, "sepa", now=T0, store=store) is True
    assert is_funding_remembered(req, "sepa", now=T0 + 50 * 365 * 86400, store=store) is True
    assert decode_cookie(cookies["sdk_cookie"]).funding["sepa"].expiry is None


def test_remember_with_expiry_window(make_request, written_cookies):
    _, cookies = _remember(make_request, written_cookies, ["card"], table=EXPIRING)
    req = make_request(cookies=cookies)
    config = EXPIRING["card"]

    assert decode_cookie(cookies["sdk_cookie"]).funding["card"].expiry == T0 + WINDOW
    assert is_funding_remembered(req, "card", config, now=T0 + WINDOW - 1, store=store) is True
    # expired only once the stored expiry is strictly in the past
    assert is_funding_remembered(req, "card", config, now=T0 + WINDOW, store=store) is True
    assert is_funding_remembered(req, "card", config, now=T0 + WINDOW + 1, store=store) is False


def test_expired_entry_is_not_purged_on_write(make_request, written_cookies):
    old = encode_cookie(
        SDKCookie(funding={"sepa": FundingEntry(remembered=True, expiry=T0 - 10)})
    )
    _, cookies = _remember(make_request, written_cookies, ["ideal"], cookies={"sdk_cookie": old})
    funding = decode_cookie(cookies["sdk_cookie"]).funding
    assert funding["sepa"].expiry == T0 - 10
    req = make_request(cookies=cookies)
    assert is_funding_remembered(req, "sepa", now=T0, store=store) is False


def test_re_remember_overwrites_expiry(make_request, written_cookies):
    _, first = _remember(make_request, written_cookies, ["card"], table=EXPIRING)
    _, second = _remember(
        make_request, written_cookies, ["card"], cookies=first, now=T0 + 1000, table=EXPIRING
    )
    assert decode_cookie(second["sdk_cookie"]).funding["card"].expiry == T0 + 1000 + WINDOW


def test_legacy_cookie_overrides_expiry(make_request):
    assert COOKIE_SETTINGS["venmo"].legacy_read
    expired = encode_cookie(SDKCookie(funding={"venmo": FundingEntry(expiry=T0 - 1)}))
    req = make_request(cookies={"sdk_cookie": expired, "pwv": "1"})
    assert is_funding_remembered(req, "venmo", now=T0, store=store) is True

    without_legacy = make_request(cookies={"sdk_cookie": expired})
    assert is_funding_remembered(without_legacy, "venmo", now=T0, store=store) is False


def test_legacy_cookie_ignored_without_legacy_read(make_request):
    config = FundingSourceConfig(legacy_read=False, legacy_key="pwv")
    req = make_request(cookies={"pwv": "1"})
    assert is_funding_remembered(req, "venmo", config, now=T0, store=store) is False


def test_override_cookies_replace_request_cookies(make_request):
    req = make_request(cookies={"pwv": "1"})
    assert is_funding_remembered(req, "venmo", now=T0, cookies={}, store=store) is False


def test_remember_writes_legacy_cookie(make_request, written_cookies):
    _, cookies = _remember(make_request, written_cookies, ["venmo"])
    assert cookies["pwv"] == "1"
    assert decode_cookie(cookies["sdk_cookie"]).funding["venmo"].remembered is True


def test_remember_merges_with_existing_sources(make_request, written_cookies):
    existing = encode_cookie(
        SDKCookie.model_validate(
            {"funding": {"paypal": {"remembered": True}}, "buyerCountry": "US"}
        )
    )
    res, cookies = _remember(
        make_request, written_cookies, ["venmo", "card"], cookies={"sdk_cookie": existing}
    )
    decoded = decode_cookie(cookies["sdk_cookie"])
    assert {"paypal", "venmo", "card"} <= set(decoded.funding)
    assert all(entry.remembered for entry in decoded.funding.values())
    assert decoded.model_extra == {"buyerCountry": "US"}

    sdk_headers = [h for h in res.headers.getlist("set-cookie") if h.startswith("sdk_cookie=")]
    assert len(sdk_headers) == 1


def test_duplicate_sources_use_last_occurrence(make_request, written_cookies):
    _, cookies = _remember(make_request, written_cookies, ["card", "sepa", "card"], table=EXPIRING)
    funding = decode_cookie(cookies["sdk_cookie"]).funding
    assert set(funding) == {"card", "sepa"}
    assert funding["card"].expiry == T0 + WINDOW


def test_unconfigured_source_gets_default_settings():
    config = cookie_settings_for("not-a-source")
    assert config == FundingSourceConfig()
    assert not config.legacy_read and config.expiry is None


def test_repeated_legacy_source_sets_legacy_cookie_once(make_request):
    res = Response()
    remember_funding(make_request(), res, ["venmo", "venmo"], now=T0, store=store)
    headers = res.headers.getlist("set-cookie")
    assert len([h for h in headers if h.startswith("pwv=")]) == 1
    assert len([h for h in headers if h.startswith("sdk_cookie=")]) == 1
