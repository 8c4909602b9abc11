"""Mobbex token derivation and endpoint URLs."""
import hashlib
from urllib.parse import parse_qs, urlparse

from app.core.config import Settings
from app.core.security import TokenAuthenticator, generate_token, get_api_endpoint


def _conf(**kw) -> Settings:
    values = {"mobbex_enabled": True, "mobbex_api_key": "key", "mobbex_access_token": "secret", "site_url": "https://api.example.com"}
    values.update(kw)
    return Settings(**values)


def test_generate_is_md5_of_joined_credentials():
    assert generate_token("key", "secret") == hashlib.md5(b"key|secret").hexdigest()


def test_validate_round_trip():
    auth = TokenAuthenticator(_conf())
    assert auth.validate(auth.generate()) is True


def test_validate_rejects_other_values():
    auth = TokenAuthenticator(_conf())
    assert auth.validate("not-the-token") is False
    assert auth.validate("") is False
    assert auth.validate(None) is False
    assert auth.validate(generate_token("key", "other")) is False


def test_credentials_are_stripped():
    assert _conf(mobbex_api_key="  key ").mobbex_api_key == "key"


def test_not_ready_without_credentials():
    assert _conf(mobbex_access_token="").is_ready() is False
    assert _conf(mobbex_enabled=False).is_ready() is False
    assert _conf().is_ready() is True


def test_webhook_endpoint_url():
    conf = _conf()
    url = get_api_endpoint("mobbex_webhook", 42, conf)
    parsed = urlparse(url)
    q = parse_qs(parsed.query)
    assert parsed.path == "/mobbex/v1/webhook"
    assert q["mobbex_order_id"] == ["42"]
    assert q["mobbex_token"] == [TokenAuthenticator(conf).generate()]
    assert "XDEBUG_SESSION_START" not in q


def test_return_endpoint_url_debug_only_for_webhook():
    conf = _conf(mobbex_debug_mode=True)
    url = get_api_endpoint("mobbex_return_url", 7, conf)
    parsed = urlparse(url)
    assert parsed.path == "/mobbex/return"
    assert "XDEBUG_SESSION_START" not in parse_qs(parsed.query)
    assert "XDEBUG_SESSION_START" in parse_qs(urlparse(get_api_endpoint("mobbex_webhook", 7, conf)).query)
