import logging
import pickle
from typing import Any

import pytest
import requests

from pwned_passwords_validator.client import RangeLookupClient, make_session
from pwned_passwords_validator.config import ProxyDescriptor, ProxyType, ValidatorConfig
from pwned_passwords_validator.models import Status


class FakeResponse:
    def __init__(
        self, *, status_code: int = 200, text: str = "", headers: dict[str, str] | None = None
    ) -> None:
        self.status_code = status_code
        self.text = text
        self.headers = headers or {}


class FakeSession:
    def __init__(self, response: FakeResponse | None = None, raise_error: bool = False) -> None:
        self._response = response or FakeResponse()
        self._raise_error = raise_error
        self.calls: list[tuple[str, dict[str, Any]]] = []

    def get(self, url: str, **kwargs: Any) -> FakeResponse:
        self.calls.append((url, kwargs))
        if self._raise_error:
            raise requests.ConnectionError("connection refused")
        return self._response


def _client(session: FakeSession, **kwargs: Any) -> RangeLookupClient:
    return RangeLookupClient(
        session=session,  # type: ignore[arg-type]
        api_key=kwargs.pop("api_key", "key"),
        timeout=5.0,
        logger=logging.getLogger("test"),
        **kwargs,
    )


def test_get_api_url_interpolates_prefix() -> None:
    client = _client(FakeSession())
    assert client.get_api_url("F2B14") == "https://api.pwnedpasswords.com/range/F2B14"


def test_lookup_sends_api_key_and_returns_body_on_200() -> None:
    session = FakeSession(FakeResponse(text="AAAA:1"))
    result = _client(session).lookup("F2B14")
    assert result.status is Status.PASSWORD_PWNED
    assert result.body == "AAAA:1"
    assert result.http_status == 200
    url, kwargs = session.calls[0]
    assert url.endswith("/range/F2B14")
    assert kwargs["headers"] == {"hibp-api-key": "key"}
    assert kwargs["timeout"] == 5.0
    assert kwargs["proxies"] == {}


def test_lookup_omits_api_key_header_when_not_configured() -> None:
    session = FakeSession(FakeResponse(text=""))
    _client(session, api_key=None).lookup("F2B14")
    assert session.calls[0][1]["headers"] == {}


def test_lookup_caps_timeout_with_deadline() -> None:
    session = FakeSession()
    _client(session).lookup("F2B14", timeout=1.5)
    _client(session).lookup("F2B14", timeout=60.0)
    assert [kwargs["timeout"] for _, kwargs in session.calls] == [1.5, 5.0]


def test_lookup_maps_status_codes() -> None:
    expected = {
        401: Status.UNAUTHORIZED,
        429: Status.TOO_MANY_REQUESTS,
        404: Status.UNKNOWN_API_ERROR,
        503: Status.UNKNOWN_API_ERROR,
    }
    for code, status in expected.items():
        result = _client(FakeSession(FakeResponse(status_code=code))).lookup("ABCDE")
        assert result.status is status
        assert result.http_status == code
        assert result.body is None


def test_lookup_absorbs_transport_errors() -> None:
    result = _client(FakeSession(raise_error=True)).lookup("ABCDE")
    assert result.status is Status.UNKNOWN_API_ERROR
    assert result.http_status is None
    assert result.error_code == -1


def test_lookup_routes_through_proxy() -> None:
    session = FakeSession()
    proxy = ProxyDescriptor(ProxyType.SOCKS, "localhost", 1080)
    _client(session, proxy=proxy).lookup("ABCDE")
    assert session.calls[0][1]["proxies"] == {
        "http": "socks5h://localhost:1080",
        "https": "socks5h://localhost:1080",
    }
def test_make_session_sets_user_agent() -> None:
    session = make_session("my-agent")
    assert session.headers["User-Agent"] == "my-agent"
    assert session.trust_env is True


def test_lookup_direct_proxy_disables_every_scheme() -> None:
    session = FakeSession()
    _client(session, proxy=ProxyDescriptor.direct()).lookup("ABCDE")
    assert session.calls[0][1]["proxies"] == {"http": None, "https": None, "all": None}


def test_direct_proxy_skips_environment_proxies_but_keeps_ca_bundle(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    for name in ("https_proxy", "http_proxy", "all_proxy", "no_proxy", "NO_PROXY", "ALL_PROXY"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("HTTPS_PROXY", "http://corp-proxy:3128")
    monkeypatch.setenv("REQUESTS_CA_BUNDLE", "/etc/ssl/corp.pem")
    session = make_session("agent")
    url = "https://api.pwnedpasswords.com/range/ABCDE"

    from_env = session.merge_environment_settings(url, {}, None, None, None)
    assert from_env["proxies"]["https"] == "http://corp-proxy:3128"

    direct = session.merge_environment_settings(
        url, ProxyDescriptor.direct().to_requests_proxies(), None, None, None
    )
    assert "https" not in direct["proxies"]
    assert direct["verify"] == "/etc/ssl/corp.pem"
    session.close()


def test_config_with_proxy_is_picklable() -> None:
    config = ValidatorConfig(api_key="key", proxy=ProxyDescriptor(ProxyType.HTTP, "proxy", 3128))
    assert pickle.loads(pickle.dumps(config)) == config
