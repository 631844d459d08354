"""Pwned Passwords range API client."""

from __future__ import annotations

import logging

from requests import Session
from requests.adapters import HTTPAdapter
from requests.exceptions import RequestException
from urllib3.util.retry import Retry

from .config import RANGE_API_URL, ProxyDescriptor, ValidatorConfig
from .models import LookupResult, Status

API_KEY_HEADER = "hibp-api-key"


def make_session(user_agent: str) -> Session:
    """Create a requests session that identifies itself and never retries."""
    session = Session()
    session.headers.update({"User-Agent": user_agent})
    # rate-limit retries are a policy decision, not a transport one
    adapter = HTTPAdapter(max_retries=Retry(total=0, read=False, raise_on_status=False))
    session.mount("https://", adapter)
    session.mount("http://", adapter)
    return session


class RangeLookupClient:
    """Issues k-anonymity range queries and classifies the response."""

    def __init__(
        self,
        *,
        session: Session,
        api_key: str | None,
        timeout: float,
        logger: logging.Logger,
        proxy: ProxyDescriptor | None = None,
        api_url: str = RANGE_API_URL,
    ) -> None:
        self._session = session
        self._api_key = api_key
        self._timeout = timeout
        self._logger = logger
        self._proxy = proxy
        self._api_url = api_url

    @classmethod
    def from_config(cls, config: ValidatorConfig, *, logger: logging.Logger) -> RangeLookupClient:
        return cls(
            session=make_session(config.user_agent),
            api_key=config.api_key,
            timeout=config.request_timeout,
            logger=logger,
            proxy=config.proxy,
            api_url=config.api_url,
        )

    def get_api_url(self, prefix: str) -> str:
        return self._api_url.format(prefix=prefix)

    def lookup(self, prefix: str, timeout: float | None = None) -> LookupResult:
        url = self.get_api_url(prefix)
        headers = {API_KEY_HEADER: self._api_key} if self._api_key else {}
        proxies = self._proxy.to_requests_proxies() if self._proxy else {}
        effective_timeout = self._timeout if timeout is None else min(timeout, self._timeout)
        try:
            response = self._session.get(
                url, headers=headers, proxies=proxies, timeout=effective_timeout
            )
        except (RequestException, ValueError) as exc:
            self._logger.error("Range lookup failed for prefix %s: %s", prefix, exc)
            return LookupResult(Status.UNKNOWN_API_ERROR)

        status = Status.from_http_status(response.status_code)
        self._logger.debug(
            "Range lookup for prefix %s returned HTTP %s", prefix, response.status_code
        )
        if status is Status.PASSWORD_PWNED:
            return LookupResult(status, body=response.text, http_status=response.status_code)
        if status is Status.TOO_MANY_REQUESTS:
            self._logger.warning(
                "Range API rate limit exceeded (Retry-After: %s)",
                response.headers.get("Retry-After", "unknown"),
            )
        elif status is Status.UNAUTHORIZED:
            self._logger.error("Range API rejected the hibp-api-key (HTTP 401)")
        else:
            self._logger.error("Unexpected range API response: HTTP %s", response.status_code)
        return LookupResult(status, http_status=response.status_code)

    def close(self) -> None:
        self._session.close()
