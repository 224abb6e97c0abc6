"""
NBA API Transport Patch

stats.nba.com drops or stalls requests that do not look like they come from
a browser. This replaces nba_api's request sender with one that goes through
curl_cffi's browser impersonation.

Imported for its side effect at application startup, before any nba_api
endpoint is constructed.
"""

from curl_cffi import requests
from nba_api.library.http import NBAHTTP

from core.settings import settings

IMPERSONATE = "chrome110"

STATS_HEADERS = {
    "Host": "stats.nba.com",
    "User-Agent": "Mozilla/5.0 (Windows NT 10.0; Win64; x64; rv:109.0) Gecko/20100101 Firefox/117.0",
    "Accept": "application/json, text/plain, */*",
    "Accept-Language": "en-US,en;q=0.5",
    "Referer": "https://www.nba.com/",
    "Origin": "https://www.nba.com",
    "Connection": "keep-alive",
    "x-nba-stats-origin": "stats",
    "x-nba-stats-token": "true",
}


def build_headers(*overrides, referer=None) -> dict:
    """Browser headers with any per-client or per-call headers layered on top."""
    headers = dict(STATS_HEADERS)
    for extra in overrides:
        if extra:
            headers.update(extra)
    if referer:
        headers["Referer"] = referer
    return headers


def send_impersonated_request(
    self,
    endpoint,
    parameters,
    referer=None,
    proxy=None,
    headers=None,
    timeout=None,
    raise_exception_on_error=False,
):
    """Drop-in replacement for NBAHTTP.send_api_request."""
    url = self.base_url.format(endpoint=endpoint)

    # curl_cffi would send None as the literal string "None"
    params = {key: value for key, value in parameters.items() if value is not None}

    response = requests.get(
        url,
        params=params,
        headers=build_headers(self.headers, headers, referer=referer),
        timeout=timeout or settings.http_timeout,
        impersonate=IMPERSONATE,
    )

    return self.nba_response(
        response=response.text,
        status_code=response.status_code,
        url=url,
    )


def apply_nba_api_patch() -> None:
    NBAHTTP.send_api_request = send_impersonated_request


apply_nba_api_patch()
