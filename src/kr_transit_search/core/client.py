"""HTTP client for the bus and subway station registries."""

import logging
from dataclasses import dataclass
from urllib.parse import quote, quote_plus

import requests
from tenacity import (
    Retrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from .config import DEFAULT_RADIUS, TransitSettings
from .exceptions import ProviderFailure
from .models import StopKind

logger = logging.getLogger(__name__)

BUS_BY_NAME_PATH = "getStationByName"
BUS_BY_POS_PATH = "getStationByPos"
SUBWAY_BY_NAME_PATH = "getKwrdFndSubwaySttnList"


@dataclass(frozen=True)
class RawResponse:
    """Undecoded provider response handed to the normalizer."""

    provider: StopKind
    text: str
    content_type: str | None = None


class ProviderClient:
    """Issues one query per call against a provider and returns the raw body."""

    def __init__(self, settings: TransitSettings | None = None):
        """Initialize the client.

        Args:
            settings: Credentials, endpoints and timeouts; read from the
                environment when omitted
        """
        self.settings = settings or TransitSettings.from_env()
        self.headers = {
            "User-Agent": "kr-transit-search/0.1.0",
            "Accept": "application/json, application/xml;q=0.9, */*;q=0.8",
        }

    def open_session(self) -> requests.Session:
        """Create a session for a single request.

        Concurrent branches run in separate threads and must not share one.
        """
        session = requests.Session()
        session.headers.update(self.headers)
        return session

    def fetch_by_name(self, term: str, provider: StopKind) -> RawResponse:
        """Search a provider's registry by station name.

        The term is sent as-is; an empty term is left for the provider to judge.

        Raises:
            ProviderFailure: On network errors or non-2xx responses
        """
        if provider == StopKind.BUS:
            url = f"{self.settings.bus_base_url.rstrip('/')}/{BUS_BY_NAME_PATH}"
            params = {
                "serviceKey": self.settings.key_for("bus"),
                "stSrch": term,
                "resultType": "json",
            }
        else:
            url = f"{self.settings.subway_base_url.rstrip('/')}/{SUBWAY_BY_NAME_PATH}"
            params = {
                "serviceKey": self.settings.key_for("subway"),
                "subwayStationName": term,
                "_type": "json",
                "numOfRows": str(self.settings.subway_page_size),
                "pageNo": "1",
            }
        return self._get(provider, url, params)

    def fetch_by_location(
        self, x: float, y: float, radius: float = DEFAULT_RADIUS
    ) -> RawResponse:
        """Search bus stops around a TM coordinate.

        The bus registry caps the radius server-side (about 1500 m); no
        local limit is applied.

        Raises:
            ProviderFailure: On network errors or non-2xx responses
        """
        url = f"{self.settings.bus_base_url.rstrip('/')}/{BUS_BY_POS_PATH}"
        params = {
            "serviceKey": self.settings.key_for("bus"),
            "tmX": _format_number(x),
            "tmY": _format_number(y),
            "radius": _format_number(radius),
            "resultType": "json",
        }
        return self._get(StopKind.BUS, url, params)

    def _get(self, provider: StopKind, url: str, params: dict[str, str]) -> RawResponse:
        key = params.get("serviceKey", "")
        logger.debug(f"Querying {provider} provider: {url}")

        retrying = Retrying(
            stop=stop_after_attempt(self.settings.retry_attempts),
            wait=wait_exponential(multiplier=0.5, min=0.5, max=4),
            retry=retry_if_exception_type(
                (requests.exceptions.ConnectionError, requests.exceptions.Timeout)
            ),
            reraise=True,
        )
        try:
            with self.open_session() as session:
                response = retrying(
                    session.get, url, params=params, timeout=self.settings.timeout
                )
        except requests.exceptions.RequestException as e:
            raise ProviderFailure(str(provider), redact(str(e), key)) from e

        if not response.ok:
            cause = f"HTTP {response.status_code}: {response.reason or ''}".rstrip(": ")
            raise ProviderFailure(str(provider), redact(cause, key))

        content_type = response.headers.get("Content-Type") or ""
        if "charset" not in content_type.lower():
            # Both registries serve UTF-8; requests would assume ISO-8859-1 for text/*
            response.encoding = "utf-8"

        return RawResponse(
            provider=provider,
            text=response.text,
            content_type=response.headers.get("Content-Type"),
        )


def redact(message: str, secret: str) -> str:
    """Remove a credential, raw or URL-encoded, from a message."""
    if not secret:
        return message
    for form in {secret, quote(secret, safe=""), quote_plus(secret)}:
        message = message.replace(form, "***")
    return message


def _format_number(value: float) -> str:
    """Render whole numbers without a trailing ".0"."""
    if float(value).is_integer():
        return str(int(value))
    return str(value)
