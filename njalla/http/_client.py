import random
import ssl
import socket
import contextlib
import dataclasses as dc
import logging
from collections.abc import Mapping
from types import MappingProxyType
from typing import Literal

import httpx

from njalla.errors import TransportError


logger = logging.getLogger(__name__)


Browsers = Literal['chrome', 'firefox']
Devices = Literal['windows', 'mac', 'linux']


class URLRejectedError(ValueError):
    '''
    Raised when a URL is rejected by the client URL normalizer.

    Parent: ValueError
    '''


def _base_limits() -> httpx.Limits:
    return httpx.Limits(
        max_connections=10,
        max_keepalive_connections=5,
        keepalive_expiry=15,
    )


def _base_timeouts() -> httpx.Timeout:
    return httpx.Timeout(
        connect=5.0,
        read=15.0,
        write=10.0,
        pool=5.0,
    )


def _default_headers() -> dict[str, str]:
    return {
        'Accept': 'text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8',
        'Accept-Language': 'en-US,en;q=0.9',
    }


class UserAgent:
    Strings = MappingProxyType({
        "chrome_windows": (
            "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
            "(KHTML, like Gecko) Chrome/118.0.0.0 Safari/537.36"
        ),
        "chrome_mac": (
            "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
            "(KHTML, like Gecko) Chrome/118.0.0.0 Safari/537.36"
        ),
        "chrome_linux": (
            "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 "
            "(KHTML, like Gecko) Chrome/118.0.0.0 Safari/537.36"
        ),
        "firefox_windows": (
            "Mozilla/5.0 (Windows NT 10.0; Win64; x64; rv:109.0) "
            "Gecko/20100101 Firefox/118.0"
        ),
        "firefox_mac": (
            "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7; rv:109.0) "
            "Gecko/20100101 Firefox/118.0"
        ),
        "firefox_linux": (
            "Mozilla/5.0 (X11; Linux x86_64; rv:109.0) "
            "Gecko/20100101 Firefox/118.0"
        ),
    })

    @classmethod
    def get_header(
        cls,
        browser: Browsers = 'firefox',
        device: Devices = 'linux'
    ) -> str:
        '''
        Get a User-Agent string for the specified browser and device.

        Parameters
        ----------
        browser : Browsers, optional
            by default 'firefox'
        device : Devices, optional
            by default 'linux'

        Returns
        -------
        str

        Raises
        ------
        KeyError
            If the combination is not in `UserAgent.Strings`.
        '''
        return cls.Strings[f"{browser}_{device}"]

    @classmethod
    def randomize(cls) -> str:
        return random.choice(list(cls.Strings.values()))


def get_socket_options() -> list[tuple]:
    '''
    cross platform socket options for TCP connections

    Returns
    -------
    list[SockOpt]
    '''
    candidates = (
        ('IPPROTO_TCP', 'TCP_NODELAY', 1),
        ('SOL_SOCKET', 'SO_KEEPALIVE', 1),
        ('IPPROTO_TCP', 'TCP_KEEPIDLE', 60),
        ('IPPROTO_TCP', 'TCP_KEEPINTVL', 10),
    )
    return [
        (getattr(socket, level), getattr(socket, option), value)
        for level, option, value in candidates
        if hasattr(socket, option)
    ]


TLS_1_2_CIPHERS = [
    "ECDHE-ECDSA-AES128-GCM-SHA256",
    "ECDHE-RSA-AES128-GCM-SHA256",
    "ECDHE-ECDSA-CHACHA20-POLY1305",
    "ECDHE-RSA-CHACHA20-POLY1305",
    "ECDHE-ECDSA-AES256-GCM-SHA384",
    "ECDHE-RSA-AES256-GCM-SHA384",
]


def browser_like_ssl_context() -> ssl.SSLContext:
    '''
    creates a "browser-like" SSL context limited to TLS 1.2 and 1.3
    with modern cipher suites and hostname verification.

    Returns
    -------
    ssl.SSLContext
    '''
    ctx = ssl.create_default_context(purpose=ssl.Purpose.SERVER_AUTH)

    ctx.minimum_version = ssl.TLSVersion.TLSv1_2
    ctx.check_hostname = True
    ctx.verify_mode = ssl.CERT_REQUIRED
    ctx.options |= ssl.OP_NO_COMPRESSION

    with contextlib.suppress(NotImplementedError):
        ctx.set_alpn_protocols(["h2", "http/1.1"])

    # TLS 1.3 suites are left at the OpenSSL defaults
    ctx.set_ciphers(":".join(TLS_1_2_CIPHERS))
    return ctx


def verify_http_url(newurl: str) -> httpx.URL:
    '''
    Verifies and normalizes a URL so credentials and CSRF tokens are
    only ever sent over HTTPS.

    Parameters
    ----------
    newurl : str

    Returns
    -------
    httpx.URL

    Raises
    ------
    URLRejectedError
        If the URL scheme is not HTTP/S or it has no host.
    '''
    url = httpx.URL(newurl)

    if url.scheme == "http":
        url = url.copy_with(scheme="https")

    if url.scheme != "https":
        raise URLRejectedError(f"Rejected unsupported URL scheme: {url.scheme}")

    if not url.host:
        raise URLRejectedError(f"Rejected URL without a host: {newurl}")

    return url


class NjallaTransport(httpx.BaseTransport):
    '''
    A custom HTTP transport for httpx that uses a browser-like SSL context
    and TCP keepalive socket options, and refuses non-HTTPS targets.
    '''
    def __init__(
        self,
        *,
        http2: bool = True,
        trust_env: bool = False,
    ) -> None:
        self._inner: httpx.HTTPTransport = httpx.HTTPTransport(
            http2=http2,
            socket_options=get_socket_options(),
            verify=browser_like_ssl_context(),
            trust_env=trust_env,
        )

    def handle_request(self, request: httpx.Request) -> httpx.Response:
        request.url = verify_http_url(str(request.url))
        return self._inner.handle_request(request)

    def close(self) -> None:
        self._inner.close()


def log_request(request: httpx.Request) -> None:
    logger.debug('Sending request: %s %s', request.method, request.url)


def log_response(response: httpx.Response) -> None:
    request = response.request
    logger.debug(
        'Received %d for %s %s',
        response.status_code,
        request.method,
        request.url,
    )


@dc.dataclass(slots=True)
class ClientConfig:
    '''
    Configuration options for the Njalla HTTP client.
    Good defaults are provided for most use cases.
    '''
    timeout: httpx.Timeout = dc.field(default_factory=_base_timeouts)
    limits: httpx.Limits = dc.field(default_factory=_base_limits)
    http2: bool = True
    follow_redirects: bool = True
    trust_env: bool = False
    randomize_user_agent: bool = False


class NjallaClient(httpx.Client):
    '''
    Thin wrapper around httpx.Client with a persistent cookie jar,
    browser-like defaults and logging hooks. Pass `transport` to
    replace the network layer (tests use `httpx.MockTransport`).
    '''

    def __init__(
        self,
        base_url: str = '',
        *,
        headers: dict[str, str] | None = None,
        config: ClientConfig | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._config: ClientConfig = config or ClientConfig()

        if transport is None:
            transport = NjallaTransport(
                http2=self._config.http2,
                trust_env=self._config.trust_env,
            )

        all_headers = _default_headers()
        all_headers['User-Agent'] = (
            UserAgent.randomize()
            if self._config.randomize_user_agent
            else UserAgent.get_header()
        )
        if headers:
            all_headers.update(headers)

        super().__init__(
            base_url=base_url,
            transport=transport,
            limits=self._config.limits,
            timeout=self._config.timeout,
            headers=all_headers,
            follow_redirects=self._config.follow_redirects,
            event_hooks={
                'request': [log_request],
                'response': [log_response],
            },
        )

    def send(self, request: httpx.Request, **kwargs) -> httpx.Response:
        try:
            return super().send(request, **kwargs)
        except httpx.TransportError as exc:
            raise TransportError(
                f'{request.method} {request.url} failed: {exc}'
            ) from exc

    def post_form(self, url: str, data: Mapping[str, str]) -> httpx.Response:
        '''
        POST a URL-encoded form the way the provider's pages submit it,
        with the target URL repeated in the `Referer` header.

        Parameters
        ----------
        url : str
            Absolute URL of the form target.
        data : Mapping[str, str]
            Form fields, sent in iteration order.

        Returns
        -------
        httpx.Response
        '''
        return self.post(
            url,
            data=dict(data),
            headers={
                'Content-Type': 'application/x-www-form-urlencoded',
                'Referer': url,
            },
        )
