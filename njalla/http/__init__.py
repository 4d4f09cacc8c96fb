'''
**njalla.http**
---------

The HTTP utilities for the Njalla client: a cookie-keeping `httpx.Client`
subclass with browser-like TLS settings, a URL normalizer that keeps every
request on HTTPS, and the form POST helper the provider's pages require.
'''
from njalla.http._client import (
    NjallaTransport,
    UserAgent,
    ClientConfig,
    NjallaClient,
    URLRejectedError,
    verify_http_url,
    browser_like_ssl_context,
)

__all__ = [
    'NjallaTransport',
    'UserAgent',
    'ClientConfig',
    'NjallaClient',
    'URLRejectedError',
    'verify_http_url',
    'browser_like_ssl_context',
]
