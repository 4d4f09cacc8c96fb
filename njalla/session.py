'''
**njalla.session**
-----------------

The authenticated browser-like session against the Njalla web interface.

The provider has no API, so a `Session` does what a browser would: it loads
the sign-in page to pick up the CSRF token and cookie, submits the sign-in
form, and then replays the `csrftoken` cookie as the form token on every
state-changing request. A session is explicitly owned by the caller and
passed to every call in `njalla.pages` and `njalla.zone`.
'''
from __future__ import annotations

import enum
import logging
from collections.abc import Mapping
from typing import Final, Self

import httpx
from bs4 import BeautifulSoup

from njalla import http
from njalla.errors import (
    AuthenticationFailedError,
    ExtractionError,
    NotLoggedInError,
    RequestFailedError,
    TokenNotFoundError,
)

logger = logging.getLogger(__name__)

BASE_URL: Final = 'https://njal.la'
SIGNIN_PATH: Final = '/signin/'
DOMAINS_PATH: Final = '/domains/'

TOKEN_FIELD: Final = 'csrfmiddlewaretoken'
TOKEN_COOKIE: Final = 'csrftoken'


class SessionState(enum.Enum):
    ANONYMOUS = 'anonymous'
    AUTHENTICATED = 'authenticated'


def find_csrf_token(html: str) -> str | None:
    '''
    Get the value of the first CSRF token input on a page.

    Parameters
    ----------
    html : str

    Returns
    -------
    str | None
        None if there is no such input or it has no value attribute.
    '''
    soup = BeautifulSoup(html, 'html.parser')
    tag = soup.select_one(f'input[name="{TOKEN_FIELD}"]')
    if tag is None:
        return None

    value = tag.get('value')
    return None if value is None else str(value)


class Session:
    '''
    One signed-in account. Not safe to share between threads: the token
    read and the POST that uses it are not atomic with respect to a
    concurrent `login`.
    '''

    def __init__(
        self,
        base_url: str = BASE_URL,
        *,
        config: http.ClientConfig | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.base_url: str = base_url.rstrip('/')
        self._client = http.NjallaClient(config=config, transport=transport)
        self._state = SessionState.ANONYMOUS

    @property
    def client(self) -> http.NjallaClient:
        return self._client

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def is_authenticated(self) -> bool:
        return self._state is SessionState.AUTHENTICATED

    def url_for(self, path: str) -> str:
        return f'{self.base_url}{path}'

    def domain_url(self, domain: str) -> str:
        return f'{self.url_for(DOMAINS_PATH)}{domain}/'

    def bootstrap(self) -> str:
        '''
        Load the sign-in page, which sets the CSRF cookie, and read the
        token from its form.

        Returns
        -------
        str

        Raises
        ------
        TokenNotFoundError
            If the page has no token input.
        '''
        response = self._client.get(self.url_for(SIGNIN_PATH))
        token = find_csrf_token(response.text)
        if token is None:
            raise TokenNotFoundError(
                f"Couldn't find input {TOKEN_FIELD!r} on the sign-in page"
            )
        return token

    def login(self, email: str, password: str) -> None:
        '''
        Sign in with the given credentials.

        Parameters
        ----------
        email : str
        password : str

        Raises
        ------
        TokenNotFoundError
        AuthenticationFailedError
            If the sign-in form is not answered with a 200.
        '''
        token = self.bootstrap()
        response = self._client.post_form(
            self.url_for(SIGNIN_PATH),
            {
                TOKEN_FIELD: token,
                'email': email,
                'password': password,
            },
        )
        if response.status_code != 200:
            self._state = SessionState.ANONYMOUS
            raise AuthenticationFailedError(response.status_code)

        self._state = SessionState.AUTHENTICATED
        logger.info('Signed in to %s', self.base_url)

    def current_token(self) -> str:
        '''
        Read the CSRF token from the cookie store. This is the pre-flight
        check before every privileged call and never touches the network.

        Returns
        -------
        str

        Raises
        ------
        NotLoggedInError
        '''
        if not self.is_authenticated:
            raise NotLoggedInError('Not logged in')

        for cookie in self._client.cookies.jar:
            if cookie.name == TOKEN_COOKIE and cookie.value:
                return cookie.value

        raise NotLoggedInError(f'Not logged in: no {TOKEN_COOKIE!r} cookie')

    def fetch_page(self, url: str) -> str:
        '''
        GET a page that requires a signed-in session.

        Parameters
        ----------
        url : str

        Returns
        -------
        str
            The response body.

        Raises
        ------
        NotLoggedInError
        ExtractionError
            If the page answers with an error status, so it cannot be read.
        '''
        self.current_token()
        response = self._client.get(url)
        if response.is_error:
            raise ExtractionError(
                f'GET {url} answered {response.status_code}, no page to read'
            )
        return response.text

    def submit(self, url: str, action: str, fields: Mapping[str, str]) -> None:
        '''
        POST a state-changing form with `action` and the current token.

        Parameters
        ----------
        url : str
        action : str
            The provider's form action, such as `add` or `update`.
        fields : Mapping[str, str]

        Raises
        ------
        NotLoggedInError
        RequestFailedError
            If the form is not answered with a 200.
        '''
        data = dict(fields)
        data['action'] = action
        data[TOKEN_FIELD] = self.current_token()

        response = self._client.post_form(url, data)
        if response.status_code != 200:
            raise RequestFailedError(f'{action} on {url}', response.status_code)

        logger.info('Submitted %s to %s', action, url)

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> Self:
        return self

    def __exit__(self, *args) -> None:
        self.close()
