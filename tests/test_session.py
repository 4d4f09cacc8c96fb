"""
Tests for the sign-in flow and the cookie-backed token check.
"""

import unittest
from urllib.parse import parse_qs

import httpx

from njalla import Session, SessionState
from njalla.errors import (
    AuthenticationError,
    AuthenticationFailedError,
    NotLoggedInError,
    TokenNotFoundError,
    TransportError,
)
from njalla.http import ClientConfig, URLRejectedError, UserAgent, verify_http_url
from tests._fake_provider import COOKIE_TOKEN, LOGIN_TOKEN, FakeNjalla


class TestUrls(unittest.TestCase):

    def test_default_base_url(self):
        with Session(transport=httpx.MockTransport(FakeNjalla())) as session:
            self.assertEqual(session.base_url, 'https://njal.la')
            self.assertEqual(session.url_for('/signin/'), 'https://njal.la/signin/')
            self.assertEqual(
                session.domain_url('mydomain.com'),
                'https://njal.la/domains/mydomain.com/',
            )

    def test_trailing_slash_is_trimmed(self):
        with Session('https://njal.la/', transport=httpx.MockTransport(FakeNjalla())) as session:
            self.assertEqual(session.url_for('/domains/'), 'https://njal.la/domains/')


class TestBootstrap(unittest.TestCase):

    def test_returns_token_from_signin_page(self):
        provider = FakeNjalla()
        with provider.session() as session:
            self.assertEqual(session.bootstrap(), LOGIN_TOKEN)
            self.assertEqual(session.state, SessionState.ANONYMOUS)

        self.assertEqual(provider.requests[0].method, 'GET')
        self.assertEqual(provider.requests[0].url, 'https://njal.la/signin/')

    def test_missing_token(self):
        provider = FakeNjalla(signin_html='<form><input name="email"></form>')
        with provider.session() as session:
            with self.assertRaises(TokenNotFoundError):
                session.bootstrap()
            with self.assertRaises(AuthenticationError):
                session.login('user@example.com', 'hunter2')

        self.assertEqual(provider.posts, [])


class TestLogin(unittest.TestCase):

    def test_posts_signin_form(self):
        provider = FakeNjalla()
        with provider.signed_in_session() as session:
            self.assertTrue(session.is_authenticated)

        request = provider.posts[0]
        self.assertEqual(request.url, 'https://njal.la/signin/')
        self.assertEqual(request.headers['Content-Type'], 'application/x-www-form-urlencoded')
        self.assertEqual(request.headers['Referer'], 'https://njal.la/signin/')
        self.assertEqual(parse_qs(request.content.decode()), {
            'csrfmiddlewaretoken': [LOGIN_TOKEN],
            'email': ['user@example.com'],
            'password': ['hunter2'],
        })

    def test_token_comes_from_cookie(self):
        provider = FakeNjalla()
        with provider.signed_in_session() as session:
            requests_before = len(provider.requests)
            self.assertEqual(session.current_token(), COOKIE_TOKEN)
            self.assertEqual(len(provider.requests), requests_before)

    def test_rejected_login(self):
        provider = FakeNjalla(login_status=403)
        with provider.session() as session:
            with self.assertRaises(AuthenticationFailedError) as ctx:
                session.login('user@example.com', 'wrong')
            self.assertEqual(ctx.exception.status, 403)
            self.assertFalse(session.is_authenticated)
            with self.assertRaises(NotLoggedInError):
                session.current_token()


class TestCurrentToken(unittest.TestCase):

    def test_anonymous_session(self):
        with FakeNjalla().session() as session:
            with self.assertRaises(NotLoggedInError):
                session.current_token()

    def test_bootstrap_alone_does_not_authenticate(self):
        with FakeNjalla().session() as session:
            session.bootstrap()
            with self.assertRaises(NotLoggedInError):
                session.current_token()

    def test_missing_cookie(self):
        provider = FakeNjalla(set_cookie=False)
        with provider.signed_in_session() as session:
            with self.assertRaises(NotLoggedInError):
                session.current_token()


class TestTransport(unittest.TestCase):

    def test_network_failures_are_wrapped(self):
        def refuse(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError('connection refused', request=request)

        with Session(transport=httpx.MockTransport(refuse)) as session:
            with self.assertRaises(TransportError) as ctx:
                session.bootstrap()

        self.assertIsInstance(ctx.exception.__cause__, httpx.ConnectError)

    def test_verify_http_url(self):
        self.assertEqual(
            verify_http_url('http://njal.la/signin/'),
            httpx.URL('https://njal.la/signin/'),
        )
        with self.assertRaises(URLRejectedError):
            verify_http_url('ftp://njal.la/')

    def test_client_defaults(self):
        config = ClientConfig()
        self.assertTrue(config.follow_redirects)
        self.assertFalse(config.randomize_user_agent)

        with FakeNjalla().session() as session:
            self.assertEqual(session.client.headers['User-Agent'], UserAgent.get_header())


if __name__ == '__main__':
    unittest.main()
