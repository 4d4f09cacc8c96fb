'''
**njalla.pages**
---------------

Scraping of the signed-in pages: the domain list and the `var records = [...]`
array embedded in each domain's management page.

The records array is not served by any endpoint, it only exists inside an
inline script. `slice_records_blob` is the one place that knows how to cut
it out, keep changes to the provider's markup confined to it.
'''
from __future__ import annotations

import logging
from typing import Final

from bs4 import BeautifulSoup

from njalla.session import DOMAINS_PATH, Session

logger = logging.getLogger(__name__)

RECORDS_MARKER: Final = 'var records = '
RECORDS_TERMINATOR: Final = '];\n'
MANAGE_MARKER: Final = 'Manage'


def parse_domain_links(html: str) -> list[str]:
    '''
    Get the domain names linked from the account's domain table,
    in document order.

    Parameters
    ----------
    html : str

    Returns
    -------
    list[str]
    '''
    soup = BeautifulSoup(html, 'html.parser')
    domains: list[str] = []
    for anchor in soup.select(f'.table a[href^="{DOMAINS_PATH}"]'):
        if MANAGE_MARKER not in anchor.get_text():
            continue

        href = str(anchor.get('href'))
        domain = href.removeprefix(DOMAINS_PATH).removesuffix('/')
        if domain:
            domains.append(domain)
    return domains


def slice_records_blob(script_text: str) -> str | None:
    '''
    Cut the records array out of an inline script.

    Takes everything after `var records = ` up to the first `];` that ends
    a line, including the closing `]`.

    Parameters
    ----------
    script_text : str

    Returns
    -------
    str | None
        None if the marker or the terminator is missing.
    '''
    start = script_text.find(RECORDS_MARKER)
    if start == -1:
        return None

    start += len(RECORDS_MARKER)
    end = script_text.find(RECORDS_TERMINATOR, start)
    if end == -1:
        return None

    return script_text[start:end + 1]


def find_records_blob(html: str) -> str:
    '''
    Get the records array from the script blocks that carry it. When
    several do, the last one on the page wins.

    Parameters
    ----------
    html : str

    Returns
    -------
    str
        The JSON text of the array, or '' if no script carries one.
    '''
    soup = BeautifulSoup(html, 'html.parser')
    found = ''
    for script in soup.find_all('script'):
        content = script.string or script.get_text() or ''
        if RECORDS_MARKER not in content:
            continue

        blob = slice_records_blob(content)
        if blob is None:
            logger.warning('Found %r without a closing %r', RECORDS_MARKER, RECORDS_TERMINATOR)
            continue

        if found:
            logger.debug('Several script blocks carry %r, keeping the last', RECORDS_MARKER)
        found = blob

    return found


def list_domains(session: Session) -> list[str]:
    '''
    List the domains of the signed-in account.

    Parameters
    ----------
    session : Session

    Returns
    -------
    list[str]

    Raises
    ------
    NotLoggedInError
    ExtractionError
        If the page answers with an error status.
    '''
    html = session.fetch_page(session.url_for(DOMAINS_PATH))
    domains = parse_domain_links(html)
    logger.debug('Found %d domains', len(domains))
    return domains


def fetch_records_blob(session: Session, domain: str) -> str:
    '''
    Fetch the management page of `domain` and return its records array
    as JSON text.

    Parameters
    ----------
    session : Session
    domain : str

    Returns
    -------
    str
        '' if the page has no records array.

    Raises
    ------
    NotLoggedInError
    ExtractionError
        If the page answers with an error status.
    '''
    html = session.fetch_page(session.domain_url(domain))
    return find_records_blob(html)
