'''
**njalla**
---------

A client for the DNS records of domains hosted at Njalla, driven through the
provider's web interface.

    from njalla import Session, zone, pages

    with Session() as session:
        session.login(email, password)
        for domain in pages.list_domains(session):
            print(zone.list_records(session, domain))

See: `njalla.session`, `njalla.pages`, `njalla.zone` and `njalla.records`.
'''
from njalla import errors, http, pages, records, zone
from njalla.session import Session, SessionState

__all__ = [
    'Session',
    'SessionState',
    'errors',
    'http',
    'pages',
    'records',
    'zone',
]
