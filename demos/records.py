import logging
import os
import sys

from njalla import Session, errors, pages, zone
from njalla.records import dumps_records


def main() -> int:
    email = os.environ.get('NJALLA_EMAIL')
    password = os.environ.get('NJALLA_PASSWORD')
    if not email or not password:
        print('Set NJALLA_EMAIL and NJALLA_PASSWORD to run this demo')
        return 1

    logging.basicConfig(level=logging.INFO)

    with Session() as session:
        try:
            session.login(email, password)
            domains = sys.argv[1:] or pages.list_domains(session)
            for domain in domains:
                records = zone.list_records(session, domain)
                print(f'--- {domain} ({len(records)} records) ---')
                print(dumps_records(records))
        except errors.NjallaError as exc:
            print(f'Error talking to Njalla, check your credentials and network connection: {exc}')
            return 1

    return 0


if __name__ == '__main__':
    sys.exit(main())
