'''
**njalla.zone**
--------------

List, add, update and remove the DNS records of a domain.

The provider has no per-record update: its `update` action replaces the whole
zone with the submitted records, and any record left out is deleted. Updates
and removals therefore fetch a fresh snapshot of the zone, splice the change
into it and resubmit every record. Anything changed by someone else between
that fetch and the POST is overwritten; the provider offers no version or
lock to detect it.
'''
from __future__ import annotations

import json
import logging
from collections.abc import Mapping

from njalla.errors import ExtractionError, RecordNotFoundError, ValidationError
from njalla.pages import fetch_records_blob
from njalla.records import (
    RECORD_TYPES,
    FormFields,
    Record,
    RecordSet,
    decode_record,
    decode_records,
    encode_record,
)
from njalla.session import Session

logger = logging.getLogger(__name__)

Changes = Record | Mapping[str, str | int]
UpdatePayload = dict[str, dict[str, str]]

_IMMUTABLE_KEYS = frozenset({'id', 'type'})


def _form_value(value: str | int) -> str:
    if isinstance(value, int) and not isinstance(value, bool):
        return str(int(value))
    return str(value)


def _update_fields(pairs: FormFields) -> dict[str, str]:
    return {key: value for key, value in pairs if key not in _IMMUTABLE_KEYS}


def apply_changes(record: Record, changes: Changes) -> FormFields:
    '''
    Get the encoded fields of `record` after applying `changes`.

    Parameters
    ----------
    record : Record
        The record as currently served by the provider.
    changes : Changes
        Either a replacement record of the same type, or a mapping of wire
        keys (`content`, `ttl`, `prio`, ...) to new values that is laid over
        the record's own fields.

    Returns
    -------
    FormFields

    Raises
    ------
    ValidationError
        If the changes alter the type or id, name unknown keys, or produce
        values the provider does not accept.
    '''
    if isinstance(changes, Record):
        if changes.type != record.type:
            raise ValidationError(
                f'Cannot change record {record.id} from {record.type} to {changes.type}'
            )
        return encode_record(changes)

    if forbidden := _IMMUTABLE_KEYS & changes.keys():
        raise ValidationError(f'Cannot change {sorted(forbidden)} of a record')

    known = {field.key for field in RECORD_TYPES[record.type].fields}
    if unknown := changes.keys() - known:
        raise ValidationError(
            f'{record.type} records have no field(s) {sorted(unknown)}'
        )

    merged = dict(encode_record(record))
    merged.update({key: _form_value(value) for key, value in changes.items()})
    return encode_record(decode_record(merged))


def build_update_payload(
    records: RecordSet,
    record_id: int,
    changes: Changes,
) -> UpdatePayload:
    '''
    Build the whole-zone `update` payload with one record changed.

    Every record appears keyed by its stringified ID; untouched records are
    their own encoding unchanged, without `id` and `type`.

    Parameters
    ----------
    records : RecordSet
        A fresh snapshot of the zone.
    record_id : int
    changes : Changes

    Returns
    -------
    UpdatePayload

    Raises
    ------
    RecordNotFoundError
    ValidationError
    '''
    if records.find(record_id) is None:
        raise RecordNotFoundError(records.domain, record_id)

    payload: UpdatePayload = {}
    for record in records:
        if record.id == record_id:
            pairs = apply_changes(record, changes)
        else:
            pairs = encode_record(record)
        payload[str(record.id)] = _update_fields(pairs)
    return payload


def build_remove_payload(records: RecordSet, record_id: int) -> UpdatePayload:
    '''
    Build the whole-zone `update` payload that drops one record.

    Parameters
    ----------
    records : RecordSet
        A fresh snapshot of the zone.
    record_id : int

    Returns
    -------
    UpdatePayload

    Raises
    ------
    RecordNotFoundError
    '''
    if records.find(record_id) is None:
        raise RecordNotFoundError(records.domain, record_id)

    return {
        str(record.id): _update_fields(encode_record(record))
        for record in records
        if record.id != record_id
    }


def list_records(session: Session, domain: str) -> RecordSet:
    '''
    Fetch the current records of `domain`.

    Parameters
    ----------
    session : Session
    domain : str

    Returns
    -------
    RecordSet

    Raises
    ------
    NotLoggedInError
    ExtractionError
        If the domain page cannot be fetched or carries no records array.
    DecodeError
    '''
    blob = fetch_records_blob(session, domain)
    if not blob:
        raise ExtractionError(f'No records array found on the page of {domain}')

    records = decode_records(blob)
    records.domain = domain
    return records


def add_record(session: Session, domain: str, record: Record) -> None:
    '''
    Create `record` in `domain`. The provider assigns the ID, so the
    record's own `id` is not sent.

    Parameters
    ----------
    session : Session
    domain : str
    record : Record

    Raises
    ------
    NotLoggedInError
    RequestFailedError
    '''
    fields = dict(encode_record(record))
    del fields['id']
    session.submit(session.domain_url(domain), 'add', fields)
    logger.info('Added %s record %r to %s', record.type, record.name, domain)


def _submit_zone(session: Session, domain: str, payload: UpdatePayload) -> None:
    session.submit(
        session.domain_url(domain),
        'update',
        {'records': json.dumps(payload)},
    )


def update_record(
    session: Session,
    domain: str,
    record_id: int,
    changes: Changes,
) -> None:
    '''
    Change one record of `domain`, resubmitting the rest of the zone as is.

    Parameters
    ----------
    session : Session
    domain : str
    record_id : int
    changes : Changes
        See `apply_changes`.

    Raises
    ------
    NotLoggedInError
    RecordNotFoundError
    ValidationError
    RequestFailedError
    '''
    records = list_records(session, domain)
    payload = build_update_payload(records, record_id, changes)
    _submit_zone(session, domain, payload)
    logger.info('Updated record %d of %s', record_id, domain)


def remove_record(session: Session, domain: str, record_id: int) -> None:
    '''
    Delete one record of `domain` by resubmitting the zone without it.

    Parameters
    ----------
    session : Session
    domain : str
    record_id : int

    Raises
    ------
    NotLoggedInError
    RecordNotFoundError
    RequestFailedError
    '''
    records = list_records(session, domain)
    payload = build_remove_payload(records, record_id)
    _submit_zone(session, domain, payload)
    logger.info('Removed record %d from %s', record_id, domain)
