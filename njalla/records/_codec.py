'''
Decoding of the provider's records JSON into typed records and encoding of
records back into the ordered form fields the provider accepts.

Every record type is described once in `RECORD_TYPES`: the class to build and
the wire keys it reads and writes, in the order the provider expects them.
Supporting a new type is one entry there plus its class in `_models`.
'''
from __future__ import annotations

import dataclasses as dc
import json
import logging
from types import MappingProxyType
from typing import Any, Final, NamedTuple

from njalla.errors import (
    DecodeError,
    InvalidRecordFieldError,
    MissingTypeFieldError,
    UnknownRecordTypeError,
    ValidationError,
)
from njalla.records._models import (
    AAAARecord,
    ARecord,
    CAARecord,
    CNAMERecord,
    DynamicRecord,
    MXRecord,
    NSRecord,
    PTRRecord,
    Record,
    RecordSet,
    RedirectRecord,
    SRVRecord,
    SSHFPRecord,
    TLSARecord,
    TXTRecord,
    build_unvalidated,
)

logger = logging.getLogger(__name__)

FormFields = list[tuple[str, str]]


class WireField(NamedTuple):
    key: str
    attr: str
    kind: type


_NAME = WireField('name', 'name', str)
_CONTENT = WireField('content', 'content', str)
_TTL = WireField('ttl', 'ttl', int)
_PRIO = WireField('prio', 'priority', int)

_STANDARD = (_NAME, _CONTENT, _TTL)


@dc.dataclass(frozen=True, slots=True)
class RecordSchema:
    record_cls: type[Record]
    fields: tuple[WireField, ...]


RECORD_TYPES: Final = MappingProxyType({
    'A': RecordSchema(ARecord, _STANDARD),
    'AAAA': RecordSchema(AAAARecord, _STANDARD),
    'CNAME': RecordSchema(CNAMERecord, _STANDARD),
    'MX': RecordSchema(MXRecord, (*_STANDARD, _PRIO)),
    'TXT': RecordSchema(TXTRecord, _STANDARD),
    'SRV': RecordSchema(SRVRecord, (
        *_STANDARD,
        _PRIO,
        WireField('weight', 'weight', int),
        WireField('port', 'port', int),
    )),
    'CAA': RecordSchema(CAARecord, _STANDARD),
    'PTR': RecordSchema(PTRRecord, _STANDARD),
    'NS': RecordSchema(NSRecord, _STANDARD),
    'TLSA': RecordSchema(TLSARecord, _STANDARD),
    'Redirect': RecordSchema(RedirectRecord, (
        _NAME,
        WireField('content', 'url', str),
        WireField('prio', 'redirect_type', int),
    )),
    'Dynamic': RecordSchema(DynamicRecord, (_NAME, _TTL)),
    'SSHFP': RecordSchema(SSHFPRecord, (
        *_STANDARD,
        WireField('ssh_algorithm', 'ssh_algorithm', int),
        WireField('ssh_type', 'ssh_type', int),
    )),
})


def _coerce(value: Any, field: WireField, index: int) -> Any:
    if field.kind is str:
        if not isinstance(value, str):
            raise InvalidRecordFieldError(index, field.key, 'must be a string')
        return value

    if isinstance(value, int) and not isinstance(value, bool):
        return value

    # form-encoded round trips carry numbers as strings
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            pass

    raise InvalidRecordFieldError(index, field.key, 'must be an integer')


def _record_type_of(obj: Any, index: int) -> str:
    rtype = obj.get('type') if isinstance(obj, dict) else None
    if not isinstance(rtype, str):
        raise MissingTypeFieldError(index)
    return rtype


def decode_record(obj: Any, index: int = 0, *, validate: bool = True) -> Record:
    '''
    Decode one element of the records array into its typed record.

    Parameters
    ----------
    obj : Any
        The decoded JSON object, extra keys are ignored.
    index : int, optional
        Position in the outer array, used to annotate errors, by default 0
    validate : bool, optional
        Check values against the accepted value sets, by default True

    Returns
    -------
    Record

    Raises
    ------
    MissingTypeFieldError
    UnknownRecordTypeError
    InvalidRecordFieldError
    ValidationError
        If a value is outside what the provider accepts for that field.
        Only raised when `validate` is set.
    '''
    rtype = _record_type_of(obj, index)
    schema = RECORD_TYPES.get(rtype)
    if schema is None:
        raise UnknownRecordTypeError(rtype)

    kwargs: dict[str, Any] = {}
    for field in schema.fields:
        if field.key not in obj:
            raise InvalidRecordFieldError(index, field.key, 'is missing')
        kwargs[field.attr] = _coerce(obj[field.key], field, index)

    raw_id = obj.get('id')
    kwargs['id'] = 0 if raw_id is None else _coerce(
        raw_id, WireField('id', 'id', int), index
    )

    if not validate:
        return build_unvalidated(schema.record_cls, **kwargs)

    try:
        return schema.record_cls(**kwargs)
    except ValidationError as exc:
        exc.add_note(f'while decoding {rtype} record at index {index}')
        raise


def decode_records(data: bytes | str) -> RecordSet:
    '''
    Decode the provider's records array, preserving its order.

    Values are taken as served. A record outside the accepted value sets
    still decodes so the rest of the zone can be read and restated.

    Parameters
    ----------
    data : bytes | str
        The JSON text of the array.

    Returns
    -------
    RecordSet

    Raises
    ------
    DecodeError
        If the text is not a JSON array or any element cannot be decoded.
    '''
    try:
        parsed = json.loads(data)
    except json.JSONDecodeError as exc:
        raise DecodeError(f'Records blob is not valid JSON: {exc}') from exc

    if not isinstance(parsed, list):
        raise DecodeError(
            f'Records blob must be a JSON array, got {type(parsed).__name__}'
        )

    records = [
        decode_record(obj, index, validate=False)
        for index, obj in enumerate(parsed)
    ]
    logger.debug('Decoded %d records', len(records))
    return RecordSet(records)


def encode_record(record: Record) -> FormFields:
    '''
    Encode a record into the ordered `(key, value)` pairs the provider's
    forms expect: `id`, `type`, `name`, then the type's own fields.

    Parameters
    ----------
    record : Record

    Returns
    -------
    FormFields
    '''
    schema = RECORD_TYPES.get(record.type)
    if schema is None or not isinstance(record, schema.record_cls):
        raise TypeError(f'Cannot encode {type(record).__name__}')

    pairs: FormFields = [
        ('id', str(int(record.id))),
        ('type', record.type),
    ]
    for field in schema.fields:
        value = getattr(record, field.attr)
        pairs.append((field.key, str(int(value)) if field.kind is int else value))
    return pairs


def get_id(record: Record) -> int:
    return record.id


def dumps_records(records: RecordSet) -> str:
    '''
    Render a record set as one JSON object per line, in page order.
    '''
    return '\n'.join(
        json.dumps(dict(encode_record(record)))
        for record in records
    )
