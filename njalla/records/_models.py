'''
The typed record variants the provider serves in its `var records` blob,
plus the value sets it accepts for TTL, priority, redirect and SSHFP fields.
'''
from __future__ import annotations

import dataclasses as dc
import enum
from collections.abc import Iterator
from types import MappingProxyType
from typing import Any, ClassVar, Final, overload

from njalla.errors import ValidationError


class TTL(enum.IntEnum):
    ONE_MINUTE = 60
    FIVE_MINUTES = 300
    FIFTEEN_MINUTES = 900
    THREE_HOURS = 10800
    SIX_HOURS = 21600
    ONE_DAY = 86400


class Priority(enum.IntEnum):
    ZERO = 0
    ONE = 1
    FIVE = 5
    TEN = 10
    TWENTY = 20
    THIRTY = 30
    FORTY = 40
    FIFTY = 50
    SIXTY = 60


class RedirectType(enum.IntEnum):
    PERMANENT = 301
    TEMPORARY = 302


class SSHAlgorithm(enum.IntEnum):
    RSA = 1
    DSA = 2
    ECDSA = 3
    ED25519 = 4


class SSHType(enum.IntEnum):
    SHA1 = 1
    SHA256 = 2


# attribute name -> enumeration whose values the attribute must hold
_CONSTRAINED_FIELDS: Final = MappingProxyType({
    'ttl': TTL,
    'priority': Priority,
    'redirect_type': RedirectType,
    'ssh_algorithm': SSHAlgorithm,
    'ssh_type': SSHType,
})


def check_value(field_name: str, value: object, allowed: type[enum.IntEnum]) -> None:
    '''
    Check that `value` is one of the integer values of `allowed`.

    Parameters
    ----------
    field_name : str
        Used in the error message only.
    value : object
    allowed : type[enum.IntEnum]

    Raises
    ------
    ValidationError
    '''
    valid = [member.value for member in allowed]
    if isinstance(value, bool) or not isinstance(value, int) or value not in valid:
        raise ValidationError(
            f'Given {field_name} [{value!r}] is not valid: {valid}'
        )


def validate_record(record: Record) -> None:
    for field in dc.fields(record):
        if allowed := _CONSTRAINED_FIELDS.get(field.name):
            check_value(field.name, getattr(record, field.name), allowed)


def build_unvalidated(record_cls: type[Record], **values: Any) -> Record:
    '''
    Build a record from values the provider already holds, without the
    value set checks `__post_init__` applies to records built by callers.

    Parameters
    ----------
    record_cls : type[Record]
    **values : Any
        One value per dataclass field, fields left out take their default.

    Returns
    -------
    Record
    '''
    record = object.__new__(record_cls)
    for field in dc.fields(record_cls):
        setattr(record, field.name, values.get(field.name, field.default))
    return record


@dc.dataclass(slots=True, kw_only=True)
class Record:
    '''
    A single zone entry. `id` is assigned by the provider, a record that
    has not been created yet carries 0. The `type` discriminator is fixed
    per variant and cannot be reassigned.
    '''
    rtype: ClassVar[str]

    name: str
    id: int = 0

    def __post_init__(self) -> None:
        validate_record(self)

    @property
    def type(self) -> str:
        return self.rtype


@dc.dataclass(slots=True, kw_only=True)
class _ContentRecord(Record):
    content: str
    ttl: int


@dc.dataclass(slots=True, kw_only=True)
class ARecord(_ContentRecord):
    rtype = 'A'


@dc.dataclass(slots=True, kw_only=True)
class AAAARecord(_ContentRecord):
    rtype = 'AAAA'


@dc.dataclass(slots=True, kw_only=True)
class CNAMERecord(_ContentRecord):
    rtype = 'CNAME'


@dc.dataclass(slots=True, kw_only=True)
class MXRecord(_ContentRecord):
    rtype = 'MX'

    priority: int


@dc.dataclass(slots=True, kw_only=True)
class TXTRecord(_ContentRecord):
    rtype = 'TXT'


@dc.dataclass(slots=True, kw_only=True)
class SRVRecord(_ContentRecord):
    rtype = 'SRV'

    priority: int
    weight: int
    port: int


@dc.dataclass(slots=True, kw_only=True)
class CAARecord(_ContentRecord):
    rtype = 'CAA'


@dc.dataclass(slots=True, kw_only=True)
class PTRRecord(_ContentRecord):
    rtype = 'PTR'


@dc.dataclass(slots=True, kw_only=True)
class NSRecord(_ContentRecord):
    rtype = 'NS'


@dc.dataclass(slots=True, kw_only=True)
class TLSARecord(_ContentRecord):
    rtype = 'TLSA'


@dc.dataclass(slots=True, kw_only=True)
class RedirectRecord(Record):
    '''
    An HTTP redirect served by the provider. It has no TTL, the target
    travels in the `content` slot and the status code in `prio`.
    '''
    rtype = 'Redirect'

    url: str
    redirect_type: int


@dc.dataclass(slots=True, kw_only=True)
class DynamicRecord(Record):
    rtype = 'Dynamic'

    ttl: int


@dc.dataclass(slots=True, kw_only=True)
class SSHFPRecord(_ContentRecord):
    rtype = 'SSHFP'

    ssh_algorithm: int
    ssh_type: int


@dc.dataclass(slots=True)
class RecordSet:
    '''
    The records of one domain as served by a single page fetch, in page
    order. A snapshot is never refreshed in place, fetch a new one instead.
    '''
    records: list[Record] = dc.field(default_factory=list)
    domain: str | None = None

    def __iter__(self) -> Iterator[Record]:
        return iter(self.records)

    def __len__(self) -> int:
        return len(self.records)

    @overload
    def __getitem__(self, index: int) -> Record: ...

    @overload
    def __getitem__(self, index: slice) -> list[Record]: ...

    def __getitem__(self, index):
        return self.records[index]

    def ids(self) -> list[int]:
        return [record.id for record in self.records]

    def find(self, record_id: int) -> Record | None:
        '''
        Get the record with the given provider ID.

        Parameters
        ----------
        record_id : int

        Returns
        -------
        Record | None
        '''
        for record in self.records:
            if record.id == record_id:
                return record
        return None

    def __str__(self) -> str:
        from njalla.records._codec import dumps_records

        return dumps_records(self)
