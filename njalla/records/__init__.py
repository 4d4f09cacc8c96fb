'''
**njalla.records**
-------------

The typed record model for the provider's DNS records and the codec between
it and the provider's JSON/form formats.
See: `njalla.records._models` and `njalla.records._codec` for more details.
'''
from njalla.records._models import (
    TTL,
    Priority,
    RedirectType,
    SSHAlgorithm,
    SSHType,
    Record,
    RecordSet,
    ARecord,
    AAAARecord,
    CNAMERecord,
    MXRecord,
    TXTRecord,
    SRVRecord,
    CAARecord,
    PTRRecord,
    NSRecord,
    TLSARecord,
    RedirectRecord,
    DynamicRecord,
    SSHFPRecord,
    build_unvalidated,
    validate_record,
)
from njalla.records._codec import (
    RECORD_TYPES,
    FormFields,
    decode_record,
    decode_records,
    encode_record,
    get_id,
    dumps_records,
)

__all__ = [
    'TTL',
    'Priority',
    'RedirectType',
    'SSHAlgorithm',
    'SSHType',
    'Record',
    'RecordSet',
    'ARecord',
    'AAAARecord',
    'CNAMERecord',
    'MXRecord',
    'TXTRecord',
    'SRVRecord',
    'CAARecord',
    'PTRRecord',
    'NSRecord',
    'TLSARecord',
    'RedirectRecord',
    'DynamicRecord',
    'SSHFPRecord',
    'validate_record',
    'build_unvalidated',
    'RECORD_TYPES',
    'FormFields',
    'decode_record',
    'decode_records',
    'encode_record',
    'get_id',
    'dumps_records',
]
