from enum import IntEnum

from ... import fields
from ...header import Header
from ...properties import OffsetDependency


class PayloadType(IntEnum):
    NONE      = 0
    SA        = 33
    KE        = 34
    IDi       = 35
    IDr       = 36
    CERT      = 37
    CERTREQ   = 38
    AUTH      = 39
    NONCE     = 40
    NOTIFY    = 41
    DELETE    = 42
    VENDOR_ID = 43
    TSi       = 44
    TSr       = 45
    SK        = 46
    CP        = 47
    EAP       = 48


def is_generic_payload(value):
    '''Payloads without a dedicated class.'''
    return value not in (PayloadType.NONE, PayloadType.SA)


class BasePayload(Header):
    '''Generic payload header (RFC 7296 3.2), its length covers only this payload.'''
    next   = fields.StructField('B', enum=PayloadType)
    flags  = fields.BitField('B', [('critical', 1), ('_', 7)])
    length = fields.StructField('H', default=4)

    class Meta:
        length_field = 'length'


class Payload(BasePayload):
    protocol_name = 'IKE::Payload'

    content = fields.StringField(OffsetDependency(-4, '.length'))
