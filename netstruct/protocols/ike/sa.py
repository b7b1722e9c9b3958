"""
Security Association payload (RFC 7296 3.3): a list of proposals, each one
with a list of transforms, each one with a list of attributes.

The proposals and the transforms are marked with the "last substructure" field,
set automatically appending them

    sa = SA()
    proposal = sa.proposals.append({'num': 1, 'protocol_id': 'IKE'})
    proposal.transforms.append({'type': 'ENCR', 'id': 12})
    proposal.transforms.append({'type': 'PRF', 'id': 5})
"""
from enum import IntEnum

from ... import fields
from ...core import Chunk
from ...properties import Dependency, OffsetDependency
from .payload import BasePayload


class ProtocolId(IntEnum):
    IKE = 1
    AH  = 2
    ESP = 3


class TransformType(IntEnum):
    ENCR = 1
    PRF  = 2
    INTG = 3
    DH   = 4
    ESN  = 5


class EncrId(IntEnum):
    DES        = 2
    TRIPLE_DES = 3
    AES_CBC    = 12
    AES_CTR    = 13
    AES_GCM16  = 20


class PrfId(IntEnum):
    HMAC_MD5      = 1
    HMAC_SHA1     = 2
    HMAC_SHA2_256 = 5
    HMAC_SHA2_384 = 6
    HMAC_SHA2_512 = 7


class IntegId(IntEnum):
    HMAC_MD5_96       = 1
    HMAC_SHA1_96      = 2
    HMAC_SHA2_256_128 = 12
    HMAC_SHA2_384_192 = 13
    HMAC_SHA2_512_256 = 14


class DhGroup(IntEnum):
    MODP1024 = 2
    MODP2048 = 14
    ECP256   = 19
    ECP384   = 20


TRANSFORM_IDS = {
    TransformType.ENCR: EncrId,
    TransformType.PRF: PrfId,
    TransformType.INTG: IntegId,
    TransformType.DH: DhGroup,
}


class AttributeType(IntEnum):
    KEY_LENGTH = 14


TV_FORMAT = 0x8000


def enum_name(enum, value, fallback):
    try:
        return enum(value).name
    except ValueError:
        return fallback


class Attribute(Chunk):
    '''With the high bit of the type set (TV format) the value is in the length field.'''
    type   = fields.StructField('H')
    length = fields.StructField('H')
    value  = fields.StructField('I', optional=lambda attr: not attr.is_tv())

    def is_tv(self) -> bool:
        return bool(self.get('type') & TV_FORMAT)

    def attribute_value(self) -> int:
        return self.get('length') if self.is_tv() else self.get('value')

    def to_human(self):
        kind = self.get('type') & ~TV_FORMAT
        name = enum_name(AttributeType, kind, 'type %d' % kind)
        return '%s=%d' % (name, self.attribute_value())


class Transform(Chunk):
    last       = fields.StructField('B')
    rsv1       = fields.StructField('B')
    length     = fields.StructField('H', default=8)
    type       = fields.StructField('B', enum=TransformType)
    rsv2       = fields.StructField('B')
    id         = fields.StructField('H')
    attributes = fields.ArrayField(Attribute, length=OffsetDependency(-8, '.length'))

    class Meta:
        length_field = 'length'

    def id_name(self):
        fallback = 'ID %d' % self.get('id')
        ids = TRANSFORM_IDS.get(self.get('type'))

        return fallback if ids is None else enum_name(ids, self.get('id'), fallback)

    def to_human(self):
        items = [self.id_name()] + [_.to_human() for _ in self.attributes]
        return '%s(%s)' % (self.type.to_human(), ','.join(items))


class SAProposal(Chunk):
    last        = fields.StructField('B')
    reserved    = fields.StructField('B')
    length      = fields.StructField('H', default=8)
    num         = fields.StructField('B')
    protocol_id = fields.StructField('B', enum=ProtocolId)
    spi_size    = fields.StructField('B')
    num_trans   = fields.StructField('B')
    spi         = fields.StringField(Dependency('.spi_size'))
    transforms  = fields.SubstructureArrayField(Transform, more=3, n=Dependency('.num_trans'))

    class Meta:
        length_field = 'length'

    def calc_length(self):
        self.set('spi_size', len(self.spi))
        super().calc_length()

    def to_human(self):
        return '#%d %s:%s' % (
            self.get('num'), self.protocol_id.to_human(), ','.join([_.to_human() for _ in self.transforms]))


class SA(BasePayload):
    protocol_name = 'IKE::SA'

    proposals = fields.SubstructureArrayField(SAProposal, more=2, length=OffsetDependency(-4, '.length'))
