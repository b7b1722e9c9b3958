"""
Internet Key Exchange version 2 (RFC 7296).

    pkt = Packet.gen('IP').add('UDP').add('IKE', exchange_type='IKE_SA_INIT').add('IKE::SA')

the header following the IKE one is given by the "next" field; the SA payload
has its own class, the other payloads are decoded as generic ones.
"""
from enum import IntEnum

from ... import fields
from ...header import Header
from ..udp import UDP
from .payload import PayloadType, BasePayload, Payload, is_generic_payload
from .sa import SA, SAProposal, Transform, Attribute, ProtocolId, TransformType


UDP_PORT = 500


class ExchangeType(IntEnum):
    IKE_SA_INIT     = 34
    IKE_AUTH        = 35
    CREATE_CHILD_SA = 36
    INFORMATIONAL   = 37


class IKE(Header):
    init_spi      = fields.StructField('Q')
    resp_spi      = fields.StructField('Q')
    next          = fields.StructField('B', enum=PayloadType)
    version       = fields.BitField('B', [('mjver', 4), ('mnver', 4)], default=0x20)
    exchange_type = fields.StructField('B', enum=ExchangeType)
    flags         = fields.BitField('B', [('_', 2), ('flag_r', 1), ('flag_v', 1), ('flag_i', 1), ('_', 3)])
    message_id    = fields.StructField('I')
    length        = fields.StructField('I', default=28)

    class Meta:
        length_field = 'length'
        length_includes_body = True

    def parse_ok(self) -> bool:
        return self.get('mjver') == 2


def install(registry):
    registry.add_class(IKE)
    registry.add_class(SA)
    registry.add_class(Payload)

    registry.bind(UDP, IKE, dport=UDP_PORT, sport=UDP_PORT)

    for source in (IKE, SA, Payload):
        registry.bind(source, SA, next=PayloadType.SA)
        registry.bind(source, Payload, next=is_generic_payload)
