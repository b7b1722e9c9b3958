"""
Internet Protocol version 4 (RFC 791).
"""
import ipaddress
import struct
from enum import IntEnum

from .. import fields
from ..header import Header
from ..properties import Dependency
from ..common import crc
from .eth import Eth, Dot1q, EtherType


class IPProtocol(IntEnum):
    ICMP = 1
    IPIP = 4
    TCP  = 6
    UDP  = 17
    SCTP = 132


class IPv4AddrField(fields.StructField):
    '''32 bits address, assignable from the dotted notation.'''

    def __init__(self, default='127.0.0.1', **kwargs):
        super().__init__('I', default=default, **kwargs)

    def to_int(self, value) -> int:
        if isinstance(value, (str, ipaddress.IPv4Address)):
            return int(ipaddress.IPv4Address(value))

        return super().to_int(value)

    def to_human(self):
        return str(ipaddress.IPv4Address(self.value))


class OptionsLength(Dependency):
    '''The options take what the header length says beyond the 20 fixed bytes.'''

    def resolve(self, instance):
        return max(super().resolve(instance) * 4 - 20, 0)


class IP(Header):
    vihl     = fields.BitField('B', [('version', 4), ('ihl', 4)], default=0x45)
    tos      = fields.StructField('B')
    length   = fields.StructField('H', default=20)
    id       = fields.StructField('H')
    frag     = fields.BitField('H', [('flag_rsv', 1), ('flag_df', 1), ('flag_mf', 1), ('fragment_offset', 13)])
    ttl      = fields.StructField('B', default=64)
    protocol = fields.StructField('B', enum=IPProtocol)
    checksum = crc.ChecksumField('H', 'internet')
    src      = IPv4AddrField()
    dst      = IPv4AddrField()
    options  = fields.StringField(OptionsLength('.ihl'))

    class Meta:
        length_field = 'length'
        length_includes_body = True

    def parse_ok(self) -> bool:
        return self.get('version') == 4 and self.get('ihl') >= 5

    def calc_length(self):
        self.set('ihl', 5 + (len(self.options) + 3) // 4)
        super().calc_length()

    def calc_checksum(self):
        self.checksum.value = 0
        self.checksum.update(self.pack_fields())

    def pseudo_header(self, protocol, length) -> bytes:
        '''The fields covered by the checksums of the transport protocols.'''
        return self.src.pack() + self.dst.pack() + struct.pack('>BBH', 0, protocol, length)


def install(registry):
    registry.add_class(IP)

    registry.bind(Eth, IP, ethertype=EtherType.IPv4)
    registry.bind(Dot1q, IP, ethertype=EtherType.IPv4)
    registry.bind(IP, IP, protocol=IPProtocol.IPIP)
