"""
Ethernet II and IEEE 802.1Q headers.
"""
from enum import IntEnum

from .. import fields
from ..header import Header


class EtherType(IntEnum):
    IPv4  = 0x0800
    ARP   = 0x0806
    DOT1Q = 0x8100
    IPv6  = 0x86dd


class MacAddrField(fields.StringField):
    '''Six bytes, assignable from the usual "00:11:22:33:44:55" notation.'''

    def __init__(self, default='00:00:00:00:00:00', **kwargs):
        super().__init__(6, default=self._parse(default), **kwargs)

    @staticmethod
    def _parse(value):
        if isinstance(value, str):
            return bytes.fromhex(value.replace(':', ''))

        return value

    def _set_value(self, value) -> None:
        super()._set_value(self._parse(value))

    def to_human(self):
        return ':'.join(['%02x' % _ for _ in self.value])


class Eth(Header):
    dst       = MacAddrField()
    src       = MacAddrField()
    ethertype = fields.StructField('H', enum=EtherType)


class Dot1q(Header):
    tci       = fields.BitField('H', [('pcp', 3), ('dei', 1), ('vid', 12)])
    ethertype = fields.StructField('H', enum=EtherType)


def install(registry):
    registry.add_class(Eth)
    registry.add_class(Dot1q)

    registry.bind(Eth, Dot1q, ethertype=EtherType.DOT1Q)
