"""
User Datagram Protocol (RFC 768).
"""
from .. import fields
from ..header import Header
from ..common import crc
from .ip import IP, IPProtocol


class UDP(Header):
    sport    = fields.StructField('H')
    dport    = fields.StructField('H')
    length   = fields.StructField('H', default=8)
    checksum = crc.ChecksumField('H', 'internet')

    class Meta:
        length_field = 'length'
        length_includes_body = True

    def calc_checksum(self):
        '''Computed over the pseudo header of the enclosing IP, without one is left untouched.'''
        ip = self.find_previous(IP)
        if ip is None:
            return

        self.checksum.value = 0
        data = ip.pseudo_header(IPProtocol.UDP, self.get('length')) + self.pack()

        # zero means "no checksum"
        self.checksum.value = self.checksum.calculate(data) or 0xffff


def install(registry):
    registry.add_class(UDP)

    registry.bind(IP, UDP, protocol=IPProtocol.UDP)
