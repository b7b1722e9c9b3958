"""
Stream Control Transmission Protocol (RFC 4960).

    pkt = Packet.gen('IP').add('SCTP', sport=5000, dport=5001)
    pkt.header('SCTP').chunks.append(InitChunk(initiate_tag=0x11223344))
    pkt.calc()
"""
from ... import fields
from ...meta import Endianess
from ...header import Header
from ...common import crc
from ..ip import IP, IPProtocol
from ..udp import UDP
from .chunks import BaseChunk, CHUNKS


UDP_PORT = 9899


class SCTP(Header):
    sport            = fields.StructField('H')
    dport            = fields.StructField('H')
    verification_tag = fields.StructField('I')
    checksum         = crc.ChecksumField('I', 'crc32c', endianess=Endianess.LITTLE_ENDIAN)
    chunks           = fields.ArrayField(BaseChunk, dispatch=CHUNKS)

    def calc_checksum(self):
        self.checksum.value = 0
        self.checksum.update(self.pack())


def install(registry):
    registry.add_class(SCTP)

    registry.bind(IP, SCTP, protocol=IPProtocol.SCTP)
    registry.bind(UDP, SCTP, dport=UDP_PORT)
