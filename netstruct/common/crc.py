'''
Fields holding a checksum of some other data of the packet.
'''
from zlib import crc32

import google_crc32c

from .. import fields


def internet_checksum(data: bytes) -> int:
    '''One's complement of the one's complement sum of the 16 bits words
    of data, see RFC 1071.'''
    if len(data) % 2:
        data += b'\x00'

    total = sum([(data[idx] << 8) | data[idx + 1] for idx in range(0, len(data), 2)])
    while total >> 16:
        total = (total & 0xffff) + (total >> 16)

    return ~total & 0xffff


def crc32c(data: bytes) -> int:
    '''CRC32 with the Castagnoli polynomial, used by SCTP (RFC 3309).'''
    return google_crc32c.value(bytes(data))


ALGORITHMS = {
    'internet': internet_checksum,
    'crc32': crc32,
    'crc32c': crc32c,
}


class ChecksumField(fields.StructField):
    """Integer field whose value is a checksum.

    The data covered is not known to the field, the header owning it computes
    it in its calc_checksum()

        class SCTP(Header):
            checksum = crc.ChecksumField('I', 'crc32c', endianess=Endianess.LITTLE_ENDIAN)

            def calc_checksum(self):
                self.checksum.value = 0
                self.checksum.update(self.pack())
    """

    def __init__(self, format, algorithm, **kwargs):
        super().__init__(format, **kwargs)
        if algorithm not in ALGORITHMS:
            raise ValueError(f'unknown checksum algorithm {algorithm!r}')

        self.algorithm = algorithm

    def calculate(self, data: bytes) -> int:
        return ALGORITHMS[self.algorithm](data)

    def update(self, data: bytes) -> int:
        self.value = self.calculate(data)

        return self.value

    def check(self, data: bytes) -> bool:
        return self.calculate(data) == self.value
