"""
SCTP chunks (RFC 4960 3.3).

Every chunk starts with type, flags and length; the class decoding it is chosen
from its type, unknown types are decoded as UnknownChunk.
"""
from enum import IntEnum

from ... import fields
from ...core import Chunk
from ...dispatch import TypeRegistry
from ...properties import Dependency, OffsetDependency
from ...tlv import Padded32
from .parameters import PARAMETERS, ERROR_CAUSES, Parameter, ErrorCause, HeartbeatInfoParameter


class ChunkType(IntEnum):
    DATA              = 0
    INIT              = 1
    INIT_ACK          = 2
    SACK              = 3
    HEARTBEAT         = 4
    HEARTBEAT_ACK     = 5
    ABORT             = 6
    SHUTDOWN          = 7
    SHUTDOWN_ACK      = 8
    ERROR             = 9
    COOKIE_ECHO       = 10
    COOKIE_ACK        = 11
    SHUTDOWN_COMPLETE = 14


class BaseChunk(Padded32, Chunk):
    type   = fields.StructField('B', enum=ChunkType)
    flags  = fields.StructField('B')
    length = fields.StructField('H', default=4)

    class Meta:
        length_field = 'length'

    def human_type(self):
        return self.type.to_human()

    def to_human(self):
        return '<chunk:%s>' % self.human_type()


class UnknownChunk(BaseChunk):
    content = fields.StringField(OffsetDependency(-4, '.length'))


CHUNKS = TypeRegistry(key='type', default=UnknownChunk)


@CHUNKS.register(ChunkType.DATA)
class DataChunk(BaseChunk):
    flags     = fields.BitField('B', [('_', 4), ('flag_i', 1), ('flag_u', 1), ('flag_b', 1), ('flag_e', 1)])
    tsn       = fields.StructField('I')
    stream_id = fields.StructField('H')
    stream_sn = fields.StructField('H')
    ppid      = fields.StructField('I')
    user_data = fields.StringField(OffsetDependency(-16, '.length'))

    class Meta:
        defaults = {'type': ChunkType.DATA}


@CHUNKS.register(ChunkType.INIT)
class InitChunk(BaseChunk):
    initiate_tag = fields.StructField('I')
    a_rwnd       = fields.StructField('I')
    nos          = fields.StructField('H')
    nis          = fields.StructField('H')
    initial_tsn  = fields.StructField('I')
    parameters   = fields.ArrayField(Parameter, length=OffsetDependency(-20, '.length'), dispatch=PARAMETERS)

    class Meta:
        defaults = {'type': ChunkType.INIT}

    def to_human(self):
        params = ','.join([_.to_human() for _ in self.parameters])
        return '<chunk:%s,param:%s>' % (self.human_type(), params) if params else super().to_human()


@CHUNKS.register(ChunkType.INIT_ACK)
class InitAckChunk(InitChunk):

    class Meta:
        defaults = {'type': ChunkType.INIT_ACK}


@CHUNKS.register(ChunkType.SACK)
class SackChunk(BaseChunk):
    ctsn_ack    = fields.StructField('I')
    a_rwnd      = fields.StructField('I')
    num_gap     = fields.StructField('H')
    num_dup_tsn = fields.StructField('H')
    gaps        = fields.ArrayField(fields.StructField('I'), n=Dependency('.num_gap'))
    dup_tsns    = fields.ArrayField(fields.StructField('I'), n=Dependency('.num_dup_tsn'))

    class Meta:
        defaults = {'type': ChunkType.SACK}


@CHUNKS.register(ChunkType.HEARTBEAT)
class HeartbeatChunk(BaseChunk):
    info = HeartbeatInfoParameter()

    class Meta:
        defaults = {'type': ChunkType.HEARTBEAT}


@CHUNKS.register(ChunkType.HEARTBEAT_ACK)
class HeartbeatAckChunk(HeartbeatChunk):

    class Meta:
        defaults = {'type': ChunkType.HEARTBEAT_ACK}


@CHUNKS.register(ChunkType.ERROR)
class ErrorChunk(BaseChunk):
    error_causes = fields.ArrayField(ErrorCause, length=OffsetDependency(-4, '.length'), dispatch=ERROR_CAUSES)

    class Meta:
        defaults = {'type': ChunkType.ERROR}

    def to_human(self):
        causes = ','.join([_.to_human() for _ in self.error_causes])
        return '<chunk:%s,causes:%s>' % (self.human_type(), causes) if causes else super().to_human()


@CHUNKS.register(ChunkType.ABORT)
class AbortChunk(ErrorChunk):
    flags = fields.BitField('B', [('_', 7), ('flag_t', 1)])

    class Meta:
        defaults = {'type': ChunkType.ABORT}


@CHUNKS.register(ChunkType.SHUTDOWN)
class ShutdownChunk(BaseChunk):
    ctsn_ack = fields.StructField('I')

    class Meta:
        defaults = {'type': ChunkType.SHUTDOWN, 'length': 8}


@CHUNKS.register(ChunkType.SHUTDOWN_ACK)
class ShutdownAckChunk(BaseChunk):

    class Meta:
        defaults = {'type': ChunkType.SHUTDOWN_ACK}


@CHUNKS.register(ChunkType.COOKIE_ECHO)
class CookieEchoChunk(BaseChunk):
    cookie = fields.StringField(OffsetDependency(-4, '.length'))

    class Meta:
        defaults = {'type': ChunkType.COOKIE_ECHO}


@CHUNKS.register(ChunkType.COOKIE_ACK)
class CookieAckChunk(BaseChunk):

    class Meta:
        defaults = {'type': ChunkType.COOKIE_ACK}


@CHUNKS.register(ChunkType.SHUTDOWN_COMPLETE)
class ShutdownCompleteChunk(BaseChunk):
    flags = fields.BitField('B', [('_', 7), ('flag_t', 1)])

    class Meta:
        defaults = {'type': ChunkType.SHUTDOWN_COMPLETE}
