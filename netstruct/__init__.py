"""
# Netstruct: network protocol headers for humans.

A header is described declaring its fields, in the same order they have on the wire

    class UDP(Header):
        sport    = fields.StructField('H')
        dport    = fields.StructField('H')
        length   = fields.StructField('H', default=8)
        checksum = fields.StructField('H')

and two basic operations are defined for the headers and their sub components:

 1. unpack(): reading the binary data and build a high-level representation of that.
    Each field knows how many bytes needs to read, possibly looking at the value of
    some other field already read (a Dependency).

 2. pack(): encode the high-level representation into binary data. The values are
    taken as they are: recomputing lengths and checksums is an explicit operation.

Headers are stacked in a Packet; which header can follow which one is described by
the bindings of a Registry

    registry.bind(IP, UDP, protocol=17)

that are used both to build packets (writing the fields in the conditions) and to
decode them (choosing the class of the next header).
"""
from .meta import Endianess, Compliant
from .properties import Dependency, RatioDependency, OffsetDependency
from .exceptions import (
    NetstructException,
    StructuralError,
    BindingError,
    ParseError,
    UnknownProtocolError,
    EnumError,
)
from .core import Chunk
from .dispatch import TypeRegistry
from .tlv import AbstractTLV, Padded32
from .header import Header
from .registry import Registry, Binding
from .packet import Packet, UnknownPacket
from . import protocols
