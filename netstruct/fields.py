"""
A Field is "fundamental" datatype from the format point of view, something directly
packable/unpackable: integers of a given width and endianess, groups of bits packed
into an integer, strings and arrays of other fields.
"""
import logging
import struct
from enum import Enum
from typing import Dict, List, Tuple

import bitstring

from .meta import FieldBase, Endianess, Compliant
from .properties import Dependency
from .streams import Stream
from .exceptions import StructuralError, EnumError


ENDIANESS_PREFIX = {
    Endianess.LITTLE_ENDIAN: '<',
    Endianess.BIG_ENDIAN: '>',
    Endianess.NETWORK: '>',
    Endianess.NATIVE: '=',
}


def as_stream(data):
    return data if isinstance(data, Stream) else Stream(data)


class Field(FieldBase):
    """Base class to subclass from"""

    def __init__(self, name=None, father=None, default=None, endianess=Endianess.NETWORK,
                 compliant=Compliant.INHERIT, is_magic=False, optional=None):
        super().__init__()
        self.logger = logging.getLogger(__name__)
        self.name = name
        self.father = father
        self.default = default
        self.endianess = endianess
        self.compliant = compliant
        self.is_magic = is_magic
        self.optional = optional
        self._value = None

        self.init()

    def init(self):
        self.value = self.value_from_default()

    def is_derived(self):
        '''A callable default is computed from the sibling fields once they all exist.'''
        return callable(self.default) and not isinstance(self.default, (type, Enum))

    def value_from_default(self):
        return self.default

    def __str__(self):
        return str(self.value)

    def __repr__(self):
        return '<%s(%r)>' % (self.__class__.__name__, self.value)

    def is_compliant(self, level):
        '''Returns the compliant'''
        instance = self
        while instance is not None:
            if instance.compliant & level:
                return True
            if not instance.compliant & Compliant.INHERIT:
                break

            instance = instance.father

        return False

    def _chain(self):
        return [self.name] if self.name else []

    def is_present(self):
        if self.optional is None or self.father is None:
            return True

        return bool(self.optional(self.father))

    def _get_value(self):
        return self._value

    def _set_value(self, value) -> None:
        self._value = value

    value = property(
        fget=lambda self: self._get_value(),
        fset=lambda self, value: self._set_value(value))

    def _get_size(self):
        raise NotImplementedError(f"method {self.__class__.__name__}._get_size() not implemented")

    size = property(
        fget=lambda self: self._get_size(),
    )

    raw = property(
        fget=lambda self: self.pack(),
    )

    def assign(self, value):
        self.value = value

    def to_human(self):
        return self.value

    def from_human(self, value):
        self.value = value

    def read(self, source):
        '''Decode the field from bytes and return the decoded value.'''
        self.unpack(as_stream(source))

        return self.value

    def pack(self) -> bytes:
        raise NotImplementedError('you need to implement this in the subclass')

    def unpack(self, stream):
        raise NotImplementedError('you need to implement this in the subclass')


class StructField(Field):
    """
    Simplest of the fields: mimic the behaviour of the struct module packing/unpacking
    integers to/from bytes.

    The main advantage is the possibility to indicate via the "enum" argument some subclass
    of enum.Enum so to have directly a symbolic representation of the integer value of the
    field itself. The value stays an integer, so that values unknown to the enum survive.
    """

    def __init__(self, format, default=0, enum=None, **kw):
        self.format = format
        self.enum = enum
        super().__init__(default=default, **kw)

    def __repr__(self):
        if self.enum and self.to_human() != self.value:
            return f'<{self.__class__.__name__}({self.to_human()})>'

        return '<%s(%s)>' % (self.__class__.__name__, hex(self.value))

    def __str__(self):
        width = self.size * 2  # we want to be as large as possible
        formatter = '0x%%0%dx' % width
        return formatter % self.value

    def __int__(self):
        return self.value

    def value_from_default(self):
        if self.is_derived():
            return 0

        return self.default

    def get_format(self):
        return '%s%s' % (ENDIANESS_PREFIX[self.endianess], self.format)

    def _get_size(self):
        return struct.calcsize(self.get_format())

    def to_int(self, value) -> int:
        '''Resolve a symbolic value (enum member or name) to its integer.'''
        if isinstance(value, Enum):
            return value.value
        if isinstance(value, str):
            if not self.enum:
                raise EnumError(f'field has no enumeration to resolve {value!r}', chain=self._chain())
            try:
                return self.enum[value].value
            except KeyError:
                raise EnumError(f'{value!r} not in enumeration {self.enum.__name__}', chain=self._chain())

        return int(value)

    def _set_value(self, value) -> None:
        value = self.to_int(value)
        try:
            self._encode(value)
        except struct.error as e:
            raise StructuralError(f'{value} does not fit in the field: {e}', chain=self._chain())
        self._value = value

    def _encode(self, value: int) -> bytes:
        return struct.pack(self.get_format(), value)

    def _decode(self, raw: bytes) -> int:
        return struct.unpack(self.get_format(), raw)[0]

    def pack(self) -> bytes:
        return self._encode(self.value)

    def read(self, source):
        '''An integer is adopted directly, bytes are decoded.'''
        if isinstance(source, int):
            self.value = source
            return self.value

        return super().read(source)

    def _in_enum(self, value: int) -> bool:
        try:
            self.enum(value)
        except ValueError:
            return False

        return True

    def _check_enum(self, value: int) -> None:
        if not self.enum or self._in_enum(value):
            return

        if self.is_compliant(Compliant.ENUM):
            raise StructuralError(f'value 0x{value:x} not in enumeration {self.enum.__name__}')

        self.logger.warning(f'enum {self.enum!r} doesn\'t have element with value 0x{value:x} in it')

    def _check_magic(self, value: int) -> None:
        if self.is_magic and value != self.to_int(self.default):
            self.logger.warning('the magic doesn\'t correspond')
            if self.is_compliant(Compliant.MAGIC):
                raise StructuralError('magic mismatch')

    def unpack(self, stream):
        raw = stream.read(self.size)
        value = self._decode(raw)

        self._check_enum(value)
        self._check_magic(value)

        self._value = value

    def to_human(self):
        if self.enum and self._in_enum(self.value):
            return self.enum(self.value).name

        return self.value


class Int24Field(StructField):
    """24 bits integer: it's realized as a 8 bits plus 16 bits integers."""

    def __init__(self, default=0, **kw):
        super().__init__('I', default=default, **kw)

    def _get_size(self):
        return 3

    def _split_format(self):
        return '>BH' if ENDIANESS_PREFIX[self.endianess] == '>' else '<HB'

    def _encode(self, value: int) -> bytes:
        if not 0 <= value <= 0xffffff:
            raise struct.error('24 bits integer out of range')

        up8, down16 = value >> 16, value & 0xffff
        if self._split_format() == '>BH':
            return struct.pack('>BH', up8, down16)

        return struct.pack('<HB', down16, up8)

    def _decode(self, raw: bytes) -> int:
        if self._split_format() == '>BH':
            up8, down16 = struct.unpack('>BH', raw)
        else:
            down16, up8 = struct.unpack('<HB', raw)

        return (up8 << 16) | down16


class BitField(StructField):
    """Integer split in named groups of bits, most significant first.

        class IP(Header):
            vihl = fields.BitField('B', [('version', 4), ('ihl', 4)], default=0x45)

    the sub-fields are accessed by name, like ip.vihl['ihl']. The name '_' marks
    reserved bits.
    """

    def __init__(self, format, bits, **kw):
        self.bits: List[Tuple[str, int]] = list(bits)
        super().__init__(format, **kw)

        if sum([_[1] for _ in self.bits]) != self.size * 8:
            raise ValueError(f'bits of {self.bit_names} must sum to {self.size * 8}')

    @property
    def bit_names(self) -> List[str]:
        return [_ for _, __ in self.bits if _ != '_']

    def _bit_format(self) -> str:
        return ', '.join(['uint:%d' % width for _, width in self.bits])

    def _index(self, name) -> int:
        if name == '_' or name not in self.bit_names:
            raise KeyError(f'unknown bit field {name!r}')

        return [_ for _, __ in self.bits].index(name)

    def _parts(self) -> List[int]:
        return bitstring.BitArray(uint=self.value, length=self.size * 8).unpack(self._bit_format())

    def __getitem__(self, name) -> int:
        return self._parts()[self._index(name)]

    def __setitem__(self, name, value) -> None:
        idx = self._index(name)
        width = self.bits[idx][1]
        value = int(value)
        if not 0 <= value < (1 << width):
            raise StructuralError(f'bit-field overflow: {value} does not fit in {width} bits', chain=[name])

        parts = self._parts()
        parts[idx] = value
        self.value = bitstring.pack(self._bit_format(), *parts).uint

    def to_dict(self) -> Dict[str, int]:
        return {name: self[name] for name in self.bit_names}


class StringField(Field):
    """Represent a contiguous chunk of bytes.

    The length can be fixed (an integer), come from another field (a Dependency)
    or be unbounded, in which case it takes everything left in the stream.
    """

    def __init__(self, n=None, default=None, **kw):
        if isinstance(n, int) and default is not None and len(default) != n:
            raise ValueError(f'default {default!r} must be {n} bytes long')

        self.n = n

        super().__init__(default=default, **kw)

    def __repr__(self):
        return '<%s(%s)>' % (self.__class__.__name__, repr(self.value))

    def __len__(self):
        return len(self.value)

    def value_from_default(self):
        if self.default is not None and not self.is_derived():
            return self.default
        if isinstance(self.n, int):
            return b'\x00' * self.n

        return b''

    def _get_size(self):
        return len(self.value)

    def _set_value(self, value) -> None:
        if isinstance(value, str):
            value = value.encode()
        value = bytes(value)
        if isinstance(self.n, int) and len(value) != self.n:
            raise ValueError(f'you are trying to set a value with the wrong size (that is {self.n} bytes)')

        self._value = value

    def expected_length(self, stream) -> int:
        if isinstance(self.n, Dependency):
            return self.n.resolve(self)
        if isinstance(self.n, int):
            return self.n

        return stream.remaining()

    def unpack(self, stream):
        length = self.expected_length(stream)
        if length < 0 or length > stream.remaining():
            raise StructuralError(f'declared length {length} exceeds the {stream.remaining()} bytes remaining')

        self._value = stream.read(length)

    def pack(self) -> bytes:
        return self.value


class CStringField(Field):
    """Null-terminated string. With a static length the string is zero-padded to it."""

    def __init__(self, static_length=None, default=b'', **kw):
        self.static_length = static_length
        super().__init__(default=default, **kw)

    def _set_value(self, value) -> None:
        if isinstance(value, str):
            value = value.encode()
        self._value = bytes(value).split(b'\x00')[0]

    def _get_size(self):
        return len(self.pack())

    def pack(self) -> bytes:
        if self.static_length is None:
            return self.value + b'\x00'

        value = self.value[:self.static_length - 1]
        return value + b'\x00' * (self.static_length - len(value))

    def unpack(self, stream):
        if self.static_length is not None:
            self.value = stream.read(self.static_length)
            return

        chars = []
        while True:
            char = stream.read(1) if stream.remaining() else None
            if char is None:
                raise StructuralError('unterminated string')
            if char == b'\x00':
                break
            chars.append(char)

        self._value = b''.join(chars)

    def to_human(self):
        return self.value.decode('latin1')


class IntStringField(Field):
    """String prefixed by its own length."""

    def __init__(self, length_format='B', default=b'', **kw):
        self.counter = StructField(length_format, endianess=kw.get('endianess', Endianess.NETWORK))
        super().__init__(default=default, **kw)
        self.calc_length()

    def __repr__(self):
        return '<%s(%d, %r)>' % (self.__class__.__name__, self.counter.value, self.value)

    def _set_value(self, value) -> None:
        if isinstance(value, str):
            value = value.encode()
        self._value = bytes(value)

    def _get_size(self):
        return self.counter.size + len(self.value)

    def calc_length(self):
        self.counter.value = len(self.value)

    def pack(self) -> bytes:
        return self.counter.pack() + self.value

    def unpack(self, stream):
        self.counter.unpack(stream)
        if self.counter.value > stream.remaining():
            raise StructuralError(f'string of {self.counter.value} bytes but only {stream.remaining()} remaining')

        self._value = stream.read(self.counter.value)


class ArrayField(Field):
    '''Un/Pack an array of Chunks or Fields.

    The number of elements is driven by one of

     - "n": an explicit number of elements or a Dependency to a counter field;
     - "length": a number of bytes (or a Dependency) the elements must fill;
     - otherwise it takes everything left in the stream, or up to the element for which the
       callable "canary" returns True.

    When the elements are polymorphic, pass as "dispatch" a TypeRegistry: the discriminator
    of each element is peeked before decoding it with the registered class.

    This class must behave like a list in python, obviously cannot implement all the methods
    since, for example, slicing what should mean?
    '''

    def __init__(self, field_cls, n=None, length=None, canary=None, dispatch=None, **kw):
        self.field_cls = field_cls() if isinstance(field_cls, type) else field_cls
        if n is not None and not isinstance(n, (Dependency, int)):
            raise ValueError('n is \'%s\' must be of the right type' % n.__class__.__name__)

        self._n = n
        self._length = length
        self._canary = canary
        self.dispatch = dispatch

        super().__init__(**kw)

    def __repr__(self):
        return f'<{self.__class__.__name__}({self.value!r})>'

    def __getitem__(self, item):
        return self.value[item]

    def __len__(self):
        return len(self.value)

    def __iter__(self):
        return iter(self.value)

    def value_from_default(self):
        if isinstance(self._n, int):
            return [self.instance_element() for _ in range(self._n)]

        return []

    def init(self):
        self._value = []
        for element in self.value_from_default():
            self._value.append(element)

    def _set_value(self, value):
        self.clear()
        for element in value:
            self.append(element)

    def _get_size(self):
        return sum([element.size for element in self.value])

    def pack(self) -> bytes:
        return b''.join([element.pack() for element in self.value])

    def to_human(self):
        return [element.to_human() for element in self.value]

    def instance_element(self):
        return self.field_cls.clone(father=self)  # pass the father so that we don't lose the hierarchy

    def _sync_counter(self):
        if isinstance(self._n, Dependency):
            self._n.resolve_and_set(self, len(self.value))

    def link(self, previous, element):
        '''Hook called when element is appended after previous.'''
        pass

    def _build_element(self, obj):
        if isinstance(obj, FieldBase):
            return obj

        if self.dispatch is not None and isinstance(obj, dict) and self.dispatch.key in obj:
            probe = self.instance_element()
            probe.set(self.dispatch.key, obj[self.dispatch.key])
            klass = self.dispatch.resolve(probe.get(self.dispatch.key)) or self.field_cls.__class__
            element = klass()
        else:
            element = self.instance_element()

        element.assign(obj)

        return element

    def append(self, obj):
        element = self._build_element(obj)
        element.father = self
        previous = self.value[-1] if self.value else None
        if previous is not None:
            self.link(previous, element)
        self.value.append(element)
        self._sync_counter()

        return element

    def pop(self, index=-1):
        element = self.value.pop(index)
        self._sync_counter()
        return element

    def remove(self, element):
        for idx, _ in enumerate(self.value):
            if _ is element:
                return self.pop(idx)

        raise ValueError('element not in array')

    def clear(self):
        self.value.clear()
        self._sync_counter()

    def calc_length(self):
        for element in self.value:
            if hasattr(element, 'calc_length'):
                element.calc_length()

    def _resolve(self, attribute):
        if isinstance(attribute, Dependency):
            return attribute.resolve(self)

        return attribute

    def unpack_element(self, stream):
        if self.dispatch is None:
            element = self.instance_element()
        else:
            discriminator = self.instance_element().peek(stream, self.dispatch.key)
            klass = self.dispatch.resolve(discriminator) or self.field_cls.__class__
            self.logger.debug('element with %s=%s resolved as %s', self.dispatch.key, discriminator, klass.__name__)
            element = klass()
            element.father = self

        element.unpack(stream)

        return element

    def unpack(self, stream):
        self._value = []

        count = self._resolve(self._n)
        budget = self._resolve(self._length)

        if budget is not None:
            stream = stream.substream(budget)

        while True:
            if count is not None and len(self._value) == count:
                break
            if count is None and stream.remaining() == 0:
                break

            element = self.unpack_element(stream)
            self._value.append(element)

            if self._canary and self._canary(element):
                break


class SubstructureArrayField(ArrayField):
    '''Array whose elements carry a "last substructure" marker: zero on the
    last element, "more" on all the others.'''

    def __init__(self, field_cls, marker='last', more=1, **kw):
        self.marker = marker
        self.more = more
        super().__init__(field_cls, **kw)

    def link(self, previous, element):
        previous.set(self.marker, self.more)
        element.set(self.marker, 0)
