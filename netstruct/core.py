"""
Core module for the abstraction of a binary record
"""
from typing import Tuple, List, Dict

from .fields import Field, as_stream
from .meta import MetaChunk, Compliant
from .exceptions import StructuralError
from .properties import get_root_from_chunk


class Chunk(Field, metaclass=MetaChunk):
    """
    Together with Field is the main class that defines a format: an ordered
    collection of named fields followed by a body, that is whatever was left
    after the fields when reading (or, for headers, the next header).

        class TLV(Chunk):
            type   = fields.StructField('B')
            length = fields.StructField('B')
            data   = fields.StringField(Dependency('.length'))

            class Meta:
                length_field = 'length'
                length_covers = ('data',)

    A Chunk can contain sub-chunks: a Chunk instance used as a field is a prototype
    copied for each instance of the containing class.
    """

    def __init__(self, data=None, /, compliant=Compliant.INHERIT, optional=None, **values):
        self._fields = {}
        self._body = b''
        super().__init__(compliant=compliant, optional=optional)

        # now we have setup all the fields necessary and we can unpack if
        # some data is passed with the constructor
        if data is not None:
            self.logger.debug('unpacking \'%s\'' % self.__class__.__name__)
            self.read(data)
        else:
            self.update(**values)

    def init(self):
        for _, field in self.get_fields():
            field.init()

        for _, field in self.get_fields():
            if field.is_derived():
                field.value = field.default(self)

    def field_assigned(self, name):
        '''Hook called each time a field is assigned through its attribute.'''
        pass

    def get_ordered_fields_name(self) -> List[str]:
        return self._meta.serialization_order

    def get_fields(self, present_only=False) -> List[Tuple[str, Field]]:
        '''It returns a list of couples (name, instance) for each field.'''
        result = [(_, getattr(self, _)) for _ in self.get_ordered_fields_name()]

        if present_only:
            result = [(name, field) for name, field in result if field.is_present()]

        return result

    def get_field(self, name) -> Field:
        if name not in self._meta.fields:
            raise AttributeError(f'unknown field {name!r} for {self.__class__.__name__}')

        return getattr(self, name)

    def has_field(self, name) -> bool:
        return name in self._meta.fields or name in self._meta.bit_fields

    def get(self, name):
        '''Value of a field or of a bit sub-field.'''
        if name in self._meta.bit_fields:
            return self.get_field(self._meta.bit_fields[name])[name]

        return self.get_field(name).value

    def set(self, name, value):
        if name in self._meta.bit_fields:
            self.get_field(self._meta.bit_fields[name])[name] = value
            return

        self.get_field(name)  # raise for unknown fields
        setattr(self, name, value)

    def update(self, **values):
        for name, value in values.items():
            self.set(name, value)

    def assign(self, value):
        if isinstance(value, dict):
            self.update(**value)
        else:
            self.read(value)

    def _get_value(self):
        return self.to_dict()

    def _set_value(self, value):
        # the base class initializes the value before the fields exist
        if value is not None:
            self.assign(value)

    def to_dict(self) -> Dict:
        result = {}
        for name, field in self.get_fields(present_only=True):
            result[name] = field.to_human()
            for bit_name in getattr(field, 'bit_names', ()):
                result[bit_name] = field[bit_name]

        return result

    def to_human(self):
        return self.to_dict()

    def from_human(self, value):
        self.assign(value)

    def __repr__(self):
        msg = []
        for field_name, field in self.get_fields(present_only=True):
            msg.append('%s=%s' % (field_name, repr(field)))
        return '<%s(%s)>' % (self.__class__.__name__, ','.join(msg))

    def __str__(self):
        msg = ''
        for field_name, field in self.get_fields(present_only=True):
            msg += '%s: %s\n' % (field_name, repr(field))
        return msg

    @property
    def root(self):
        '''Obtain the final father of this chunk'''
        return get_root_from_chunk(self)

    def _get_size(self):
        '''the size MUST not be set but MUST be derived from the subchunks'''
        size = 0
        for _, field in self.get_fields(present_only=True):
            size += field.size

        return size

    def _get_body(self):
        return self._body

    def _set_body(self, value):
        if isinstance(value, str):
            value = value.encode()
        if not isinstance(value, Chunk):
            value = bytes(value)

        self._body = value

    body = property(
        fget=lambda self: self._get_body(),
        fset=lambda self, value: self._set_body(value),
    )

    @property
    def body_raw(self) -> bytes:
        if isinstance(self._body, Chunk):
            return self._body.pack()

        return self._body

    @property
    def layout(self) -> Dict[str, Tuple[int, int]]:
        result = {}
        offset = 0
        for name, field in self.get_fields(present_only=True):
            result[name] = (offset, field.size)
            offset += field.size

        return result

    def offset_of(self, name) -> int:
        self.get_field(name)

        return self.layout[name][0] if name in self.layout else None

    def pack_fields(self) -> bytes:
        value = b''
        for field_name, field_instance in self.get_fields(present_only=True):
            field_raw = field_instance.pack()
            self.logger.debug("field '{}' raw={}".format(field_name, field_raw))
            value += field_raw

        return value

    def pack(self) -> bytes:
        '''The fields in their order followed by the body. Nothing is recomputed:
        derived values like lengths and checksums are the ones stored.'''
        return self.pack_fields() + self.body_raw

    def unpack(self, stream):
        '''This is one of the main APIs to take care of: its aim is to take a binary
        data and transform in the representation given by the class this method
        is implemented.

        Each field consumes what it needs from the stream and the failing one is
        reported by name in the chain of the exception.
        '''
        for field_name, field in self.get_fields():
            if not field.is_present():
                self.logger.debug('skipping absent %s.%s' % (self.__class__.__name__, field_name))
                continue

            self.logger.debug('unpacking %s.%s at offset %d' % (self.__class__.__name__, field_name, stream.tell()))

            try:
                field.unpack(stream)
            except StructuralError as e:
                e.chain.insert(0, field_name)
                raise

    def read(self, data):
        '''Decode the fields from data, what remains is the body.'''
        stream = as_stream(data)
        self.unpack(stream)
        self._body = stream.read_all()

        return self

    def peek(self, stream, name):
        '''Decode the fields up to the one named and return its value
        leaving the stream untouched.'''
        with stream.rewind():
            for field_name, field in self.get_fields():
                if not field.is_present():
                    continue
                field.unpack(stream)
                if field_name == name or name in getattr(field, 'bit_names', ()):
                    return self.get(name)

        raise AttributeError(f'unknown field {name!r} for {self.__class__.__name__}')

    def calc_nested_lengths(self):
        for _, field in self.get_fields(present_only=True):
            if hasattr(field, 'calc_length'):
                field.calc_length()

    def calc_length(self):
        '''Recompute the length field from the current content.

        The nested chunks are computed first. What is counted is chosen by the Meta
        options "length_covers" and "length_includes_body".'''
        self.calc_nested_lengths()

        length_field = self._meta.length_field
        if length_field is None:
            return

        covers = self._meta.length_covers
        length = 0
        for name, field in self.get_fields(present_only=True):
            if covers == 'all' or name in covers:
                length += field.size

        if self._meta.length_includes_body:
            length += len(self.body_raw)

        self.logger.debug('%s.%s = %d' % (self.__class__.__name__, length_field, length))
        self.set(length_field, length)
