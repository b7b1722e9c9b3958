"""
Type-Length-Value records.

The classes are not written by hand but generated by a factory

    Option = AbstractTLV.create('B', 'B', field_in_length='TLV')

that returns a Chunk subclass with the fields "type", "length" and "value"; the latter
is a string as long as the length says (minus the size of the type and length fields
when they are accounted in it).
"""
import copy
import logging
from typing import Dict

from .core import Chunk
from .meta import MetaChunk
from .fields import Field, StructField, StringField
from .exceptions import StructuralError


logger = logging.getLogger(__name__)

FIELD_LETTERS = {
    'T': 'type',
    'L': 'length',
    'V': 'value',
}


def _as_field(obj) -> Field:
    '''Accept a struct format, a field instance or a field class.'''
    if isinstance(obj, str):
        return StructField(obj)
    if isinstance(obj, Field):
        return copy.deepcopy(obj)
    if isinstance(obj, type) and issubclass(obj, Field):
        return obj()

    raise TypeError(f'cannot build a field out of {obj!r}')


def _check_letters(letters, what, exact=False):
    if not letters or any([_ not in FIELD_LETTERS for _ in letters]) or len(set(letters)) != len(letters):
        raise ValueError(f'invalid {what} {letters!r}: use a combination of the letters T, L and V')

    if exact and len(letters) != len(FIELD_LETTERS):
        raise ValueError(f'invalid {what} {letters!r}: all of T, L and V are needed')


class AbstractTLV(Chunk):
    FIELD_ORDER = 'TLV'
    FIELD_IN_LENGTH = 'V'
    ALIASES: Dict[str, str] = {}

    @classmethod
    def create(cls, type_field, length_field, value_field=None, field_order='TLV',
               field_in_length='V', enum=None, aliases=None, name=None):
        """Build a new TLV class.

        "field_order" is the serialization order of the fields, "field_in_length" the
        ones whose size is accounted in the length. The "aliases" map additional names
        to the three fields, e.g. {'oui': 'value'}.
        """
        if cls is not AbstractTLV:
            raise TypeError('create() must be called on AbstractTLV, use derive() on its subclasses')

        _check_letters(field_order, 'field order', exact=True)
        _check_letters(field_in_length, 'length accounting')

        type_prototype = _as_field(type_field)
        if enum is not None:
            type_prototype.enum = enum

        attrs = {
            '__module__': cls.__module__,
            'FIELD_ORDER': field_order,
            'FIELD_IN_LENGTH': field_in_length,
            'ALIASES': dict(aliases or {}),
            'type': type_prototype,
            'length': _as_field(length_field),
            'value': StringField() if value_field is None else _as_field(value_field),
            'Meta': type('Meta', (), {'order': [FIELD_LETTERS[_] for _ in field_order]}),
        }

        for alias, target in attrs['ALIASES'].items():
            attrs[alias] = cls._alias_property(target)

        return MetaChunk(name or 'TLV', (cls,), attrs)

    @classmethod
    def derive(cls, name, type_default=None, value_field=None, enum=None):
        '''Subclass with the type fixed and/or a different kind of value.'''
        attrs = {
            '__module__': cls.__module__,
        }
        if value_field is not None:
            attrs['value'] = _as_field(value_field)

        new_cls = MetaChunk(name, (cls,), attrs)
        if enum is not None:
            new_cls.define_type_enum(enum)
        if type_default is not None:
            new_cls.define_type_default(type_default)

        return new_cls

    @classmethod
    def define_type_enum(cls, enum):
        cls.type.enum = enum

    @classmethod
    def define_type_default(cls, default):
        cls.set_field_default('type', default)

    @staticmethod
    def _alias_property(target):
        return property(
            fget=lambda self: self.get_field(target),
            fset=lambda self, value: self.set(target, value),
        )

    def __init__(self, data=None, /, **values):
        length = values.pop('length', None)
        super().__init__(data, **values)

        if data is not None:
            return

        # an explicit length wins over the computed one
        if length is None:
            self.calc_length()
        else:
            self.set('length', length)

    def _real_name(self, name):
        return self.ALIASES.get(name, name)

    def get(self, name):
        return super().get(self._real_name(name))

    def set(self, name, value):
        super().set(self._real_name(name), value)

    def has_field(self, name) -> bool:
        return super().has_field(self._real_name(name))

    def field_assigned(self, name):
        if name == 'value':
            self.calc_length()

    def _counted_size(self, letters) -> int:
        return sum([self.get_field(FIELD_LETTERS[_]).size for _ in letters])

    def real_length(self) -> int:
        '''The size of the value according to the length field.'''
        return self.get('length') - self._counted_size(self.FIELD_IN_LENGTH.replace('V', ''))

    def calc_length(self):
        self.calc_nested_lengths()
        self.set('length', self._counted_size(self.FIELD_IN_LENGTH))

    def unpack(self, stream):
        length_read = False
        for field_name, field in self.get_fields():
            try:
                if field_name == 'value' and length_read:
                    field.unpack(stream.substream(self.real_length()))
                else:
                    field.unpack(stream)
            except StructuralError as e:
                e.chain.insert(0, field_name)
                raise

            length_read = length_read or field_name == 'length'

    def human_type(self):
        return self.get_field('type').to_human()

    def to_human(self):
        value = self.get_field('value').to_human()
        if isinstance(value, bytes):
            value = repr(value)

        return 'type:%s,length:%u,value:%s' % (self.human_type(), self.get('length'), value)


class Padded32(object):
    '''Mixin padding the serialization of a record to a multiple of 4 bytes.

        class Parameter(Padded32, BaseParameter):
            pass

    the padding is never accounted in the length field.'''

    @property
    def unpadded_size(self) -> int:
        return super()._get_size()

    @property
    def padding_size(self) -> int:
        return -self.unpadded_size % 4

    @property
    def padded_size(self) -> int:
        return self.unpadded_size + self.padding_size

    def _get_size(self):
        return self.padded_size

    def pack_fields(self) -> bytes:
        return super().pack_fields() + b'\x00' * self.padding_size

    def unpack(self, stream):
        super().unpack(stream)

        # the last element of a sequence can come without padding
        padding = min(self.padding_size, stream.remaining())
        stream.read(padding)
