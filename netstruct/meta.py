import copy
import logging
from enum import Enum, Flag, auto


class Endianess(Enum):
    LITTLE_ENDIAN = auto()
    BIG_ENDIAN    = auto()
    NETWORK       = auto()
    NATIVE        = auto()


class Compliant(Flag):
    '''It indicates which degree of compliantness the data must reflect the format'''
    NONE  = 0
    ENUM  = 1 << 0
    MAGIC = 1 << 1
    INHERIT = 1 << 2


class FieldDescriptor(object):
    """Wrapper around field access of a Chunk related class."""

    def __init__(self, field_instance: "Field", field_name: str):
        self.logger = logging.getLogger(f"{self.__module__}.{self.__class__.__name__}")
        self.field = field_instance
        self.field.name = field_name

    def __get__(self, instance, type=None):
        # accessing from the class gives back the prototype
        if instance is None:
            return self.field

        data = instance._fields

        if self.field.name not in data:
            self.logger.debug("create new field for field named '%s'", self.field.name)
            data[self.field.name] = self.field.clone(father=instance)

        return data[self.field.name]

    def __set__(self, instance, value):
        self.logger.debug("__set__ from %s for field named '%s'", instance.__class__.__name__, self.field.name)
        data = instance._fields

        # if the value is a field then set as it is
        if isinstance(value, FieldBase):
            value.father = instance
            value.name = self.field.name
            data[self.field.name] = value
        # otherwise delegate to the field
        else:
            self.__get__(instance).assign(value)

        instance.field_assigned(self.field.name)


class FieldBase(object):

    def contribute_to_chunk(self, cls, name):
        setattr(cls, name, FieldDescriptor(self, name))

    def clone(self, father):
        instance = copy.deepcopy(self)
        instance.father = father
        return instance


class Meta(object):
    """Class containing metadata about the abstraction"""

    OPTIONS = ('order', 'length_field', 'length_covers', 'length_includes_body')

    def __init__(self):
        self.fields = []
        self.bit_fields = {}
        self.order = None
        self.length_field = None
        self.length_covers = 'all'
        self.length_includes_body = False

    def inherit(self, parent_meta):
        for option in self.OPTIONS:
            setattr(self, option, getattr(parent_meta, option))

    def configure(self, options):
        for option in self.OPTIONS:
            if hasattr(options, option):
                setattr(self, option, getattr(options, option))

    @property
    def serialization_order(self):
        if not self.order:
            return self.fields

        order = [_ for _ in self.order if _ in self.fields]
        return order + [_ for _ in self.fields if _ not in order]


class MetaChunk(type):

    logger = logging.getLogger(__name__)

    def __new__(cls, names, bases, attrs):
        '''All of this is a big hack, maybe too inspired by how Django does a similar thing!'''
        module = attrs.pop('__module__')
        classcell = attrs.pop('__classcell__', None)
        options = attrs.pop('Meta', None)

        new_attrs = {
            '__module__': module,
        }
        if '__qualname__' in attrs:
            new_attrs['__qualname__'] = attrs.pop('__qualname__')
        if classcell is not None:
            new_attrs['__classcell__'] = classcell
        new_cls = super(MetaChunk, cls).__new__(cls, names, bases, new_attrs)

        new_cls._meta = Meta()

        # handle inheritance: every subclass works on its own copy of the prototypes
        parents = [_ for _ in bases if isinstance(_, MetaChunk)]
        for parent in parents:
            new_cls._meta.inherit(parent._meta)
            for obj_name in parent._meta.fields:
                if obj_name in new_cls._meta.fields:
                    continue
                prototype = copy.deepcopy(parent.__dict__[obj_name].field)
                setattr(new_cls, obj_name, FieldDescriptor(prototype, obj_name))
                new_cls._meta.fields.append(obj_name)

        # headers are named after their class unless told otherwise
        if 'protocol_name' not in attrs and hasattr(new_cls, 'protocol_name'):
            new_cls.protocol_name = names

        for obj_name, obj in attrs.items():
            new_cls.add_to_class(obj_name, obj)

        if options is not None:
            new_cls._meta.configure(options)
            for field_name, default in getattr(options, 'defaults', {}).items():
                new_cls.set_field_default(field_name, default)

        new_cls._meta.bit_fields = {}
        for obj_name in new_cls._meta.fields:
            field = new_cls.__dict__[obj_name].field
            for bit_name in getattr(field, 'bit_names', ()):
                new_cls._meta.bit_fields[bit_name] = obj_name

        return new_cls

    def add_to_class(cls, name, value):
        if hasattr(value, 'contribute_to_chunk'):
            cls.logger.debug('contribute_to_chunk() found for field \'%s\'' % name)
            # redefining an inherited field keeps its position
            if name not in cls._meta.fields:
                cls._meta.fields.append(name)
            value.contribute_to_chunk(cls, name)
        else:
            setattr(cls, name, value)

    def set_field_default(cls, name, default):
        if name not in cls._meta.fields:
            raise AttributeError(f'unknown field {name} for class {cls.__name__}')

        cls.__dict__[name].field.default = default
