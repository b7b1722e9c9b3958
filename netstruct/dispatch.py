import logging
from enum import Enum


logger = logging.getLogger(__name__)


class TypeRegistry(object):
    '''Maps the value of a discriminator field to the class decoding the element.

        CHUNKS = TypeRegistry(key='type')

        @CHUNKS.register(ChunkType.INIT)
        class Init(BaseChunk):
            ...

    It's used by ArrayField to decode polymorphic elements and shared among all
    the copies of the field prototype holding it.
    '''

    def __init__(self, key='type', default=None):
        self.key = key
        self.default = default
        self._classes = {}

    def __repr__(self):
        return '<%s(%s, %d types)>' % (self.__class__.__name__, self.key, len(self._classes))

    def __deepcopy__(self, memo):
        return self

    def __contains__(self, value):
        return self._key(value) in self._classes

    @staticmethod
    def _key(value):
        return value.value if isinstance(value, Enum) else int(value)

    def register(self, value, klass=None):
        if klass is None:
            def decorator(klass):
                self.register(value, klass)
                return klass

            return decorator

        logger.debug('registering %s for %s=%s', klass.__name__, self.key, value)
        self._classes[self._key(value)] = klass

        return klass

    def unregister(self, value):
        self._classes.pop(self._key(value), None)

    def resolve(self, value):
        return self._classes.get(self._key(value), self.default)

    def items(self):
        return self._classes.items()
