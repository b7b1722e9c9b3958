"""
Known headers and the bindings between them.

A binding says that after a header of class "source" a header of class "target"
follows when the fields of the former satisfy some conditions

    registry.bind(IP, UDP, protocol=17)
    registry.bind(UDP, IKE, dport=500)
    registry.bind(IKE, Payload, next=lambda value: value not in (0, 33))

a condition is an exact value (an integer or the name of an element of the
enumeration of the field) or a predicate over the value decoded.
"""
import logging
from enum import Enum
from typing import List, Tuple

from .exceptions import UnknownProtocolError


logger = logging.getLogger(__name__)


class Binding(object):

    def __init__(self, source, target, conditions: Tuple[Tuple[str, object], ...]):
        self.source = source
        self.target = target
        self.conditions = tuple(conditions)

    def __repr__(self):
        conditions = ','.join(['%s=%r' % (name, matcher) for name, matcher in self.conditions])
        return '<%s(%s -> %s, %s)>' % (
            self.__class__.__name__, self.source.__name__, self.target.__name__, conditions)

    def __eq__(self, other):
        return isinstance(other, Binding) and (
            self.source, self.target, self.conditions) == (other.source, other.target, other.conditions)

    def __hash__(self):
        return hash((self.source, self.target))

    @staticmethod
    def _is_predicate(matcher):
        return callable(matcher) and not isinstance(matcher, (Enum, type))

    def is_writable(self) -> bool:
        '''Only exact values can be written into the source header.'''
        return not any([self._is_predicate(matcher) for _, matcher in self.conditions])

    def _expected(self, header, name, matcher):
        if isinstance(matcher, (str, Enum)):
            return self._field_of(header, name).to_int(matcher)

        return matcher

    @staticmethod
    def _field_of(header, name):
        '''The field holding name, the bit-field containing it for a bit sub-field.'''
        return header.get_field(header._meta.bit_fields.get(name, name))

    def matches(self, header) -> bool:
        for name, matcher in self.conditions:
            value = header.get(name)
            if self._is_predicate(matcher):
                if not matcher(value):
                    return False
            elif value != self._expected(header, name, matcher):
                return False

        return True

    def apply(self, header):
        '''Write the conditions into the source header.'''
        for name, matcher in self.conditions:
            if not self._is_predicate(matcher):
                header.set(name, matcher)


class Registry(object):
    '''The universe of protocols a Packet knows about.

    The order of registration of the classes is the order used when guessing
    the first header of some data; the order of the bindings is the order in
    which they are tried when decoding.
    '''

    def __init__(self):
        self._classes = {}
        self._bindings: List[Binding] = []

    def __repr__(self):
        return '<%s(%d classes, %d bindings)>' % (
            self.__class__.__name__, len(self._classes), len(self._bindings))

    def __contains__(self, protocol):
        try:
            self.resolve(protocol)
        except UnknownProtocolError:
            return False

        return True

    def add_class(self, cls):
        name = cls.protocol_name or cls.__name__
        logger.debug('registering protocol \'%s\'' % name)
        self._classes[name] = cls

        return cls

    def remove_class(self, cls):
        name = cls.protocol_name or cls.__name__
        self._classes.pop(name, None)
        self._bindings = [_ for _ in self._bindings if cls not in (_.source, _.target)]

    def get(self, name):
        try:
            return self._classes[name]
        except KeyError:
            raise UnknownProtocolError(f'unknown protocol {name!r}')

    def resolve(self, protocol):
        '''Accept a protocol name or a class.'''
        if isinstance(protocol, str):
            return self.get(protocol)

        if protocol not in self._classes.values():
            raise UnknownProtocolError(f'protocol {protocol.__name__!r} is not registered')

        return protocol

    def classes(self) -> List[type]:
        return list(self._classes.values())

    def bind(self, source, target, **conditions):
        if not conditions:
            raise ValueError('a binding needs at least one condition')

        binding = Binding(source, target, tuple(conditions.items()))
        if binding in self._bindings:
            return binding

        logger.debug('new binding %r', binding)
        self._bindings.append(binding)

        return binding

    def unbind(self, source, target, **conditions):
        binding = Binding(source, target, tuple(conditions.items()))
        self._bindings = [_ for _ in self._bindings if _ != binding]

    def bindings_from(self, source) -> List[Binding]:
        return [_ for _ in self._bindings if _.source is source]

    def bindings_between(self, source, target) -> List[Binding]:
        return [_ for _ in self._bindings if _.source is source and _.target is target]


# the default one, where the protocols shipped with the package are installed
registry = Registry()
