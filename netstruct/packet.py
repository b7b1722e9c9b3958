"""
A packet is a stack of headers, the outermost first, each one being the body
of the previous one.

    pkt = Packet.gen('Eth').add('IP').add('UDP', dport=500).add('IKE')
    pkt.calc()
    raw = pkt.pack()

    pkt = Packet.parse(raw, first_header='Eth')
    pkt.header('UDP').dport

Which header follows which is decided by the bindings of the Registry the
packet is built with.
"""
import logging
from typing import List

from .header import Header
from .registry import registry as default_registry, Binding
from .exceptions import NetstructException, StructuralError, BindingError, ParseError


logger = logging.getLogger(__name__)


class Packet(object):

    def __init__(self, registry=None):
        self.registry = registry if registry is not None else default_registry
        self.headers: List[Header] = []

    @classmethod
    def gen(cls, protocol, registry=None, **fields):
        return cls(registry=registry).add(protocol, **fields)

    @classmethod
    def parse(cls, data, first_header=None, registry=None):
        '''Decode the headers contained in data.

        Without a first header, the registered classes are tried in the order
        of registration and the first one decoding without errors and with a
        binding holding for the following header is taken.'''
        packet = cls(registry=registry)

        if first_header is None:
            header = packet._guess_first_header(data)
        else:
            klass = packet.registry.resolve(first_header)
            try:
                header = klass(data)
            except StructuralError as e:
                logger.warning('cannot decode \'%s\' as first header: %s' % (klass.protocol_name, e))
                return UnknownPacket(data, registry=registry)

        packet._push(header)
        packet._decode_from(header)

        return packet

    @classmethod
    def decode(cls, data, first_header=None, registry=None):
        '''As parse() but never raises: undecodable data gives an UnknownPacket.'''
        try:
            return cls.parse(data, first_header=first_header, registry=registry)
        except NetstructException as e:
            logger.warning('cannot decode packet: %s' % e)
            return UnknownPacket(data, registry=registry)

    def _guess_first_header(self, data) -> Header:
        for klass in self.registry.classes():
            try:
                header = klass(data)
            except NetstructException as e:
                logger.debug('\'%s\' is not the first header: %s' % (klass.protocol_name, e))
                continue

            if not header.parse_ok():
                continue

            if any([_.matches(header) for _ in self.registry.bindings_from(klass)]):
                logger.debug('first header guessed as \'%s\'' % klass.protocol_name)
                return header

        raise ParseError('no registered protocol can decode the first header')

    def _decode_next(self, header):
        for binding in self.registry.bindings_from(header.__class__):
            if not binding.matches(header):
                continue

            try:
                candidate = binding.target(header.body)
            except StructuralError as e:
                logger.warning('stop decoding after \'%s\': %s' % (header.protocol_name, e))
                return None

            if not candidate.parse_ok():
                logger.debug('\'%s\' refused the data, trying next binding' % binding.target.protocol_name)
                continue

            return candidate

        return None

    def _decode_from(self, header):
        while isinstance(header.body, bytes) and header.body:
            candidate = self._decode_next(header)
            if candidate is None or candidate.size == 0:
                break

            header.body = candidate
            self._push(candidate)
            header = candidate

    def _push(self, header):
        header.packet = self
        self.headers.append(header)

    def _select_binding(self, previous, header) -> Binding:
        bindings = self.registry.bindings_between(previous.__class__, header.__class__)

        for binding in bindings:
            if binding.matches(previous):
                return binding

        for binding in bindings:
            if binding.is_writable():
                return binding

        raise BindingError('\'%s\' cannot be followed by \'%s\': no binding registered' % (
            previous.protocol_name, header.protocol_name))

    def _link(self, previous, header, binding):
        logger.debug('linking with %r' % binding)
        binding.apply(previous)
        previous.body = header

    def add(self, protocol, **fields):
        '''Append a new header, the previous one is modified to be followed by it.'''
        klass = self.registry.resolve(protocol)
        header = klass(**fields)

        if self.headers:
            previous = self.headers[-1]
            self._link(previous, header, self._select_binding(previous, header))

        self._push(header)

        return self

    def encapsulate(self, other):
        '''Move the headers of other after the ones of this packet.'''
        if other is self:
            raise ValueError('a packet cannot be encapsulated into itself')

        if not other.headers:
            return self

        if self.headers:
            previous, header = self.headers[-1], other.headers[0]
            self._link(previous, header, self._select_binding(previous, header))

        for header in other.headers:
            self._push(header)
        other.headers = []

        return self

    def decapsulate(self, *headers):
        '''Remove the given headers, the ones becoming adjacent are linked again.'''
        for header in headers:
            if not any([header is _ for _ in self.headers]):
                raise ValueError(f'{header!r} is not part of the packet')

        remaining = [_ for _ in self.headers if not any([_ is header for header in headers])]

        # check all the new seams before touching anything
        seams = []
        for previous, header in zip(remaining, remaining[1:]):
            if previous.body is header:
                continue
            seams.append((previous, header, self._select_binding(previous, header)))

        old_tail = self.headers[-1]
        for previous, header, binding in seams:
            self._link(previous, header, binding)

        if remaining and remaining[-1] is not old_tail:
            remaining[-1].body = old_tail.body_raw

        for header in headers:
            header.packet = None
            header.body = b''

        self.headers = remaining

        return self

    def calc_length(self):
        '''From the outermost header to the innermost.'''
        for header in self.headers:
            header.calc_length()

    def calc_checksum(self):
        '''From the innermost header to the outermost.'''
        for header in reversed(self.headers):
            header.calc_checksum()

    def calc(self):
        self.calc_length()
        self.calc_checksum()

    def header(self, protocol, index=0):
        '''The index-th header (starting from zero) of the given protocol.'''
        if isinstance(protocol, str):
            found = [_ for _ in self.headers if _.protocol_name == protocol]
        else:
            found = [_ for _ in self.headers if isinstance(_, protocol)]

        return found[index] if index < len(found) else None

    def __contains__(self, protocol):
        return self.header(protocol) is not None

    def __iter__(self):
        return iter(self.headers)

    def __len__(self):
        return len(self.headers)

    def _get_body(self):
        return self.headers[-1].body if self.headers else b''

    def _set_body(self, value):
        if not self.headers:
            raise BindingError('an empty packet has no body')

        self.headers[-1].body = value

    body = property(
        fget=lambda self: self._get_body(),
        fset=lambda self, value: self._set_body(value),
    )

    def pack(self) -> bytes:
        return self.headers[0].pack() if self.headers else b''

    def serialize(self) -> bytes:
        return self.pack()

    def __bytes__(self):
        return self.pack()

    def __eq__(self, other):
        return isinstance(other, Packet) and self.pack() == other.pack()

    __hash__ = None

    def __repr__(self):
        return '<%s(%s)>' % (self.__class__.__name__, '/'.join([_.protocol_name for _ in self.headers]))

    def __str__(self):
        msg = ''
        for header in self.headers:
            msg += '--- %s\n' % header.protocol_name
            msg += ''.join(['  %s\n' % _ for _ in str(header).splitlines()])

        body = self.body
        if isinstance(body, bytes) and body:
            msg += '--- body\n  %s\n' % body.hex()

        return msg


class UnknownPacket(Packet):
    '''Data that could not be decoded, kept as it is.'''

    def __init__(self, data=b'', registry=None):
        super().__init__(registry=registry)
        self.data = bytes(data)

    def add(self, protocol, **fields):
        raise BindingError('cannot add headers to an unknown packet')

    def encapsulate(self, other):
        raise BindingError('cannot encapsulate into an unknown packet')

    def _get_body(self):
        return self.data

    def _set_body(self, value):
        self.data = bytes(value)

    def pack(self) -> bytes:
        return self.data

    def __repr__(self):
        return '<%s(%d bytes)>' % (self.__class__.__name__, len(self.data))

    def __str__(self):
        return '--- unknown\n  %s\n' % self.data.hex()
