import io
import logging
from contextlib import contextmanager

from .exceptions import StructuralError


logger = logging.getLogger(__name__)


class Stream(object):
    '''This is a simple wrapper around the binary data under decoding to
    uniform its properties: strict reads, a budget of remaining bytes and
    the possibility to come back to a saved position (used to peek).'''
    def __init__(self, obj):
        '''Here we normalize the object in order to be accessed as a normal file object'''
        self._type = type(obj)
        self.obj = obj
        self.history = []

        init_method_name = 'init_%s' % self.obj.__class__.__name__

        init_method = getattr(self, init_method_name, None)
        if init_method is None:
            raise ValueError('\'%s\' is the wrong kind of data to decode' % self._type.__name__)

        init_method()

        self.size = self.obj.seek(0, io.SEEK_END)
        self.obj.seek(0)

    def __repr__(self):
        return '<%s(%d/%d)>' % (self.__class__.__name__, self.tell(), self.size)

    def init_bytes(self):
        '''We think these are raw bytes'''
        self.obj = io.BytesIO(self.obj)

    def init_bytearray(self):
        self.obj = io.BytesIO(bytes(self.obj))

    def init_memoryview(self):
        self.obj = io.BytesIO(self.obj.tobytes())

    def tell(self):
        return self.obj.tell()

    def seek(self, offset):
        if not isinstance(offset, int):
            raise ValueError('\'%s\' is the wrong kind of offset to use' % offset.__class__.__name__)

        self.obj.seek(offset)

    def remaining(self):
        return self.size - self.tell()

    def read(self, n):
        '''Read exactly n bytes or fail.'''
        data = self.obj.read(n)
        if len(data) != n:
            raise StructuralError('expected %d bytes, only %d available' % (n, len(data)))

        return data

    def read_all(self):
        '''Returns all the data up to the end of the stream.'''
        return self.obj.read()

    def peek(self, n):
        with self.rewind():
            return self.obj.read(n)

    def substream(self, n):
        '''Cut the next n bytes as an independent stream and move past them.'''
        if n < 0 or n > self.remaining():
            raise StructuralError('length %d exceeds the %d bytes remaining' % (n, self.remaining()))

        logger.debug('substream of %d bytes at offset %d', n, self.tell())

        return Stream(self.read(n))

    def save(self):
        self.history.append(self.obj.tell())

    def restore(self):
        old_seek = self.history.pop()
        self.obj.seek(old_seek)

    @contextmanager
    def rewind(self):
        '''Whatever is read inside the block is read again afterwards.'''
        self.save()
        try:
            yield self
        finally:
            self.restore()
