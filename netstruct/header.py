from .core import Chunk


class Header(Chunk):
    '''A record that can be stacked in a Packet.

    Its body is either raw bytes or the following header. Subclasses are
    registered in a Registry and linked to each other by bindings; they
    can recompute their own length and checksum overriding calc_length()
    and calc_checksum().
    '''
    # defaults to the class name
    protocol_name = None

    def __init__(self, data=None, /, **kwargs):
        self.packet = None
        super().__init__(data, **kwargs)

    def calc_checksum(self):
        pass

    def parse_ok(self) -> bool:
        '''Called after a speculative decode, a False vetoes it.'''
        return True

    def find_previous(self, cls):
        '''The nearest header of the given class preceding this one in its packet.'''
        if self.packet is None:
            return None

        headers = self.packet.headers
        idx = [_ for _, header in enumerate(headers) if header is self]
        for header in reversed(headers[:idx[0]] if idx else []):
            if isinstance(header, cls):
                return header

        return None
