class NetstructException(Exception):
    '''Base class to extend in order to throw exception in netstruct.

    It takes an optional argument that represents the chain of the fields
    that caused the exception, from the outermost record down to the failing one.
    '''

    def __init__(self, message='', chain=None):
        self.message = message
        self.chain = chain if chain is not None else []
        super().__init__(message)

    def __str__(self):
        if not self.chain:
            return self.message

        return '%s: %s' % ('.'.join(self.chain), self.message)


class StructuralError(NetstructException):
    '''Malformed field: short buffer, length source overrun, bit-field overflow.'''
    pass


class BindingError(NetstructException):
    '''No binding is registered between two header classes.'''
    pass


class ParseError(BindingError):
    '''The first header of a binary string could not be identified.'''
    pass


class UnknownProtocolError(NetstructException, KeyError):

    def __str__(self):
        return NetstructException.__str__(self)


class EnumError(NetstructException, ValueError):
    '''Unknown symbolic name assigned to an enumerated field.'''
    pass
