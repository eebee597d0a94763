class MungeException(Exception):
    '''Base class to extend in order to throw exception in munge.

    It takes a message and the chain of the fields that caused the exception:
    every record the exception crosses while propagating prepends the name of
    the field it was decoding, so that the final chain reads like a path from
    the outermost record.
    '''

    def __init__(self, message='', chain=None):
        self.message = message
        self.chain = chain if chain is not None else []
        super().__init__(message)

    def __str__(self):
        if not self.chain:
            return self.message

        return '%s: %s' % ('.'.join(self.chain), self.message)


class UnpackException(MungeException):
    pass


class PackException(MungeException):
    pass


class StreamException(UnpackException):
    '''Short read or failed seek on the underlying stream.'''
    pass


class SizeMismatchException(UnpackException):
    '''The children of a node don't add up to its declared size.'''
    pass


class MissingChildException(UnpackException):
    pass


class DuplicateChildException(UnpackException):
    pass


class UnknownChildException(UnpackException):
    pass


class InvalidDiscriminantException(UnpackException):
    pass


class StringTooLongException(UnpackException):
    pass


class InvalidPackException(UnpackException):
    pass


class BadNameException(UnpackException):
    pass


class MagicException(UnpackException):
    '''The root node doesn't have the expected tag.'''
    pass
