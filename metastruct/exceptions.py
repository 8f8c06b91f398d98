class MetastructException(Exception):
    '''Base class to extend in order to throw exception in metastruct.

    Other than the message it takes an optional argument that represents the
    chain of the layers that caused the exception (like ['eps', 'tiff']).
    '''

    def __init__(self, message='', chain=None):
        self.chain = chain if chain is not None else []
        super().__init__(message)


class InvalidArgumentException(MetastructException):
    '''Something unusable has been passed to a constructor (like None as a source).'''
    pass


class BoundsException(MetastructException):
    '''The requested range is known to be outside of the data.'''

    def __init__(self, index, count, length, message=None, chain=None):
        self.index = index
        self.count = count
        self.length = length

        if message is None:
            if index < 0:
                message = 'Attempt to read from buffer using a negative index (%d)' % index
            elif count < 0:
                message = 'Number of requested bytes cannot be negative (%d)' % count
            else:
                message = 'Attempt to read from beyond end of underlying data source ' \
                          '(requested index: %d, requested count: %d, max index: %d)' % (index, count, length - 1)

        super().__init__(message, chain=chain)


class TruncatedInputException(MetastructException):
    '''The data might have existed but the stream ended before providing it.'''

    def __init__(self, index, count, length, chain=None):
        self.index = index
        self.count = count
        self.length = length
        message = 'Stream ended before the request could be satisfied ' \
                  '(requested index: %d, requested count: %d, stream length: %d)' % (index, count, length)
        super().__init__(message, chain=chain)


class SizeLimitException(MetastructException):
    '''A length field asks for more data than we are willing to buffer.'''

    def __init__(self, requested, limit, chain=None):
        self.requested = requested
        self.limit = limit
        super().__init__(f'requested {requested} bytes exceed the limit of {limit} bytes', chain=chain)


class StreamReadException(MetastructException):
    '''The underlying stream failed while reading.'''
    pass


class ProcessingException(MetastructException):
    '''A format reader found something it cannot recover from.'''
    pass


class TiffProcessingException(ProcessingException):
    pass


class RiffProcessingException(ProcessingException):
    pass


class MetadataException(MetastructException):
    '''A stored value cannot be used the way it has been asked for.'''
    pass


class TypeMismatchException(MetadataException):
    pass


class DivisionByZeroException(MetadataException):
    pass
