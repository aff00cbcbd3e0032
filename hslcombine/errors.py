"""Exceptions raised while building a combined image."""


class CombineError(Exception):
    """Base class for every failure the combiner reports."""


class InvalidDimensionsError(CombineError, ValueError):
    pass


class InvalidChannelError(CombineError, ValueError):
    pass


class ArityError(CombineError, ValueError):
    pass


class RangeError(CombineError, ValueError):
    pass


class SourceError(CombineError):
    action = "processing"

    def __init__(self, filename, reason):
        self.filename = str(filename)
        self.reason = str(reason)
        super().__init__(f"Failed {self.action} {self.filename}: {self.reason}")


class OpenError(SourceError):
    action = "opening"


class DecodeError(SourceError):
    action = "decoding"


class EncodeError(SourceError):
    action = "encoding"
