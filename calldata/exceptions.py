class DecoderError(Exception):
    """Base class for every error raised by the calldata decoder."""


class InvalidHexError(DecoderError, ValueError):
    """Raised when input that should be hex-encoded bytes is not."""


class SignatureParseError(DecoderError):
    """
    Raised when a function signature cannot be parsed, or one of its parameter
    types is not a valid ABI type (``uint7``, ``bytes33``, unbalanced parentheses, ...).
    """


class StructResolutionError(DecoderError):
    """
    Raised when a struct definition cannot be turned into an ABI tuple type.
    The message always names the offending struct, field or type.
    """


class UnknownStructError(StructResolutionError):
    pass


class UnknownTypeError(StructResolutionError):
    pass


class MappingTypeError(StructResolutionError):
    """Mappings have no ABI encoding, so a struct containing one can never be decoded."""


class CircularReferenceError(StructResolutionError):
    pass


class AbiDecodeError(DecoderError):
    """
    Raised when a blob is inconsistent with the types it is decoded against:
    truncated data, offsets pointing outside the blob, non-zero padding.
    """


class AbiEncodeError(DecoderError):
    pass
