#
# Compression backends used by archive reader and writer.
# Zip entries carry raw DEFLATE streams (RFC 1951), without zlib header.
#
import abc
import enum
import logging
import zlib
from . import consts
from .errors import CompressionError, DecompressionError, UnsupportedCompressionError


__all__ = ("CompressionLevel", "Compressor", "DeflateCompressor",
           "CompressorType", "create_compressor")

log = logging.getLogger(__name__)


class CompressionLevel(enum.IntEnum):
    """
    Effort levels, values are zlib compression levels.
    STORE bypasses compression entirely.
    """
    STORE = 0
    FAST = 1
    DEFAULT = 6
    MAXIMUM = 9

    @property
    def method(self):
        """zip compression method id used for this level"""
        if self is CompressionLevel.STORE:
            return consts.COMPRESSION_STORE
        return consts.COMPRESSION_DEFLATE

    @classmethod
    def from_number(cls, value):
        """
        Map 0..9 digit (as in ``-m0`` .. ``-m9``) to level.
        """
        value = int(value)
        if not 0 <= value <= 9:
            raise ValueError("Compression level must be between 0 and 9")
        return {0: cls.STORE, 1: cls.FAST, 9: cls.MAXIMUM}.get(value, cls.DEFAULT)


class Compressor(abc.ABC):
    """
    Block compression contract.
    Both operations work on complete in-memory buffers.
    """

    @abc.abstractmethod
    def compress(self, data, level=CompressionLevel.DEFAULT):
        """return compressed ``data``"""

    @abc.abstractmethod
    def decompress(self, data, expected_size=0, method=consts.COMPRESSION_DEFLATE):
        """
        return decompressed ``data``
        expected_size - size hint, never limits output
        method - zip method id the payload was produced with
        """


class DeflateCompressor(Compressor):

    def __init__(self, chunksize=consts.CHUNK_SIZE):
        self.chunksize = chunksize

    def compress(self, data, level=CompressionLevel.DEFAULT):
        level = CompressionLevel(level)
        if level is CompressionLevel.STORE or len(data) == 0:
            return bytes(data)
        try:
            compr = zlib.compressobj(int(level), zlib.DEFLATED, -zlib.MAX_WBITS)
        except (ValueError, zlib.error) as exc:
            raise CompressionError("Failed to initialize deflate: %s" % exc) from exc
        view = memoryview(data)
        out = bytearray()
        try:
            for pos in range(0, len(view), self.chunksize):
                out += compr.compress(view[pos:pos + self.chunksize])
            out += compr.flush(zlib.Z_FINISH)
        except zlib.error as exc:
            raise CompressionError("Compression error: %s" % exc) from exc
        log.debug("deflate level %d: %d -> %d bytes", level, len(data), len(out))
        return bytes(out)

    def decompress(self, data, expected_size=0, method=consts.COMPRESSION_DEFLATE):
        if method == consts.COMPRESSION_STORE:
            return bytes(data)
        if method != consts.COMPRESSION_DEFLATE:
            raise UnsupportedCompressionError(
                "Unsupported compression method %r" % method)
        if len(data) == 0:
            return b''
        try:
            decompr = zlib.decompressobj(-zlib.MAX_WBITS)
        except zlib.error as exc:
            raise DecompressionError("Failed to initialize inflate: %s" % exc) from exc
        # output is pre-sized from the hint and grows past it when needed
        out = bytearray(expected_size)
        size = 0
        view = memoryview(data)
        try:
            for pos in range(0, len(view), self.chunksize):
                pending = view[pos:pos + self.chunksize]
                while pending and not decompr.eof:
                    part = decompr.decompress(pending, self.chunksize)
                    out[size:size + len(part)] = part
                    size += len(part)
                    pending = decompr.unconsumed_tail
                if decompr.eof:
                    break
            part = decompr.flush()
            out[size:size + len(part)] = part
            size += len(part)
        except zlib.error as exc:
            raise DecompressionError("Decompression error: %s" % exc) from exc
        if not decompr.eof:
            raise DecompressionError("Compressed stream is truncated")
        del out[size:]
        return bytes(out)


class CompressorType(enum.Enum):
    DEFLATE = "deflate"


_BACKENDS = {
    CompressorType.DEFLATE: DeflateCompressor,
}


def create_compressor(kind=CompressorType.DEFLATE, **kwargs):
    """
    Create backend by type, ``kind`` is CompressorType member or its name token
    """
    try:
        kind = CompressorType(kind)
    except ValueError:
        raise UnsupportedCompressionError(
            "Unknown compression type %r" % (kind,)) from None
    return _BACKENDS[kind](**kwargs)
