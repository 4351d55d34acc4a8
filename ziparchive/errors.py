"""
Exceptions raised while reading and writing zip archives.

Every error raised by this package derives from ``ZipArchiveError``,
except the missing-source errors, which are also builtin
``FileNotFoundError`` so plain ``except OSError`` handlers keep working.
"""


__all__ = ("ZipArchiveError", "ArchiveError", "InvalidArchiveError",
           "ArchiveOpenError", "ArchiveWriteError", "ArchiveClosedError",
           "IntegrityError", "BackendError", "CompressionError",
           "DecompressionError", "UnsupportedCompressionError",
           "SourceNotFoundError", "DirectoryNotFoundError")


class ZipArchiveError(Exception):
    """Base class for all archive errors."""


class ArchiveError(ZipArchiveError):
    """Problem with the container itself."""


class InvalidArchiveError(ArchiveError):
    """Malformed trailer, central directory or local header."""


class ArchiveOpenError(ArchiveError):
    """Archive file could not be opened."""


class ArchiveWriteError(ArchiveError):
    """
    Writing to the archive failed.
    The archive file is left in an undefined state.
    """


class ArchiveClosedError(ArchiveError):
    """Operation attempted on an archive that is already closed."""


class IntegrityError(ZipArchiveError):
    """Extracted content does not match the stored checksum or size."""


class BackendError(ZipArchiveError):
    """Failure inside a compression backend."""


class CompressionError(BackendError):
    pass


class DecompressionError(BackendError, IntegrityError):
    """
    Compressed stream is corrupted or truncated.
    It is an ``IntegrityError`` too, since a damaged payload is the
    most common cause.
    """


class UnsupportedCompressionError(BackendError):
    """Unknown backend token or compression method id."""


class SourceNotFoundError(ZipArchiveError, FileNotFoundError):
    """File to be added does not exist."""


class DirectoryNotFoundError(SourceNotFoundError):
    """Directory to be added does not exist."""
