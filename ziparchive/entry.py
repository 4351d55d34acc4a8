import stat
import time
from . import consts


__all__ = ("ZipEntry", "dos_date_time", "from_dos_date_time")


def dos_date_time(timestamp=None):
    """
    Pack local time of ``timestamp`` into (dosdate, dostime) pair.
    Dates before 1980 are clamped to 1980-01-01 00:00:00.
    """
    dt = time.localtime(timestamp)
    if dt[0] < 1980:
        dt = (1980, 1, 1, 0, 0, 0)
    dosdate = ((dt[0] - 1980) << 9 | dt[1] << 5 | dt[2]) \
        & 0xffff
    dostime = (dt[3] << 11 | dt[4] << 5 | (dt[5] // 2)) \
        & 0xffff
    return dosdate, dostime


def from_dos_date_time(dosdate, dostime):
    return ((dosdate >> 9) + 1980, (dosdate >> 5) & 0x0f, dosdate & 0x1f,
            dostime >> 11, (dostime >> 5) & 0x3f, (dostime & 0x1f) * 2)


class ZipEntry:
    """
    Metadata of single archived file.
    """

    def __init__(self, name, crc32=0, compressed_size=0, uncompressed_size=0,
                 mod_time=0, mod_date=0, external_attrs=0, header_offset=0,
                 compression=consts.COMPRESSION_DEFLATE, flags=0):
        self.name = name
        self.crc32 = crc32
        self.compressed_size = compressed_size
        self.uncompressed_size = uncompressed_size
        self.mod_time = mod_time
        self.mod_date = mod_date
        self.external_attrs = external_attrs
        self.header_offset = header_offset
        self.compression = compression
        self.flags = flags

    @classmethod
    def from_cdir_record(cls, record, name):
        """
        Build entry from parsed central directory record
        """
        return cls(name,
                   crc32=record.crc,
                   compressed_size=record.comp_size,
                   uncompressed_size=record.uncomp_size,
                   mod_time=record.mod_time,
                   mod_date=record.mod_date,
                   external_attrs=record.attrs_ext,
                   header_offset=record.offset,
                   compression=record.compression,
                   flags=record.flags)

    @property
    def mode(self):
        """POSIX permission bits kept in high word of external attributes"""
        return stat.S_IMODE(self.external_attrs >> 16)

    @property
    def date_time(self):
        return from_dos_date_time(self.mod_date, self.mod_time)

    @property
    def is_dir(self):
        return self.name.endswith('/')

    def encoded_name(self):
        """
        Return (name bytes, flags), utf-8 names get the language encoding flag
        """
        try:
            return self.name.encode("ascii"), self.flags & ~consts.UTF8_FLAG
        except UnicodeError:
            return self.name.encode("utf-8"), self.flags | consts.UTF8_FLAG

    def __repr__(self):
        return "<ZipEntry %r size=%d csize=%d crc=%08x offset=%d>" % (
            self.name, self.uncompressed_size, self.compressed_size,
            self.crc32, self.header_offset)
