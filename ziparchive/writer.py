#
# ZIP archive writing
# based on official ZIP File Format Specification version 6.3.4
# https://pkware.cachefly.net/webdocs/casestudies/APPNOTE.TXT
#
import logging
import os
import stat
import zlib
from . import consts
from .compression import CompressionLevel, Compressor, create_compressor
from .entry import ZipEntry, dos_date_time
from .errors import (ArchiveClosedError, ArchiveOpenError, ArchiveWriteError,
                     DirectoryNotFoundError, SourceNotFoundError)


__all__ = ("ArchiveWriter", "archive_name", "walk_files")

log = logging.getLogger(__name__)


def archive_name(path):
    """
    Convert filesystem path to name stored in archive:
    forward slashes, no drive, no leading slash, no '.' or '..' parts
    """
    path = os.path.splitdrive(path)[1]
    parts = path.replace(os.sep, '/').split('/')
    return '/'.join(p for p in parts if p not in ('', '.', '..'))


def walk_files(path, arcname=None):
    """
    Yield (file path, archive name) for every regular file under ``path``,
    in sorted order. Names are ``arcname/relative/path``, where ``arcname``
    defaults to ``path`` itself.
    """
    if arcname is None:
        arcname = path
    prefix = archive_name(arcname)
    for dirpath, dirnames, filenames in os.walk(path):
        dirnames.sort()
        for fname in sorted(filenames):
            full = os.path.join(dirpath, fname)
            if not os.path.isfile(full):
                continue
            rel = archive_name(os.path.relpath(full, path))
            yield full, (prefix + '/' + rel if prefix else rel)


class ArchiveWriter:
    """
    Writes files into new zip archive.

    Archive is finalized (central directory and end record written)
    by ``close()``, on leaving ``with`` block, or as a last resort
    when the writer is garbage collected.
    """

    def __init__(self, path, compressor=None):
        """
        path - archive file name, or binary file object opened for writing
        compressor - Compressor instance or backend type token,
                     deflate is used by default
        """
        self._fh = None
        if isinstance(compressor, Compressor):
            self._compressor = compressor
        else:
            self._compressor = create_compressor(compressor or "deflate")
        self.__files = []
        self.__offset = 0
        if hasattr(path, 'write'):
            self._own_fh = False
            self.path = getattr(path, 'name', None)
            fh = path
            # archive may follow data already in the file, e.g. a stub
            try:
                self.__offset = fh.tell()
            except (AttributeError, OSError):
                self.__offset = 0
        else:
            self._own_fh = True
            self.path = path
            try:
                fh = open(path, "wb")
            except OSError as exc:
                raise ArchiveOpenError(
                    "Failed to create archive file: %s" % path) from exc
        self._fh = fh
        log.debug("archive %s opened for writing", self.path)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_value, tb):
        self.close()

    def __del__(self):
        if getattr(self, '_fh', None) is None:
            return
        try:
            self.close()
        except Exception as exc:
            log.warning("Failed to finalize archive %s: %s", self.path, exc)

    @property
    def closed(self):
        return self._fh is None

    @property
    def entries(self):
        return tuple(self.__files)

    # adding content

    def add_file(self, path, level=CompressionLevel.DEFAULT, arcname=None):
        """
        Add single file, ``arcname`` defaults to ``path``
        converted to archive name
        """
        self._check_open()
        if not os.path.isfile(path):
            raise SourceNotFoundError("File not found: %s" % path)
        try:
            with open(path, "rb") as fh:
                data = fh.read()
            stats = os.stat(path)
        except OSError as exc:
            raise SourceNotFoundError("Cannot read file: %s" % path) from exc
        if arcname is None:
            arcname = archive_name(path)
        return self.add_bytes(arcname, data, level,
                              mode=stats.st_mode, mtime=stats.st_mtime)

    def add_directory(self, path, level=CompressionLevel.DEFAULT, arcname=None):
        """
        Add all regular files found under ``path`` recursively.
        Files are added in sorted order, named ``arcname/relative/path``
        """
        self._check_open()
        if not os.path.isdir(path):
            raise DirectoryNotFoundError("Directory not found: %s" % path)
        return [self.add_file(full, level, arcname=name)
                for full, name in walk_files(path, arcname)]

    def add_bytes(self, name, data, level=CompressionLevel.DEFAULT,
                  mode=0o644, mtime=None):
        """
        Add in-memory content as file ``name``
        mode - POSIX mode of file, permission bits are stored
        mtime - modification timestamp, current time if not given
        """
        self._check_open()
        level = CompressionLevel(level)
        if len(data) > consts.ZIP32_LIMIT:
            raise ArchiveWriteError("File too large for zip32: %s" % name)
        if len(self.__files) >= consts.ZIP16_LIMIT:
            raise ArchiveWriteError("Too many entries in archive")
        dosdate, dostime = dos_date_time(mtime)
        entry = ZipEntry(name,
                         crc32=zlib.crc32(data) & 0xffffffff,
                         uncompressed_size=len(data),
                         mod_time=dostime,
                         mod_date=dosdate,
                         external_attrs=(stat.S_IFREG | stat.S_IMODE(mode)) << 16,
                         compression=level.method)
        # file header offset in zip file
        entry.header_offset = self._offset_get()
        if entry.header_offset > consts.ZIP32_LIMIT:
            raise ArchiveWriteError("Archive too large for zip32")
        payload = self._compressor.compress(data, level)
        entry.compressed_size = len(payload)
        if entry.compressed_size > consts.ZIP32_LIMIT:
            raise ArchiveWriteError("Compressed file too large for zip32: %s" % name)
        self._write(self._make_local_file_header(entry))
        self._write(payload)
        self._add_file_to_cdir(entry)
        log.debug("added %r", entry)
        return entry

    def close(self):
        """
        Write central directory and end record, then release archive file.
        Calling it again is no-op.
        """
        if self._fh is None:
            return
        try:
            for chunk in self._make_end_structures():
                self._write(chunk)
            if self._own_fh:
                self._fh.close()
            else:
                self._fh.flush()
        except OSError as exc:
            raise ArchiveWriteError(
                "Failed to finalize archive: %s" % self.path) from exc
        finally:
            if self._own_fh and not self._fh.closed:
                self._fh.close()
            self._fh = None
            log.debug("archive %s closed, %d entries", self.path, len(self.__files))
            self._cleanup()

    # zip structures creation

    def _make_local_file_header(self, entry):
        """
        Create file header
        """
        fname, flags = entry.encoded_name()
        if len(fname) > consts.ZIP16_LIMIT:
            raise ArchiveWriteError("File name too long: %s" % entry.name)
        fields = {"signature": consts.LF_MAGIC,
                  "version": consts.ZIP_VERSION_NEEDED,
                  "flags": flags,
                  "compression": entry.compression,
                  "mod_time": entry.mod_time,
                  "mod_date": entry.mod_date,
                  "crc": entry.crc32,
                  "uncomp_size": entry.uncompressed_size,
                  "comp_size": entry.compressed_size,
                  "fname_len": len(fname),
                  "extra_len": 0}
        head = consts.LF_TUPLE(**fields)
        head = consts.LF_STRUCT.pack(*head)
        head += fname
        return head

    def _make_cdir_file_header(self, entry):
        """
        Create central directory file header
        """
        fname, flags = entry.encoded_name()
        fields = {"signature": consts.CDFH_MAGIC,
                  "version": consts.ZIP_VERSION_MADE_BY & 0xff,
                  "system": consts.ZIP_VERSION_MADE_BY >> 8,  # 0x03 - unix
                  "version_ndd": consts.ZIP_VERSION_NEEDED,
                  "flags": flags,
                  "compression": entry.compression,
                  "mod_time": entry.mod_time,
                  "mod_date": entry.mod_date,
                  "uncomp_size": entry.uncompressed_size,
                  "comp_size": entry.compressed_size,
                  "offset": entry.header_offset,  # < file header offset
                  "crc": entry.crc32,
                  "fname_len": len(fname),
                  "extra_len": 0,
                  "fcomm_len": 0,  # comment length
                  "disk_start": 0,
                  "attrs_int": 0,
                  "attrs_ext": entry.external_attrs}
        cdfh = consts.CDLF_TUPLE(**fields)
        cdfh = consts.CDLF_STRUCT.pack(*cdfh)
        cdfh += fname
        return cdfh

    def _make_cdend(self, cd_offset, cd_size):
        """
        make end of central directory record
        """
        if cd_offset > consts.ZIP32_LIMIT:
            raise ArchiveWriteError("Archive too large for zip32")
        fields = {"signature": consts.CD_END_MAGIC,
                  "disk_num": 0,
                  "disk_cdstart": 0,
                  "disk_entries": len(self.__files),
                  "total_entries": len(self.__files),
                  "cd_size": cd_size,
                  "cd_offset": cd_offset,
                  "comment_len": 0}
        cdend = consts.CD_END_TUPLE(**fields)
        cdend = consts.CD_END_STRUCT.pack(*cdend)
        return cdend

    def _make_end_structures(self):
        """
        cdir and cdend structures are saved at the end of zip file
        """
        cd_offset = self._offset_get()
        cd_size = 0
        # central directory entries
        for entry in self.__files:
            chunk = self._make_cdir_file_header(entry)
            cd_size += len(chunk)
            yield chunk
        # end of central directory
        yield self._make_cdend(cd_offset, cd_size)

    def _write(self, chunk):
        try:
            self._fh.write(chunk)
        except OSError as exc:
            raise ArchiveWriteError(
                "Failed to write archive: %s" % self.path) from exc
        self._offset_add(len(chunk))

    def _check_open(self):
        if self._fh is None:
            raise ArchiveClosedError("Archive is already closed")

    def _offset_add(self, value):
        self.__offset += value

    def _offset_get(self):
        return self.__offset

    def _add_file_to_cdir(self, entry):
        self.__files.append(entry)

    def _cleanup(self):
        """
        Clean all structs after writing
        """
        self.__files = []
        self.__offset = 0
