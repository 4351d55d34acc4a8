#
# ZIP archive reading
# based on official ZIP File Format Specification version 6.3.4
# https://pkware.cachefly.net/webdocs/casestudies/APPNOTE.TXT
#
import enum
import logging
import os
import struct
import zlib
from . import consts
from .compression import Compressor, create_compressor
from .entry import ZipEntry
from .errors import ArchiveOpenError, IntegrityError, InvalidArchiveError


__all__ = ("ArchiveReader", "OverwriteDecision", "prompt_overwrite")

log = logging.getLogger(__name__)


class OverwriteDecision(enum.Enum):
    YES = "y"
    NO = "n"
    ALL = "all"


def prompt_overwrite(path):
    """
    Ask on terminal whether existing ``path`` should be overwritten
    """
    print("File already exists: %s" % path)
    try:
        answer = input("Overwrite? (y/N/all): ").strip().lower()
    except EOFError:
        answer = ""
    if answer == "all":
        return OverwriteDecision.ALL
    if answer in ("y", "yes"):
        return OverwriteDecision.YES
    return OverwriteDecision.NO


class ArchiveReader:
    """
    Reads existing zip archive.
    Central directory is parsed once, when reader is created.
    """

    def __init__(self, path, compressor=None, confirm=None):
        """
        path - archive file name, or seekable binary file object
        compressor - Compressor instance or backend type token
        confirm - callable(path) returning OverwriteDecision, used when
                  extracted file already exists, asks on terminal by default
        """
        self._fh = None
        if isinstance(compressor, Compressor):
            self._compressor = compressor
        else:
            self._compressor = create_compressor(compressor or "deflate")
        self._confirm = confirm or prompt_overwrite
        if hasattr(path, 'read'):
            self._own_fh = False
            self.path = getattr(path, 'name', None)
            self._fh = path
        else:
            self._own_fh = True
            self.path = path
            try:
                self._fh = open(path, "rb")
            except OSError as exc:
                raise ArchiveOpenError(
                    "Failed to open archive file: %s" % path) from exc
        try:
            self.comment = b''
            self._entries = tuple(self._read_central_directory())
        except Exception:
            self.close()
            raise
        self._by_name = {e.name: e for e in self._entries}

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_value, tb):
        self.close()

    def close(self):
        if self._fh is not None and self._own_fh:
            self._fh.close()
        self._fh = None

    @property
    def entries(self):
        return self._entries

    def list_files(self):
        """
        Names of entries in central directory order
        """
        return [e.name for e in self._entries]

    def get_entry(self, name):
        try:
            return self._by_name[name]
        except KeyError:
            raise KeyError("There is no item named %r in the archive" % name) from None

    # central directory parsing

    def _find_cdend(self):
        """
        Locate end of central directory record, scanning backward
        from the end of file over possible archive comment.
        Returns (record, position of record in file)
        """
        try:
            self._fh.seek(0, os.SEEK_END)
            file_size = self._fh.tell()
            bufsize = min(file_size, consts.CD_END_STRUCT.size + consts.MAX_COMMENT_SIZE)
            self._fh.seek(file_size - bufsize)
            buf = self._fh.read(bufsize)
        except OSError as exc:
            raise InvalidArchiveError("Cannot read archive: %s" % exc) from exc
        base = file_size - bufsize
        pos = len(buf) - consts.CD_END_STRUCT.size
        while pos >= 0:
            pos = buf.rfind(consts.CD_END_MAGIC, 0, pos + len(consts.CD_END_MAGIC))
            if pos < 0:
                break
            record = consts.CD_END_TUPLE._make(
                consts.CD_END_STRUCT.unpack_from(buf, pos))
            start = base + pos
            cd_end = record.cd_offset + record.cd_size
            comment_start = pos + consts.CD_END_STRUCT.size
            # signature bytes may also occur inside comment, so the
            # record must be consistent with archive layout
            if cd_end == start or (cd_end <= start and
                                   comment_start + record.comment_len == len(buf)):
                self.comment = buf[comment_start:comment_start + record.comment_len]
                log.debug("end of central directory at %d: %r", start, record)
                return record, start
            pos -= 1
        raise InvalidArchiveError(
            "Invalid ZIP file: End of central directory not found")

    def _read_central_directory(self):
        record, cdend_pos = self._find_cdend()
        if record.disk_num != 0 or record.disk_cdstart != 0:
            raise InvalidArchiveError("Multi-volume archives are not supported")
        if record.cd_offset + record.cd_size > cdend_pos:
            raise InvalidArchiveError("Central directory is outside of archive")
        self._fh.seek(record.cd_offset)
        data = self._fh.read(record.cd_size)
        if len(data) != record.cd_size:
            raise InvalidArchiveError("Central directory is truncated")
        pos = 0
        for idx in range(record.total_entries):
            try:
                cdfh = consts.CDLF_TUPLE._make(
                    consts.CDLF_STRUCT.unpack_from(data, pos))
            except struct.error as exc:
                raise InvalidArchiveError(
                    "Central directory entry %d is truncated" % idx) from exc
            if cdfh.signature != consts.CDFH_MAGIC:
                raise InvalidArchiveError("Invalid central directory entry %d" % idx)
            pos += consts.CDLF_STRUCT.size
            fname = data[pos:pos + cdfh.fname_len]
            if len(fname) != cdfh.fname_len:
                raise InvalidArchiveError(
                    "Central directory entry %d is truncated" % idx)
            # extra field and comment are skipped
            pos += cdfh.fname_len + cdfh.extra_len + cdfh.fcomm_len
            try:
                if cdfh.flags & consts.UTF8_FLAG:
                    name = fname.decode("utf-8")
                else:
                    name = fname.decode("cp437")
            except UnicodeDecodeError as exc:
                raise InvalidArchiveError(
                    "Invalid file name in central directory entry %d" % idx) from exc
            entry = ZipEntry.from_cdir_record(cdfh, name)
            log.debug("parsed %r", entry)
            yield entry

    # extraction

    def _read_payload(self, entry):
        """
        Read compressed data of entry, following its local header
        """
        self._fh.seek(entry.header_offset)
        head = self._fh.read(consts.LF_STRUCT.size)
        if len(head) != consts.LF_STRUCT.size:
            raise InvalidArchiveError("Local header of %s is truncated" % entry.name)
        lfh = consts.LF_TUPLE._make(consts.LF_STRUCT.unpack(head))
        if lfh.signature != consts.LF_MAGIC:
            raise InvalidArchiveError("Invalid local file header for %s" % entry.name)
        self._fh.seek(lfh.fname_len + lfh.extra_len, os.SEEK_CUR)
        payload = self._fh.read(entry.compressed_size)
        if len(payload) != entry.compressed_size:
            raise InvalidArchiveError("Data of %s is truncated" % entry.name)
        return payload

    def read(self, member):
        """
        Return decompressed and verified content of entry,
        ``member`` is entry name or ZipEntry
        """
        entry = member if isinstance(member, ZipEntry) else self.get_entry(member)
        payload = self._read_payload(entry)
        data = self._compressor.decompress(payload, entry.uncompressed_size,
                                           entry.compression)
        crc = zlib.crc32(data) & 0xffffffff
        if crc != entry.crc32:
            raise IntegrityError("CRC32 check failed for %s" % entry.name)
        if len(data) != entry.uncompressed_size:
            raise IntegrityError("Size check failed for %s" % entry.name)
        return data

    def test(self):
        """
        Verify every entry without writing anything,
        raises on first broken entry
        """
        tested = []
        for entry in self._entries:
            if not entry.is_dir:
                self.read(entry)
            tested.append(entry.name)
        return tested

    def _target_path(self, entry, output_dir):
        parts = entry.name.replace('\\', '/').split('/')
        if entry.name.startswith('/') or '..' in parts or \
                os.path.splitdrive(entry.name)[0]:
            raise InvalidArchiveError("Unsafe entry name: %r" % entry.name)
        parts = [p for p in parts if p not in ('', '.')]
        if not parts:
            raise InvalidArchiveError("Empty entry name: %r" % entry.name)
        return os.path.join(output_dir, *parts)

    def _extract_entry(self, entry, output_dir, overwrite_all):
        """
        Returns (written path or None when skipped, decision taken)
        """
        target = self._target_path(entry, output_dir)
        if entry.is_dir:
            os.makedirs(target, exist_ok=True)
            return target, None
        decision = None
        if os.path.exists(target) and not overwrite_all:
            decision = OverwriteDecision(self._confirm(target))
            if decision is OverwriteDecision.NO:
                log.warning("Skipping %s", entry.name)
                return None, decision
        data = self.read(entry)
        parent = os.path.dirname(target)
        if parent:
            os.makedirs(parent, exist_ok=True)
        with open(target, "wb") as fh:
            fh.write(data)
        if entry.mode:
            os.chmod(target, entry.mode)
        log.debug("extracted %s to %s", entry.name, target)
        return target, decision

    def extract(self, member, output_dir=".", overwrite_all=False):
        """
        Extract single entry, returns written path
        or None if existing file was kept
        """
        entry = member if isinstance(member, ZipEntry) else self.get_entry(member)
        return self._extract_entry(entry, output_dir, overwrite_all)[0]

    def extract_all(self, output_dir=".", overwrite_all=False):
        """
        Extract all entries in central directory order.
        Answering ALL to overwrite question overwrites remaining files
        without asking. Stops at first failing entry.
        Returns list of written paths.
        """
        written = []
        for entry in self._entries:
            path, decision = self._extract_entry(entry, output_dir, overwrite_all)
            if decision is OverwriteDecision.ALL:
                overwrite_all = True
            if path is not None:
                written.append(path)
        return written
