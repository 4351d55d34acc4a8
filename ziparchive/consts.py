from collections import namedtuple
import struct


# zip constants
ZIP_VERSION_NEEDED = 0x0014   # 2.0, deflate
ZIP_VERSION_MADE_BY = 0x033F  # unix, 6.3
ZIP_SYSTEM_UNIX = 0x03
ZIP32_LIMIT = (1 << 32) - 1
ZIP16_LIMIT = (1 << 16) - 1
MAX_COMMENT_SIZE = ZIP16_LIMIT
UTF8_FLAG = 0x800   # utf-8 filename encoding flag

# size of blocks fed to and drained from the compression engine
CHUNK_SIZE = 16384

# zip compression methods
COMPRESSION_STORE = 0
COMPRESSION_DEFLATE = 8

# file header
LF_STRUCT = struct.Struct(b"<4sHHHHHLLLHH")
LF_TUPLE = namedtuple("fileheader",
                      ("signature", "version", "flags",
                       "compression", "mod_time", "mod_date",
                       "crc", "comp_size", "uncomp_size",
                       "fname_len", "extra_len"))
LF_MAGIC = b'\x50\x4b\x03\x04'

# central directory file header
CDLF_STRUCT = struct.Struct(b"<4sBBHHHHHLLLHHHHHLL")
CDLF_TUPLE = namedtuple("cdfileheader",
                        ("signature", "version", "system", "version_ndd", "flags",
                         "compression", "mod_time", "mod_date", "crc",
                         "comp_size", "uncomp_size", "fname_len", "extra_len",
                         "fcomm_len", "disk_start", "attrs_int", "attrs_ext", "offset"))
CDFH_MAGIC = b'\x50\x4b\x01\x02'

# end of central directory record
CD_END_STRUCT = struct.Struct(b"<4sHHHHLLH")
CD_END_TUPLE = namedtuple("cdend",
                          ("signature", "disk_num", "disk_cdstart", "disk_entries",
                           "total_entries", "cd_size", "cd_offset", "comment_len"))
CD_END_MAGIC = b'\x50\x4b\x05\x06'
