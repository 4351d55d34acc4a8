from .compression import (CompressionLevel, Compressor, DeflateCompressor,
                          CompressorType, create_compressor)
from .entry import ZipEntry
from .errors import *
from .reader import ArchiveReader, OverwriteDecision
from .writer import ArchiveWriter
from .aiowriter import AioArchiveWriter

__version__ = "1.0.0"
