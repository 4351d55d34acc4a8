#!/usr/bin/env python3
import logging
import sys
from ziparchive import ArchiveReader, OverwriteDecision

logging.basicConfig(level=logging.DEBUG)


def keep_existing(path):
    return OverwriteDecision.NO


with ArchiveReader(sys.argv[1], confirm=keep_existing) as zr:
    for name in zr.list_files():
        print(name)
    zr.extract_all("unpacked")
