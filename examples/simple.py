#!/usr/bin/env python3
from ziparchive import ArchiveWriter, CompressionLevel

with ArchiveWriter("example.zip") as zw:
    zw.add_bytes("a.txt", b"this\nis\nstream\nof\ndata\n")
    zw.add_file("/tmp/z/car.jpeg", CompressionLevel.STORE, arcname="car.jpeg")
    zw.add_file("/tmp/z/aaa.mp3", arcname="music.mp3")
    zw.add_directory("/tmp/z/docs", CompressionLevel.MAXIMUM, arcname="docs")
