#!/usr/bin/env python3
from unittest import TestCase, main
import zlib
from ziparchive import consts
from ziparchive.compression import (CompressionLevel, CompressorType,
                                    DeflateCompressor, create_compressor)
from ziparchive.errors import (DecompressionError, IntegrityError,
                               UnsupportedCompressionError)


SAMPLES = [
    b"",
    b"x",
    b"Hello, World! This is a test string for compression.",
    bytes(range(256)) * 300,
    b"foo baz bar\n" * 5000,
]


class DeflateCompressorTestCase(TestCase):

    def setUp(self):
        self.compressor = DeflateCompressor()

    def test_round_trip(self):
        for level in CompressionLevel:
            for data in SAMPLES:
                packed = self.compressor.compress(data, level)
                unpacked = self.compressor.decompress(packed, len(data), level.method)
                self.assertEqual(unpacked, data)

    def test_round_trip_small_chunks(self):
        # tiny chunks force many feed/drain iterations
        compressor = DeflateCompressor(chunksize=7)
        data = b"baz trololo something " * 1000
        packed = compressor.compress(data, CompressionLevel.DEFAULT)
        self.assertEqual(compressor.decompress(packed), data)

    def test_raw_deflate_stream(self):
        # zip entries carry deflate data without zlib header
        data = SAMPLES[2]
        packed = self.compressor.compress(data, CompressionLevel.DEFAULT)
        self.assertEqual(zlib.decompress(packed, -15), data)

    def test_empty(self):
        self.assertEqual(self.compressor.compress(b"", CompressionLevel.MAXIMUM), b"")
        self.assertEqual(self.compressor.decompress(b""), b"")
        self.assertEqual(self.compressor.decompress(b"", 100), b"")

    def test_store_keeps_size(self):
        for data in SAMPLES:
            packed = self.compressor.compress(data, CompressionLevel.STORE)
            self.assertEqual(len(packed), len(data))
            self.assertEqual(packed, data)

    def test_compression_levels(self):
        data = bytes(i % 256 for i in range(1024 * 1024))
        c_max = self.compressor.compress(data, CompressionLevel.MAXIMUM)
        c_fast = self.compressor.compress(data, CompressionLevel.FAST)
        self.assertLessEqual(len(c_max), len(c_fast))
        self.assertLess(len(c_fast), len(data))
        self.assertEqual(self.compressor.decompress(c_max, len(data)), data)

    def test_size_hint_never_truncates(self):
        data = b"foo baz bar\n" * 5000
        packed = self.compressor.compress(data)
        self.assertEqual(self.compressor.decompress(packed, 10), data)
        self.assertEqual(self.compressor.decompress(packed, len(data) * 3), data)

    def test_corrupted_stream(self):
        with self.assertRaises(DecompressionError):
            self.compressor.decompress(b"\xff" * 20, 20)

    def test_truncated_stream(self):
        data = bytes(range(256)) * 300
        packed = self.compressor.compress(data)
        with self.assertRaises(DecompressionError) as ctx:
            self.compressor.decompress(packed[:len(packed) // 2], len(data))
        # corrupted payload is also integrity problem
        self.assertIsInstance(ctx.exception, IntegrityError)

    def test_unknown_method(self):
        with self.assertRaises(UnsupportedCompressionError):
            self.compressor.decompress(b"abc", 3, 12)


class CompressionLevelTestCase(TestCase):

    def test_methods(self):
        self.assertEqual(CompressionLevel.STORE.method, consts.COMPRESSION_STORE)
        for level in (CompressionLevel.FAST, CompressionLevel.DEFAULT,
                      CompressionLevel.MAXIMUM):
            self.assertEqual(level.method, consts.COMPRESSION_DEFLATE)

    def test_from_number(self):
        self.assertIs(CompressionLevel.from_number(0), CompressionLevel.STORE)
        self.assertIs(CompressionLevel.from_number(1), CompressionLevel.FAST)
        self.assertIs(CompressionLevel.from_number(5), CompressionLevel.DEFAULT)
        self.assertIs(CompressionLevel.from_number("9"), CompressionLevel.MAXIMUM)
        with self.assertRaises(ValueError):
            CompressionLevel.from_number(10)


class FactoryTestCase(TestCase):

    def test_deflate(self):
        self.assertIsInstance(create_compressor("deflate"), DeflateCompressor)
        self.assertIsInstance(create_compressor(CompressorType.DEFLATE), DeflateCompressor)
        self.assertEqual(create_compressor(chunksize=1024).chunksize, 1024)

    def test_unknown(self):
        with self.assertRaises(UnsupportedCompressionError):
            create_compressor("gzip")


if __name__ == '__main__':
    main()
