#
# Command line archiver
#
#   ziparchive a <archive.zip> <file|folder> [file2 ...] [-m0..9] [--threads N]
#   ziparchive x <archive.zip> [-C <dir_out>] [--force]
#   ziparchive l <archive.zip>
#   ziparchive t <archive.zip>
#
import argparse
import logging
import os
import sys
from . import __version__
from .compression import CompressionLevel
from .errors import (ArchiveError, BackendError, IntegrityError,
                     SourceNotFoundError, ZipArchiveError)
from .reader import ArchiveReader
from .writer import ArchiveWriter, walk_files


log = logging.getLogger(__name__)

EXIT_SUCCESS = 0
EXIT_INVALID_ARGUMENTS = 1
EXIT_FILE_ERROR = 2
EXIT_COMPRESSION_ERROR = 3
EXIT_DECOMPRESSION_ERROR = 4


def threads(value):
    value = int(value)
    if value < 1:
        raise argparse.ArgumentTypeError("Number of threads must be >= 1")
    return value


def build_parser():
    parser = argparse.ArgumentParser(
        prog="ziparchive", description="Simple zip compression utility")
    parser.add_argument("--version", action="version",
                        version="%(prog)s " + __version__)
    parser.add_argument("-v", "--verbose", action="store_true",
                        help="show debug messages")
    commands = parser.add_subparsers(dest="command", metavar="command")
    commands.required = True

    add = commands.add_parser("a", help="add files/folders to archive")
    add.add_argument("archive")
    add.add_argument("paths", nargs="+", metavar="path")
    add.add_argument("-m", dest="level", type=int, choices=range(10), default=6,
                     metavar="0..9", help="compression level (0=store, 9=max)")
    # accepted for compatibility, archive is always written by one thread
    add.add_argument("--threads", type=threads, default=1, metavar="N",
                     help="number of compression threads (default: 1)")

    extract = commands.add_parser("x", help="extract archive contents")
    extract.add_argument("archive")
    extract.add_argument("-C", dest="output_dir", default=os.curdir,
                         metavar="dir", help="extract to specified directory")
    extract.add_argument("--force", action="store_true",
                         help="overwrite existing files without asking")

    lst = commands.add_parser("l", help="list archive contents")
    lst.add_argument("archive")

    test = commands.add_parser("t", help="test archive integrity")
    test.add_argument("archive")
    return parser


def show_progress(operation, current, total, out=sys.stdout):
    width = 50
    progress = current / total if total else 1.0
    pos = int(width * progress)
    bar = "=" * pos + (">" if pos < width else "") + " " * (width - pos - 1)
    out.write("\r%s: [%s] %.1f%% (%d/%d)" % (
        operation, bar, progress * 100.0, current, total))
    if current >= total:
        out.write("\n")
    out.flush()


def collect_sources(paths):
    """
    Expand command line paths to list of (file path, archive name)
    """
    sources = []
    for path in paths:
        if os.path.isdir(path):
            sources.extend(walk_files(path))
        elif os.path.isfile(path):
            sources.append((path, None))
        else:
            raise SourceNotFoundError("File not found: %s" % path)
    return sources


def handle_add(args):
    level = CompressionLevel.from_number(args.level)
    sources = collect_sources(args.paths)
    with ArchiveWriter(args.archive) as writer:
        for idx, (path, name) in enumerate(sources, 1):
            show_progress("Compressing", idx, len(sources))
            writer.add_file(path, level, arcname=name)
    print("Done. %d files compressed." % len(sources))
    return EXIT_SUCCESS


def handle_extract(args):
    with ArchiveReader(args.archive) as reader:
        names = reader.list_files()
        print("Extracting %d files to %s" % (len(names), args.output_dir))
        written = reader.extract_all(args.output_dir, args.force)
    print("Done. %d files extracted." % len(written))
    return EXIT_SUCCESS


def handle_list(args):
    with ArchiveReader(args.archive) as reader:
        for entry in reader.entries:
            print("%10d %10d  %04d-%02d-%02d %02d:%02d  %s" % (
                (entry.uncompressed_size, entry.compressed_size)
                + entry.date_time[:5] + (entry.name,)))
    return EXIT_SUCCESS


def handle_test(args):
    with ArchiveReader(args.archive) as reader:
        tested = reader.test()
    print("No errors detected in %d files." % len(tested))
    return EXIT_SUCCESS


HANDLERS = {
    "a": handle_add,
    "x": handle_extract,
    "l": handle_list,
    "t": handle_test,
}


def main(argv=None):
    parser = build_parser()
    try:
        args = parser.parse_args(argv)
    except SystemExit as exc:
        return EXIT_SUCCESS if exc.code == 0 else EXIT_INVALID_ARGUMENTS
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s")
    try:
        return HANDLERS[args.command](args)
    except (SourceNotFoundError, ArchiveError, OSError) as exc:
        log.error("%s", exc)
        return EXIT_FILE_ERROR
    except IntegrityError as exc:
        log.error("Decompression error: %s", exc)
        return EXIT_DECOMPRESSION_ERROR
    except (BackendError, ZipArchiveError) as exc:
        log.error("Compression error: %s", exc)
        return EXIT_COMPRESSION_ERROR


if __name__ == '__main__':
    sys.exit(main())
