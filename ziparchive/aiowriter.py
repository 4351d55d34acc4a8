#
# Asynchronous front end of ArchiveWriter
#
import asyncio
import os
import stat
from concurrent import futures
import aiofiles
import aiofiles.os
from .compression import CompressionLevel
from .errors import DirectoryNotFoundError, SourceNotFoundError
from .writer import ArchiveWriter, archive_name, walk_files


__all__ = ("AioArchiveWriter",)


class AioArchiveWriter:
    """
    Asynchronous version of ArchiveWriter.

    Source files are read with aiofiles, compression and archive writes
    run in a single worker thread, one entry at a time.
    """

    def __init__(self, *args, **kwargs):
        self._writer = ArchiveWriter(*args, **kwargs)

    def __get_executor(self):
        # get thread pool executor
        try:
            return self.__tpex
        except AttributeError:
            self.__tpex = futures.ThreadPoolExecutor(max_workers=1)
            return self.__tpex

    async def _execute_aio_task(self, task, *args):
        # run synchronous task in separate thread and await for result
        loop = asyncio.get_event_loop()
        return await loop.run_in_executor(self.__get_executor(), task, *args)

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_value, tb):
        await self.close()

    @property
    def closed(self):
        return self._writer.closed

    @property
    def entries(self):
        return self._writer.entries

    async def add_bytes(self, name, data, level=CompressionLevel.DEFAULT,
                        mode=0o644, mtime=None):
        return await self._execute_aio_task(
            self._writer.add_bytes, name, data, level, mode, mtime)

    async def add_file(self, path, level=CompressionLevel.DEFAULT, arcname=None):
        try:
            stats = await aiofiles.os.stat(path)
        except FileNotFoundError:
            stats = None
        if stats is None or not stat.S_ISREG(stats.st_mode):
            raise SourceNotFoundError("File not found: %s" % path)
        async with aiofiles.open(path, "rb") as fh:
            data = await fh.read()
        if arcname is None:
            arcname = archive_name(path)
        return await self.add_bytes(arcname, data, level,
                                    stats.st_mode, stats.st_mtime)

    async def add_directory(self, path, level=CompressionLevel.DEFAULT, arcname=None):
        if not os.path.isdir(path):
            raise DirectoryNotFoundError("Directory not found: %s" % path)
        added = []
        for full, name in walk_files(path, arcname):
            added.append(await self.add_file(full, level, arcname=name))
        return added

    async def close(self):
        if not self._writer.closed:
            await self._execute_aio_task(self._writer.close)
        try:
            self.__tpex.shutdown(wait=False)
            del self.__tpex
        except AttributeError:
            pass
