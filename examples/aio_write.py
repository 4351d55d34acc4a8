#!/usr/bin/env python3
import asyncio
import os
from ziparchive import AioArchiveWriter


async def zip_async(zipname, dirname):
    async with AioArchiveWriter(zipname) as zw:
        for f in sorted(os.listdir(dirname)):
            fp = os.path.join(dirname, f)
            if os.path.isfile(fp):
                await zw.add_file(fp, arcname=f)
                print('.', end='', flush=True)
    print()


asyncio.run(zip_async("example.zip", "/tmp/files/to/zip"))
