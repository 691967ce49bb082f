"""Line-delimited JSON-RPC over stdio.

Input is decoded as UTF-8 and buffered; every complete ``\\n``-terminated
line is one message and the trailing partial segment stays buffered.
Each response is written as one JSON line. Logs go to stderr, never stdout.
"""

import asyncio
import codecs
import json
import sys
from typing import AsyncIterator, Callable, List, Optional, TextIO

from core.observability.logging import get_logger
from tool_server.server import ToolServer

logger = get_logger(__name__)

READ_CHUNK_SIZE = 4096


class LineBuffer:
    """Accumulates text chunks and yields complete, non-empty lines."""

    def __init__(self):
        self._pending = ""

    @property
    def pending(self) -> str:
        return self._pending

    def feed(self, chunk: str) -> List[str]:
        self._pending += chunk
        *complete, self._pending = self._pending.split("\n")
        return [line.strip() for line in complete if line.strip()]


async def serve_lines(
    server: ToolServer,
    chunks: AsyncIterator[str],
    write: Callable[[str], None],
) -> int:
    """Feed text chunks through the server, writing one line per response.

    Lines are processed strictly in arrival order. Returns the number of
    responses written.
    """
    buffer = LineBuffer()
    written = 0
    async for chunk in chunks:
        for line in buffer.feed(chunk):
            response = await server.process_line(line)
            if response is not None:
                write(json.dumps(response) + "\n")
                written += 1
    if buffer.pending.strip():
        logger.warning("Discarding incomplete input line at end of stream")
    return written


async def _stdin_chunks(stream) -> AsyncIterator[str]:
    loop = asyncio.get_running_loop()
    reader = asyncio.StreamReader()
    await loop.connect_read_pipe(lambda: asyncio.StreamReaderProtocol(reader), stream)
    decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
    while True:
        data = await reader.read(READ_CHUNK_SIZE)
        if not data:
            tail = decoder.decode(b"", final=True)
            if tail:
                yield tail
            return
        yield decoder.decode(data)


async def run_stdio(server: ToolServer, stdin=None, stdout: Optional[TextIO] = None) -> int:
    """Serve JSON-RPC on stdin/stdout until stdin closes."""
    out = stdout or sys.stdout

    def write(text: str) -> None:
        out.write(text)
        out.flush()

    logger.info(f"Stdio transport started ({server.mode} mode)")
    written = await serve_lines(server, _stdin_chunks(stdin or sys.stdin), write)
    logger.info("Stdin closed")
    return written
