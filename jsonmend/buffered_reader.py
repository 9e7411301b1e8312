import os
from typing import Iterator, TextIO

from tqdm import tqdm

DEFAULT_CHUNK_SIZE_KB = 64


def stream_file_chunks(handle: TextIO, chunk_size_kb=DEFAULT_CHUNK_SIZE_KB) -> Iterator[str]:
    """Yield text chunks of at most ``chunk_size_kb`` KiB characters from an open handle."""
    limit = max(1, int(chunk_size_kb * 1024))
    chunklet = handle.read(limit)
    while chunklet:
        yield chunklet
        chunklet = handle.read(limit)


def stream_text_chunks(file_path, chunk_size_kb=DEFAULT_CHUNK_SIZE_KB, progress=False) -> Iterator[str]:
    """
    Yield the contents of ``file_path`` in chunks, optionally with a progress bar.

    The bar tracks bytes read and is written to stderr so it never mixes with
    repaired output on stdout.
    """
    total = os.path.getsize(file_path)
    with open(file_path, "r", encoding="utf-8", errors="replace") as f:
        with tqdm(total=total, desc="Repairing", unit="B", unit_scale=True, disable=not progress) as bar:
            for chunk in stream_file_chunks(f, chunk_size_kb):
                bar.update(len(chunk.encode("utf-8")))
                yield chunk
