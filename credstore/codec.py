"""
credstore - Codec Adapter

The persistence layer only knows the codec contract:

    compress(input_path, output_path) -> bool
    decompress(input_path, output_path) -> bool

This module turns a False result (or a crash inside the codec) into
CodecError, and hands out scratch files that are unique per call and
removed on every exit path.
"""

import logging
import os
import tempfile
from contextlib import contextmanager
from typing import Iterator, Optional, Protocol

from . import config
from .errors import CodecError, from_os_error
from .huffman import HuffmanCodec

logger = logging.getLogger(__name__)


class Codec(Protocol):
    """Lossless, symmetric file codec: decompress(compress(X)) == X."""

    def compress(self, input_path: str, output_path: str) -> bool: ...

    def decompress(self, input_path: str, output_path: str) -> bool: ...


# =============================================================================
# Scratch files
# =============================================================================

@contextmanager
def scratch_file(directory: str) -> Iterator[str]:
    """
    Yield a fresh, empty scratch path inside `directory`.

    The file is deleted when the block exits, whether it finished,
    raised, or returned early.
    """
    directory = directory or "."
    try:
        fd, path = tempfile.mkstemp(
            prefix=config.SCRATCH_PREFIX + "_",
            suffix=config.SCRATCH_SUFFIX,
            dir=directory,
        )
    except OSError as e:
        raise from_os_error(directory, "write", e) from e
    os.close(fd)

    try:
        yield path
    finally:
        try:
            os.remove(path)
        except FileNotFoundError:
            pass
        else:
            logger.debug(f"Removed scratch file {path}")


# =============================================================================
# Adapter
# =============================================================================

class CodecAdapter:
    """
    Raise-on-failure wrapper around a Codec.

    Usage:
        adapter = CodecAdapter()            # Huffman by default
        adapter.compress_file("in.txt", "out.bin")
        adapter.decompress_file("out.bin", "in.txt")
    """

    def __init__(self, codec: Optional[Codec] = None):
        self.codec = codec if codec is not None else HuffmanCodec()

    def compress_file(self, input_path: str, output_path: str) -> None:
        self._run("compress", input_path, output_path)

    def decompress_file(self, input_path: str, output_path: str) -> None:
        self._run("decompress", input_path, output_path)

    def _run(self, operation: str, input_path: str, output_path: str) -> None:
        try:
            ok = getattr(self.codec, operation)(input_path, output_path)
        except Exception as e:
            logger.error(f"Codec {operation} raised on {input_path}: {e}")
            raise CodecError(f"Failed to {operation} '{input_path}': {e}") from e

        if not ok:
            logger.error(f"Codec {operation} reported failure on {input_path}")
            raise CodecError(f"Failed to {operation} '{input_path}'")
