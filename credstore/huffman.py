"""
credstore - Huffman Codec

Lossless byte compressor used for the master credential file.

Container format (all integers big-endian):
    magic        4 bytes   b"HUF1"
    length       8 bytes   number of bytes in the original input
    count        2 bytes   number of distinct symbols
    table        count * (symbol: 1 byte, frequency: 4 bytes), symbols ascending
    bit stream   codes packed MSB first, zero padded to a whole byte

The decoder rebuilds the exact same tree from the frequency table, so the
table is all that needs to travel with the data.
"""

import heapq
import logging
import struct
from collections import Counter
from typing import Dict

logger = logging.getLogger(__name__)

MAGIC = b"HUF1"
_HEADER = struct.Struct(">4sQH")
_SYMBOL = struct.Struct(">BI")
_MAX_FREQUENCY = 2**32 - 1


# =============================================================================
# Code construction
# =============================================================================

def build_code_table(frequencies: Dict[int, int]) -> Dict[int, str]:
    """
    Build a prefix-free code for each symbol.

    Ties are broken by insertion order (symbols ascending, then merged nodes
    in creation order), which makes the tree deterministic for a given
    frequency table.

    Args:
        frequencies: symbol (0-255) -> occurrence count

    Returns:
        symbol -> bit string such as "0110"
    """
    if not frequencies:
        return {}

    heap = []
    order = 0
    for symbol in sorted(frequencies):
        heap.append((frequencies[symbol], order, symbol))
        order += 1
    heapq.heapify(heap)

    # A lone symbol still needs one bit per occurrence
    if len(heap) == 1:
        return {heap[0][2]: "0"}

    while len(heap) > 1:
        freq_a, _, left = heapq.heappop(heap)
        freq_b, _, right = heapq.heappop(heap)
        heapq.heappush(heap, (freq_a + freq_b, order, (left, right)))
        order += 1

    codes = {}
    stack = [(heap[0][2], "")]
    while stack:
        node, prefix = stack.pop()
        if isinstance(node, tuple):
            stack.append((node[0], prefix + "0"))
            stack.append((node[1], prefix + "1"))
        else:
            codes[node] = prefix
    return codes


# =============================================================================
# Encode / decode (in memory)
# =============================================================================

def encode(data: bytes) -> bytes:
    """Compress bytes into the HUF1 container."""
    frequencies = Counter(data)
    if any(count > _MAX_FREQUENCY for count in frequencies.values()):
        raise ValueError("Input too large for HUF1 frequency table")

    codes = build_code_table(frequencies)

    header = _HEADER.pack(MAGIC, len(data), len(frequencies))
    table = b"".join(_SYMBOL.pack(symbol, frequencies[symbol]) for symbol in sorted(frequencies))

    bits = "".join(codes[byte] for byte in data)
    if not bits:
        return header + table

    bits += "0" * (-len(bits) % 8)
    payload = int(bits, 2).to_bytes(len(bits) // 8, "big")
    return header + table + payload


def decode(blob: bytes) -> bytes:
    """
    Decompress a HUF1 container.

    Raises:
        ValueError: If the container is malformed or truncated
    """
    if len(blob) < _HEADER.size:
        raise ValueError("Truncated HUF1 header")

    magic, length, count = _HEADER.unpack_from(blob, 0)
    if magic != MAGIC:
        raise ValueError(f"Bad magic bytes: {magic!r}")

    offset = _HEADER.size
    frequencies = {}
    for _ in range(count):
        if offset + _SYMBOL.size > len(blob):
            raise ValueError("Truncated HUF1 frequency table")
        symbol, frequency = _SYMBOL.unpack_from(blob, offset)
        offset += _SYMBOL.size
        frequencies[symbol] = frequency

    if sum(frequencies.values()) != length:
        raise ValueError("Frequency table does not match declared length")

    decoding = {code: symbol for symbol, code in build_code_table(frequencies).items()}

    body = blob[offset:]
    bits = bin(int.from_bytes(body, "big"))[2:].zfill(len(body) * 8) if body else ""

    out = bytearray()
    current = ""
    for bit in bits:
        if len(out) == length:
            break
        current += bit
        symbol = decoding.get(current)
        if symbol is not None:
            out.append(symbol)
            current = ""

    if len(out) != length:
        raise ValueError("Truncated HUF1 bit stream")
    return bytes(out)


# =============================================================================
# File codec (compress/decompress contract)
# =============================================================================

class HuffmanCodec:
    """
    File-to-file Huffman codec.

    Both methods report success as a boolean and never raise for I/O or
    format problems; the codec adapter turns False into CodecError.
    """

    def compress(self, input_path: str, output_path: str) -> bool:
        try:
            with open(input_path, "rb") as f:
                data = f.read()
            with open(output_path, "wb") as f:
                f.write(encode(data))
        except (OSError, ValueError) as e:
            logger.error(f"Compression of {input_path} failed: {e}")
            return False
        logger.debug(f"Compressed {input_path} -> {output_path} ({len(data)} bytes in)")
        return True

    def decompress(self, input_path: str, output_path: str) -> bool:
        try:
            with open(input_path, "rb") as f:
                blob = f.read()
            data = decode(blob)
            with open(output_path, "wb") as f:
                f.write(data)
        except (OSError, ValueError, struct.error) as e:
            logger.error(f"Decompression of {input_path} failed: {e}")
            return False
        logger.debug(f"Decompressed {input_path} -> {output_path} ({len(data)} bytes out)")
        return True
