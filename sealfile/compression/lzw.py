"""
LZW codec

Variable-width LZW with 8-bit literals, MSB-first bit packing and the
usual GIF/TIFF code layout:
- 256 is the clear code, 257 end-of-data
- Codes start 9 bits wide and grow to 12
- When the table fills the encoder emits a clear code and starts over

The stream always starts with a clear code and ends with end-of-data.
"""

from ..exceptions import CodecError


LIT_WIDTH = 8
MAX_WIDTH = 12
CLEAR_CODE = 1 << LIT_WIDTH
EOF_CODE = CLEAR_CODE + 1
MAX_CODE = (1 << MAX_WIDTH) - 1


class _BitWriter:
    __slots__ = ("out", "bits", "nbits")

    def __init__(self):
        self.out = bytearray()
        self.bits = 0
        self.nbits = 0

    def write(self, code: int, width: int) -> None:
        self.bits = (self.bits << width) | code
        self.nbits += width
        while self.nbits >= 8:
            self.nbits -= 8
            self.out.append((self.bits >> self.nbits) & 0xFF)
        self.bits &= (1 << self.nbits) - 1

    def flush(self) -> bytes:
        if self.nbits:
            self.out.append((self.bits << (8 - self.nbits)) & 0xFF)
            self.bits = 0
            self.nbits = 0
        return bytes(self.out)


def compress(data: bytes) -> bytes:
    """LZW-compress a buffer."""
    writer = _BitWriter()
    width = LIT_WIDTH + 1
    hi = EOF_CODE
    overflow = 1 << width
    table = {}

    def inc_hi() -> bool:
        # Returns False when the table was reset and no entry may be added
        nonlocal width, hi, overflow
        hi += 1
        if hi == overflow:
            width += 1
            overflow <<= 1
        if hi == MAX_CODE:
            writer.write(CLEAR_CODE, width)
            width = LIT_WIDTH + 1
            hi = EOF_CODE
            overflow = 1 << width
            table.clear()
            return False
        return True

    writer.write(CLEAR_CODE, width)
    if not data:
        writer.write(EOF_CODE, width)
        return writer.flush()

    code = data[0]
    for literal in data[1:]:
        key = (code << 8) | literal
        found = table.get(key)
        if found is not None:
            code = found
            continue
        writer.write(code, width)
        code = literal
        if inc_hi():
            table[key] = hi

    writer.write(code, width)
    inc_hi()
    writer.write(EOF_CODE, width)
    return writer.flush()


def decompress(data: bytes) -> bytes:
    """
    Reverse compress().

    Raises:
        CodecError: On invalid codes or a stream without end-of-data
    """
    out = bytearray()
    width = LIT_WIDTH + 1
    hi = EOF_CODE
    overflow = 1 << width
    entries = {}
    last = None

    acc = 0
    nbits = 0
    for byte in data:
        acc = (acc << 8) | byte
        nbits += 8
        while nbits >= width:
            nbits -= width
            code = (acc >> nbits) & ((1 << width) - 1)
            acc &= (1 << nbits) - 1

            if code == CLEAR_CODE:
                width = LIT_WIDTH + 1
                hi = EOF_CODE
                overflow = 1 << width
                entries.clear()
                last = None
                continue
            if code == EOF_CODE:
                return bytes(out)

            if code < CLEAR_CODE:
                entry = bytes((code,))
            elif code < hi and code in entries:
                entry = entries[code]
            elif code == hi and last is not None:
                entry = last + last[:1]
            else:
                raise CodecError("decompress", "LZW", f"invalid code {code}")

            out += entry
            if last is not None:
                entries[hi] = last + entry[:1]
            last = entry
            hi += 1
            if hi >= overflow:
                if width == MAX_WIDTH:
                    last = None
                    hi -= 1
                else:
                    width += 1
                    overflow <<= 1

    raise CodecError("decompress", "LZW", "unexpected end of stream")
