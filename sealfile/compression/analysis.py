"""
Content analysis used by adaptive method selection.

Heuristics only: a wrong guess costs CPU or ratio, never correctness,
because restore trusts the method recorded in the header.
"""

import logging
import math
from collections import Counter
from typing import Optional, Tuple

from ..formats.containers import CompressionMethod


logger = logging.getLogger(__name__)

SMALL_INPUT_THRESHOLD = 1024
ENTROPY_SAMPLE_SIZE = 4096
ENTROPY_THRESHOLD = 7.5         # bits per byte
SELECTION_SAMPLE_SIZE = 8192
REPETITION_WINDOW = 100
REPETITION_THRESHOLD = 0.7
BINARY_WINDOW = 50
BINARY_NULL_LIMIT = 2

FAST_METHOD = CompressionMethod.LZ4
HIGH_RATIO_METHOD = CompressionMethod.ZSTD
MAX_RATIO_METHOD = CompressionMethod.XZ


# Magic prefixes of formats that are already compressed or gain little
SIGNATURES: Tuple[Tuple[bytes, str], ...] = (
    # Archives
    (b"PK\x03\x04", "zip"),
    (b"PK\x05\x06", "zip (empty)"),
    (b"PK\x07\x08", "zip (spanned)"),
    (b"Rar!\x1a\x07\x00", "rar"),
    (b"Rar!\x1a\x07\x01", "rar5"),
    (b"7z\xbc\xaf\x27\x1c", "7z"),
    (b"\x1f\x9d", "compress"),
    (b"\x1f\xa0", "compress (lzh)"),
    (b"BZh", "bzip2"),
    (b"\xfd7zXZ\x00", "xz"),
    (b"\x28\xb5\x2f\xfd", "zstd"),
    (b"\x04\x22\x4d\x18", "lz4"),
    (b"\x1f\x8b\x08", "gzip"),
    (b"\x78\x01", "zlib (no compression)"),
    (b"\x78\x9c", "zlib (default)"),
    (b"\x78\xda", "zlib (best)"),
    (b"\x78\x5e", "zlib (fast)"),
    (b"\x60\xea", "arj"),
    (b"LZIP", "lzip"),
    (b"MZ\x90\x00\x03\x00", "pe (packed)"),
    # Images
    (b"\xff\xd8\xff\xe0", "jpeg/jfif"),
    (b"\xff\xd8\xff\xe1", "jpeg/exif"),
    (b"\xff\xd8\xff\xe2", "jpeg"),
    (b"\xff\xd8\xff\xe3", "jpeg"),
    (b"\xff\xd8\xff\xe8", "jpeg/spiff"),
    (b"\xff\xd8\xff\xdb", "jpeg"),
    (b"\x89PNG\r\n\x1a\n", "png"),
    (b"GIF87a", "gif87a"),
    (b"GIF89a", "gif89a"),
    (b"BM", "bmp"),
    (b"\x00\x00\x01\x00", "ico"),
    (b"\x00\x00\x02\x00", "cur"),
    (b"II*\x00", "tiff (le)"),
    (b"MM\x00*", "tiff (be)"),
    (b"RIFF", "riff (webp/avi/wav)"),
    (b"8BPS", "psd"),
    # Video
    (b"\x00\x00\x00\x14ftyp", "mp4"),
    (b"\x00\x00\x00\x18ftyp", "mp4"),
    (b"\x00\x00\x00\x1cftyp", "mp4"),
    (b"\x00\x00\x00\x20ftyp", "mp4"),
    (b"ftyp", "mp4"),
    (b"\x1a\x45\xdf\xa3", "mkv/webm"),
    (b"\x30\x26\xb2\x75\x8e\x66\xcf", "wmv/asf"),
    (b"FLV\x01", "flv"),
    (b"\x00\x00\x01\xba", "mpeg ps"),
    (b"\x00\x00\x01\xb3", "mpeg video"),
    (b"\x47", "mpeg-ts"),
    # Audio
    (b"\xff\xfb", "mp3"),
    (b"\xff\xf3", "mp3"),
    (b"\xff\xf2", "mp3"),
    (b"ID3", "mp3 (id3v2)"),
    (b"fLaC\x00\x00\x00\x22", "flac"),
    (b"OggS", "ogg"),
    (b"MThd", "midi"),
    (b".RMF", "realmedia"),
    (b"\x00\x00\x00\x20ftypM4A", "m4a"),
    # Documents
    (b"\xd0\xcf\x11\xe0\xa1\xb1\x1a\xe1", "ms office (ole2)"),
    (b"%PDF-", "pdf"),
    (b"{\\rtf1", "rtf"),
    (b"\xef\xbb\xbf", "utf-8 bom"),
    (b"\xff\xfe", "utf-16 le bom"),
    (b"\xfe\xff", "utf-16 be bom"),
    (b"\x00\x00\xfe\xff", "utf-32 be bom"),
    (b"\xff\xfe\x00\x00", "utf-32 le bom"),
    # Executables
    (b"MZ", "pe/exe"),
    (b"\x7fELF", "elf"),
    (b"\xfe\xed\xfa\xce", "mach-o 32"),
    (b"\xfe\xed\xfa\xcf", "mach-o 64"),
    (b"\xce\xfa\xed\xfe", "mach-o 32 (rev)"),
    (b"\xcf\xfa\xed\xfe", "mach-o 64 (rev)"),
    (b"\xca\xfe\xba\xbe", "java class"),
    # Databases
    (b"SQLite f", "sqlite"),
    (b"\x00\x01\x00\x00Stan", "access"),
    # Fonts
    (b"\x00\x01\x00\x00\x00", "ttf"),
    (b"OTTO\x00", "otf"),
    (b"wOFF", "woff"),
    (b"wOF2", "woff2"),
    # CAD
    (b"AC10", "dwg"),
    # Virtual disks
    (b"VMDK", "vmdk"),
    (b"QFI\xfb\x00\x00\x00", "qcow2"),
    (b"conectix", "vhd"),
    # Apple
    (b"book\x00\x00\x00\x00", "apple alias"),
    (b"bplist00", "binary plist"),
    (b"\x78\x01\x73\x0d\x62\x62\x60", "dmg"),
    # Scientific / 3D
    (b"\x89HDF\r\n\x1a\n", "hdf5"),
    (b"\x89HDF", "hdf4/hdf5"),
    (b"BLENDER", "blender"),
    (b"CDF\x01", "netcdf"),
    (b"CDF\x02", "netcdf v2"),
    # Disk images
    (b"ER\x02\x00\x00\x00", "toast"),
    (b"\x8bER\x02\x00\x00\x00", "toast"),
    # Backups
    (b"BACKMIDB", "backupbuddy"),
    (b"SPFI", "sphinx backup"),
    # Web
    (b"\x1f\x8b", "gzip (web)"),
    (b"BR", "brotli"),
    # Misc
    (b"\xf9\xbe\xb4\xd9", "bitcoin block"),
    (b"NES\x1a", "nes rom"),
    (b"dex\n035\x00", "android dex"),
    (b"RegEdit", "windows registry"),
    (b"CWS", "swf (zlib)"),
    (b"FWS", "swf"),
    (b"ZWS", "swf (lzma)"),
)


def match_signature(data: bytes) -> Optional[str]:
    """Return the label of the first known magic prefix of data, if any."""
    for magic, label in SIGNATURES:
        if data[:len(magic)] == magic:
            return label
    return None


def calculate_entropy(data: bytes) -> float:
    """Shannon entropy of data in bits per byte (0.0 for empty input)."""
    if not data:
        return 0.0
    length = len(data)
    entropy = 0.0
    for count in Counter(data).values():
        prob = count / length
        entropy -= prob * math.log2(prob)
    return entropy


def is_already_compressed(data: bytes) -> bool:
    """Known compressed/media signature, or near-random first 4 KiB."""
    if len(data) < 4:
        return False
    label = match_signature(data)
    if label is not None:
        logger.debug("signature match: %s", label)
        return True
    return calculate_entropy(data[:ENTROPY_SAMPLE_SIZE]) > ENTROPY_THRESHOLD


def is_highly_repetitive(sample: bytes) -> bool:
    """One byte value makes up more than 70% of the first 100 bytes."""
    if len(sample) < REPETITION_WINDOW:
        return False
    _, top = Counter(sample[:REPETITION_WINDOW]).most_common(1)[0]
    return top / REPETITION_WINDOW > REPETITION_THRESHOLD


def is_binary(sample: bytes) -> bool:
    """More than two zero bytes among the first 50."""
    if len(sample) < BINARY_WINDOW:
        return False
    return sample[:BINARY_WINDOW].count(0) > BINARY_NULL_LIMIT


def select_method(data: bytes, raw: Optional[bytes] = None) -> CompressionMethod:
    """
    Pick a concrete method for data.

    Args:
        data: Buffer the codec will see (after any pre-filter)
        raw: Input before pre-filtering; its prefix is matched against
            SIGNATURES since filtering hides magic numbers

    Returns:
        LZ4, XZ, ZSTD or HYBRID
    """
    if len(data) < SMALL_INPUT_THRESHOLD:
        return FAST_METHOD
    if raw is not None and len(raw) >= 4 and match_signature(raw) is not None:
        return FAST_METHOD
    if is_already_compressed(data):
        return FAST_METHOD

    sample = data[:SELECTION_SAMPLE_SIZE]
    if is_highly_repetitive(sample):
        return MAX_RATIO_METHOD
    if is_binary(sample):
        return HIGH_RATIO_METHOD
    return CompressionMethod.HYBRID


def estimate_compression_ratio(data: bytes) -> float:
    """
    Rough percentage saving predicted from entropy, without compressing.

    Returns:
        0.0 for empty input, up to 80.0 for constant data
    """
    if not data:
        return 0.0
    return (8.0 - calculate_entropy(data)) / 8.0 * 80.0
