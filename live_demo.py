#!/usr/bin/env python
"""
SEALFILE LIVE DEMO

Walks through the file codec end to end:
- Saving and loading an encrypted, compressed file
- Adaptive compression method selection
- Tamper detection
- Pepper rotation and re-encryption
- Concurrent batch save/load
- Audit trail

Run with --pause to stop between sections.
"""

import logging
import sys
import tempfile

from sealfile.compression.analysis import calculate_entropy
from sealfile.config import SealConfig
from sealfile.exceptions import FileOperationError
from sealfile.files.file_crypto import get_container_info
from sealfile.files.file_manager import FileManager, FileOperation
from sealfile.formats.containers import CompressionMethod, decode_compressed_header


PAUSE = "--pause" in sys.argv


def print_header(title):
    """Print a formatted section header"""
    print("\n" + "═" * 70)
    print(f"  {title}")
    print("═" * 70)


def print_step(step_num, description):
    """Print a numbered step"""
    print(f"\n  [{step_num}] {description}")


def pause(message="Press ENTER to continue..."):
    """Pause for presenter to explain"""
    if PAUSE:
        print(f"\n  [PAUSE] {message}")
        input()


def run_demo(workdir):
    """Run every demo section against files under workdir."""
    config = SealConfig(encryption_key="demo-master-key-0123456789abcdef",
                        pepper="demo-pepper-v1", iterations=20_000)
    manager = FileManager(config)

    # ------------------------------------------------------------------
    print_header("PART 1: SAVE AND LOAD")
    plaintext = b"Quarterly report\n" * 500
    print_step(1, f"Saving {len(plaintext)} bytes to {workdir}/report.txt")
    secure_file = manager.save_data_as_secure_file(plaintext, workdir, "report.txt")
    result = secure_file.last_result
    print(f"      method: {result.method.name}")
    print(f"      stored: {result.compressed_size} bytes ({result.compression_rate:.1f}% saved)")

    print_step(2, "Loading it back")
    loaded = manager.load_secure_file_from_disk(workdir, "report.txt")
    print(f"      round trip ok: {loaded.data == plaintext}")
    pause()

    # ------------------------------------------------------------------
    print_header("PART 2: ADAPTIVE SELECTION")
    samples = {
        "tiny.txt": b"hello",
        "zeros.bin": b"\x00" * 10_000,
        "table.bin": bytes(range(256)) * 64,
        "prose.txt": b"the quick brown fox jumps over the lazy dog. " * 400,
    }
    for step, (name, data) in enumerate(samples.items(), start=1):
        encrypted = manager.encryptor.encrypt(data)
        container, result = manager.reducer.reduce(encrypted)
        header = decode_compressed_header(container)
        print_step(step, f"{name}: entropy {calculate_entropy(data):.2f} bits/byte, "
                         f"ciphertext packed with {header.method.name}")
    print("\n  Ciphertext looks random, so the engine picks the fast method for it.")
    container, result = manager.reducer.reduce(samples["zeros.bin"])
    print(f"  The raw zero block alone would use {result.method.name}: "
          f"{result.original_size} -> {result.compressed_size} bytes")
    pause()

    # ------------------------------------------------------------------
    print_header("PART 3: TAMPER DETECTION")
    blob = manager.encryptor.encrypt(b"signed and sealed")
    info = get_container_info(blob)
    print_step(1, f"Container salt {info['salt'][:16]}..., nonce {info['nonce']}")
    tampered = bytearray(blob)
    tampered[-1] ^= 0x01
    print_step(2, "Flipping one bit of the tag")
    try:
        manager.encryptor.decrypt(bytes(tampered))
    except ValueError as exc:
        print(f"      rejected: {exc}")
    pause()

    # ------------------------------------------------------------------
    print_header("PART 4: PEPPER ROTATION")
    print_step(1, "Rotating pepper to demo-pepper-v2")
    manager.rotate_pepper("demo-pepper-v2")
    try:
        manager.load_secure_file_from_disk(workdir, "report.txt")
    except FileOperationError as exc:
        print(f"      old file no longer opens: {exc}")
    print_step(2, "Re-encrypting with the previous pepper")
    manager.re_encrypt_file(workdir, "report.txt", previous_pepper="demo-pepper-v1")
    loaded = manager.load_secure_file_from_disk(workdir, "report.txt")
    print(f"      readable again: {loaded.data == plaintext}")
    pause()

    # ------------------------------------------------------------------
    print_header("PART 5: BATCH OPERATIONS")
    operations = [
        FileOperation(f"record {i}\n".encode() * 50, workdir, f"record_{i}.txt")
        for i in range(8)
    ]
    saved = manager.create_multiple_encrypted_files(operations, max_concurrency=3)
    print_step(1, f"Saved {sum(1 for op in saved if op.error is None)}/{len(saved)} files")

    to_load = [FileOperation(None, op.path, op.filename) for op in operations]
    to_load.append(FileOperation(None, workdir, "missing.txt"))
    loaded_ops = manager.decrypt_multiple_files(to_load)
    for op in loaded_ops[-2:]:
        status = "ok" if op.error is None else f"error: {op.error}"
        print(f"      {op.filename}: {status}")
    pause()

    # ------------------------------------------------------------------
    print_header("PART 6: AUDIT TRAIL")
    manager.event_logger.print_audit_log(last_n=10)

    print("\n  Methods available:")
    for method in CompressionMethod:
        print(f"    [{method.value}] {method.name}")


def main():
    logging.basicConfig(level=logging.WARNING,
                        format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    print("\n" + "SEALFILE - AUTHENTICATED COMPRESSED FILES".center(70))

    with tempfile.TemporaryDirectory(prefix="sealfile-demo-") as workdir:
        run_demo(workdir)


if __name__ == "__main__":
    main()
