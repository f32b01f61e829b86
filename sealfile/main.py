"""
SealFile - Main Entry Point
Prints the available modules and compression methods.
"""

from .compression.file_reducer import FileReducer


def main():
    """Main entry point for SealFile."""
    print("=" * 50)
    print("Welcome to SealFile")
    print("=" * 50)
    print("\nAvailable modules:")
    print("  - Container Framing (encrypted and compressed layouts)")
    print("  - Key-Deriving Encryptor (PBKDF2 + AES-256-GCM)")
    print("  - Adaptive Compression Engine")
    print("  - File Manager (save / load / copy / re-encrypt)")
    print("  - Batch Processor")
    print("\nCompression methods:")
    for method, description in FileReducer.get_compression_info().items():
        print(f"  [{method.value}] {description}")
    print("\n")

if __name__ == "__main__":
    main()
