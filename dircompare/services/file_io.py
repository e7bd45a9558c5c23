"""
File I/O service for reading files safely.

Handles:
- Byte-exact file comparison
- Binary content detection
- Encoding detection
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import chardet

from dircompare.core.errors import BinaryContentError, ContentReadError


@dataclass
class TextContent:
    """Decoded text content of a file."""
    text: str
    encoding: str
    bom: bool
    size: int


class FileIOService:
    """Service for safe file reading and comparison."""

    # Binary file signatures (magic bytes)
    BINARY_SIGNATURES = [
        b'\x89PNG',        # PNG
        b'\xff\xd8\xff',   # JPEG
        b'GIF8',           # GIF
        b'PK\x03\x04',     # ZIP
        b'\x1f\x8b',       # GZIP
        b'%PDF',           # PDF
        b'\x7fELF',        # ELF
    ]

    # Byte order marks, checked longest first
    BOMS = [
        (b'\xef\xbb\xbf', 'utf-8-sig'),
        (b'\xff\xfe', 'utf-16'),
        (b'\xfe\xff', 'utf-16'),
    ]

    def __init__(
        self,
        default_encoding: str = 'utf-8',
        fallback_encoding: str = 'latin-1',
        binary_check_size: int = 8192,
        min_confidence: float = 0.7
    ):
        self.default_encoding = default_encoding
        self.fallback_encoding = fallback_encoding
        self.binary_check_size = binary_check_size
        self.min_confidence = min_confidence

    def read_text(
        self,
        path: Path | str,
        max_size: Optional[int] = None
    ) -> TextContent:
        """
        Read a text file with automatic encoding detection.

        Args:
            path: Path to the file
            max_size: Refuse files larger than this many bytes

        Returns:
            TextContent with the decoded text

        Raises:
            BinaryContentError: If the content looks binary
            ContentReadError: If the file cannot be read
        """
        path = Path(path)

        try:
            raw = path.read_bytes()
        except OSError as e:
            raise ContentReadError(path, "Cannot read file", e) from e

        if max_size is not None and len(raw) > max_size:
            raise ContentReadError(
                path,
                f"File too large for text comparison ({len(raw)} bytes, limit {max_size})"
            )

        bom_encoding = self._detect_bom(raw)
        if bom_encoding is None and self.is_binary(raw[:self.binary_check_size]):
            raise BinaryContentError(path, "File appears to be binary")

        encoding = bom_encoding or self._detect_encoding(raw)

        try:
            text = raw.decode(encoding)
        except (UnicodeDecodeError, LookupError):
            logging.debug(f"FileIOService - {encoding} failed for {path}, using {self.fallback_encoding}")
            text = raw.decode(self.fallback_encoding, errors='replace')
            encoding = self.fallback_encoding

        return TextContent(text=text, encoding=encoding, bom=bom_encoding is not None, size=len(raw))

    def files_equal(
        self,
        path1: Path | str,
        path2: Path | str,
        chunk_size: int = 65536
    ) -> bool:
        """
        Compare two files byte-by-byte.

        Raises:
            OSError: If either file cannot be read
        """
        path1, path2 = Path(path1), Path(path2)

        # Quick size check
        if path1.stat().st_size != path2.stat().st_size:
            return False

        with open(path1, 'rb') as f1, open(path2, 'rb') as f2:
            while True:
                chunk1 = f1.read(chunk_size)
                chunk2 = f2.read(chunk_size)

                if chunk1 != chunk2:
                    return False

                if not chunk1:  # EOF
                    return True

    def is_binary(self, chunk: bytes) -> bool:
        """Check if a leading chunk of content is binary."""
        if not chunk:
            return False

        for sig in self.BINARY_SIGNATURES:
            if chunk.startswith(sig):
                return True

        # Null bytes never appear in text without a UTF-16/32 BOM
        if b'\x00' in chunk:
            return True

        # Check ratio of non-text control bytes
        non_text = sum(1 for b in chunk if b < 9 or (13 < b < 32 and b != 27))
        return non_text / len(chunk) > 0.3

    def _detect_bom(self, content: bytes) -> Optional[str]:
        for bom, encoding in self.BOMS:
            if content.startswith(bom):
                return encoding
        return None

    def _detect_encoding(self, content: bytes) -> str:
        """Detect encoding of content."""
        if not content:
            return self.default_encoding

        # UTF-8 is the common case and chardet is unreliable on short input
        try:
            content.decode('utf-8')
            return 'utf-8'
        except UnicodeDecodeError:
            pass

        result = chardet.detect(content)

        if result['confidence'] > self.min_confidence and result['encoding']:
            return result['encoding'].lower()

        return self.default_encoding
