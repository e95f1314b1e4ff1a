"""Pluggable byte-stream compressors and a registry of them by name."""

from __future__ import annotations

import abc
import gzip
import io
import shutil
from typing import BinaryIO

import zstandard

RAW_COMPACTOR_NAME = "raw"
GZIP_COMPACTOR_NAME = "gzip"
ZSTD_COMPACTOR_NAME = "zstd"


class Compactor(abc.ABC):
    """Compresses and decompresses binary streams and byte strings."""

    @abc.abstractmethod
    def compress(self, source: BinaryIO, target: BinaryIO) -> None:
        """Read everything from ``source`` and write it compressed to ``target``."""

    @abc.abstractmethod
    def uncompress(self, source: BinaryIO, target: BinaryIO) -> None:
        """Read compressed data from ``source`` and write the plain data to ``target``."""

    def compress_bytes(self, data: bytes) -> bytes:
        """Compress ``data`` and return the result."""
        out = io.BytesIO()
        self.compress(io.BytesIO(data), out)
        return out.getvalue()

    def uncompress_bytes(self, data: bytes) -> bytes:
        """Decompress ``data`` and return the result."""
        out = io.BytesIO()
        self.uncompress(io.BytesIO(data), out)
        return out.getvalue()


class RawCompactor(Compactor):
    """Passes data through unchanged."""

    def compress(self, source: BinaryIO, target: BinaryIO) -> None:
        shutil.copyfileobj(source, target)

    def uncompress(self, source: BinaryIO, target: BinaryIO) -> None:
        shutil.copyfileobj(source, target)

    def compress_bytes(self, data: bytes) -> bytes:
        return data

    def uncompress_bytes(self, data: bytes) -> bytes:
        return data


class GzipCompactor(Compactor):
    """Gzip compression."""

    def compress(self, source: BinaryIO, target: BinaryIO) -> None:
        with gzip.GzipFile(fileobj=target, mode="wb") as gz:
            shutil.copyfileobj(source, gz)

    def uncompress(self, source: BinaryIO, target: BinaryIO) -> None:
        with gzip.GzipFile(fileobj=source, mode="rb") as gz:
            shutil.copyfileobj(gz, target)


class ZStdCompactor(Compactor):
    """Zstandard compression at the fastest level."""

    _LEVEL = 1

    def compress(self, source: BinaryIO, target: BinaryIO) -> None:
        zstandard.ZstdCompressor(level=self._LEVEL).copy_stream(source, target)

    def uncompress(self, source: BinaryIO, target: BinaryIO) -> None:
        zstandard.ZstdDecompressor().copy_stream(source, target)


_compactors: dict[str, Compactor] = {
    RAW_COMPACTOR_NAME: RawCompactor(),
    ZSTD_COMPACTOR_NAME: ZStdCompactor(),
    GZIP_COMPACTOR_NAME: GzipCompactor(),
}


def register_compactor(name: str, compactor: Compactor, replace: bool = False) -> None:
    """Register ``compactor`` under ``name``; a duplicate name is an error unless ``replace``."""
    if not replace and name in _compactors:
        raise ValueError(f"compactor {name!r} is already registered")
    _compactors[name] = compactor


def get_compactor(name: str) -> Compactor:
    """Return the compactor registered as ``name``; raise KeyError if there is none."""
    try:
        return _compactors[name]
    except KeyError:
        raise KeyError(f"undefined compactor name: {name!r}") from None


def try_get_compactor(name: str) -> Compactor | None:
    """Return the compactor registered as ``name``, or None."""
    return _compactors.get(name)