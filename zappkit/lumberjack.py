"""A file writer that rolls over to a new file when a size limit is reached.

The current log file always has the configured name. When a write would push it
past ``max_size`` megabytes it is renamed to ``<name>-<timestamp><ext>`` and a
fresh file is started. Old backups can be compressed with gzip and pruned by
count (``max_backups``) and by age in days (``max_age``).

Only one process should write to a given set of files.
"""

from __future__ import annotations

import gzip
import os
import re
import shutil
import stat
import sys
import tempfile
import threading
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import BinaryIO, Callable, Optional

BACKUP_TIME_FORMAT = "%Y-%m-%dT%H-%M-%S"
COMPRESS_SUFFIX = ".gz"
DEFAULT_MAX_SIZE = 100
MEGABYTE = 1024 * 1024

_TIMESTAMP_RE = re.compile(r"\d{4}-\d{2}-\d{2}T\d{2}-\d{2}-\d{2}\.\d{3}")


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _format_timestamp(when: datetime) -> str:
    return when.strftime(BACKUP_TIME_FORMAT) + f".{when.microsecond // 1000:03d}"


def _parse_timestamp(text: str) -> datetime:
    if not _TIMESTAMP_RE.fullmatch(text):
        raise ValueError(f"not a backup timestamp: {text!r}")
    parsed = datetime.strptime(text[:-4], BACKUP_TIME_FORMAT)
    return parsed.replace(microsecond=int(text[-3:]) * 1000, tzinfo=timezone.utc)


def _split_ext(base: str) -> tuple[str, str]:
    """Split a file name at its last dot: ``("server", ".log")``."""
    dot = base.rfind(".")
    if dot < 0:
        return base, ""
    return base[:dot], base[dot:]


def _backup_name(name: str, local: bool, when: datetime) -> str:
    directory = os.path.dirname(name)
    prefix, ext = _split_ext(os.path.basename(name))
    when = when.astimezone() if local else when.astimezone(timezone.utc)
    return os.path.join(directory, f"{prefix}-{_format_timestamp(when)}{ext}")


def backup_name(name: str, local: bool) -> str:
    """Backup file name for ``name`` stamped with the current time (local or UTC)."""
    return _backup_name(name, local, _utc_now())


def _chown(name: str, info: os.stat_result) -> None:
    """On Linux, create ``name`` and give it the owner recorded in ``info``."""
    if not sys.platform.startswith("linux"):
        return
    fd = os.open(name, os.O_CREAT | os.O_WRONLY | os.O_TRUNC, stat.S_IMODE(info.st_mode))
    os.close(fd)
    os.chown(name, info.st_uid, info.st_gid)


def _compress_log_file(src: str, dst: str) -> None:
    """Gzip ``src`` into ``dst`` and remove ``src`` on success."""
    try:
        source = open(src, "rb")
    except OSError as exc:
        raise OSError(f"failed to open log file: {exc}") from exc
    with source:
        try:
            info = os.stat(src)
        except OSError as exc:
            raise OSError(f"failed to stat log file: {exc}") from exc
        try:
            _chown(dst, info)
        except OSError as exc:
            raise OSError(f"failed to chown compressed log file: {exc}") from exc
        try:
            fd = os.open(dst, os.O_CREAT | os.O_TRUNC | os.O_WRONLY, stat.S_IMODE(info.st_mode))
        except OSError as exc:
            raise OSError(f"failed to open compressed log file: {exc}") from exc
        try:
            with os.fdopen(fd, "wb") as target, gzip.GzipFile(fileobj=target, mode="wb") as gz:
                shutil.copyfileobj(source, gz)
        except OSError as exc:
            try:
                os.remove(dst)
            except OSError:
                pass
            raise OSError(f"failed to compress log file: {exc}") from exc
    try:
        os.remove(src)
    except OSError as exc:
        try:
            os.remove(dst)
        except OSError:
            pass
        raise OSError(f"failed to compress log file: {exc}") from exc


@dataclass(frozen=True)
class _LogInfo:
    timestamp: datetime
    name: str


@dataclass(eq=False)
class RollingFile:
    """A writable file that rotates itself by size and prunes old backups.

    ``filename`` defaults to ``<program>-lumberjack.log`` in the temp directory.
    ``max_size`` is in megabytes (100 when 0), ``max_age`` in days (0 keeps
    all), ``max_backups`` is a count (0 keeps all). ``clock`` returns the
    current time as an aware datetime.
    """

    filename: str = ""
    max_size: float = 0
    max_age: int = 0
    max_backups: int = 0
    local_time: bool = False
    compress: bool = False
    clock: Callable[[], datetime] = field(default=_utc_now, repr=False)
    _size: int = field(default=0, init=False, repr=False)
    _file: Optional[BinaryIO] = field(default=None, init=False, repr=False)
    _lock: threading.Lock = field(default_factory=threading.Lock, init=False, repr=False)

    def __enter__(self) -> RollingFile:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def write(self, data: bytes) -> int:
        """Write ``data``, rotating first if it would overflow the current file.

        Raises ValueError if ``data`` alone is larger than the size limit.
        """
        with self._lock:
            length = len(data)
            limit = self._max()
            if length > limit:
                raise ValueError(f"write length {length} exceeds maximum file size {limit}")

            if self._file is None:
                self._open_existing_or_new(length)

            if self._size + length > limit:
                self._rotate()

            assert self._file is not None
            written = self._file.write(data) or 0
            self._size += written
            return written

    def close(self) -> None:
        """Close the current file, if open."""
        with self._lock:
            self._close()

    def rotate(self) -> None:
        """Move the current file aside now and start a new one."""
        with self._lock:
            self._rotate()

    def clean_up(self) -> None:
        """Compress and prune backups according to the configuration.

        Raises the first OSError met; the remaining work is still attempted.
        """
        if self.max_backups == 0 and self.max_age == 0 and not self.compress:
            return

        files = self._old_log_files()
        remove: list[_LogInfo] = []

        if 0 < self.max_backups < len(files):
            preserved: set[str] = set()
            remaining: list[_LogInfo] = []
            for info in files:
                base = info.name
                if base.endswith(COMPRESS_SUFFIX):
                    base = base[: -len(COMPRESS_SUFFIX)]
                preserved.add(base)
                if len(preserved) > self.max_backups:
                    remove.append(info)
                else:
                    remaining.append(info)
            files = remaining

        if self.max_age > 0:
            cutoff = self.clock() - timedelta(days=self.max_age)
            remaining = []
            for info in files:
                if info.timestamp < cutoff:
                    remove.append(info)
                else:
                    remaining.append(info)
            files = remaining

        compress = (
            [info for info in files if not info.name.endswith(COMPRESS_SUFFIX)]
            if self.compress
            else []
        )

        first_error: Optional[OSError] = None
        directory = self._dir()
        for info in remove:
            try:
                os.remove(os.path.join(directory, info.name))
            except OSError as exc:
                first_error = first_error or exc
        for info in compress:
            path = os.path.join(directory, info.name)
            try:
                _compress_log_file(path, path + COMPRESS_SUFFIX)
            except OSError as exc:
                first_error = first_error or exc
        if first_error is not None:
            raise first_error

    def _close(self) -> None:
        if self._file is None:
            return
        file, self._file = self._file, None
        file.close()

    def _rotate(self) -> None:
        self._close()
        self._open_new()
        self._mill()

    def _mill(self) -> None:
        try:
            self.clean_up()
        except OSError:
            pass

    def _open_new(self) -> None:
        try:
            os.makedirs(self._dir() or ".", 0o744, exist_ok=True)
        except OSError as exc:
            raise OSError(f"can't make directories for new logfile: {exc}") from exc

        name = self._filename()
        mode = 0o644
        try:
            info: Optional[os.stat_result] = os.stat(name)
        except OSError:
            info = None
        if info is not None:
            mode = stat.S_IMODE(info.st_mode)
            try:
                os.rename(name, _backup_name(name, self.local_time, self.clock()))
            except OSError as exc:
                raise OSError(f"can't rename log file: {exc}") from exc
            _chown(name, info)

        try:
            fd = os.open(name, os.O_CREAT | os.O_WRONLY | os.O_TRUNC, mode)
        except OSError as exc:
            raise OSError(f"can't open new logfile: {exc}") from exc
        self._file = os.fdopen(fd, "wb", buffering=0)
        self._size = 0

    def _open_existing_or_new(self, write_len: int) -> None:
        self._mill()

        name = self._filename()
        try:
            info = os.stat(name)
        except FileNotFoundError:
            self._open_new()
            return
        except OSError as exc:
            raise OSError(f"error getting log file info: {exc}") from exc

        if info.st_size + write_len >= self._max():
            self._rotate()
            return

        try:
            fd = os.open(name, os.O_APPEND | os.O_WRONLY, 0o644)
        except OSError:
            self._open_new()
            return
        self._file = os.fdopen(fd, "ab", buffering=0)
        self._size = info.st_size

    def _filename(self) -> str:
        if self.filename:
            return self.filename
        name = os.path.basename(sys.argv[0] if sys.argv else "") + "-lumberjack.log"
        return os.path.join(tempfile.gettempdir(), name)

    def _dir(self) -> str:
        return os.path.dirname(self._filename())

    def _max(self) -> int:
        if not self.max_size:
            return DEFAULT_MAX_SIZE * MEGABYTE
        return int(self.max_size * MEGABYTE)

    def _prefix_and_ext(self) -> tuple[str, str]:
        prefix, ext = _split_ext(os.path.basename(self._filename()))
        return prefix + "-", ext

    def _old_log_files(self) -> list[_LogInfo]:
        """Backups next to the current file, newest first."""
        try:
            entries = list(os.scandir(self._dir() or "."))
        except OSError as exc:
            raise OSError(f"can't read log file directory: {exc}") from exc

        prefix, ext = self._prefix_and_ext()
        found: list[_LogInfo] = []
        for entry in entries:
            if entry.is_dir():
                continue
            for suffix in (ext, ext + COMPRESS_SUFFIX):
                when = self._time_from_name(entry.name, prefix, suffix)
                if when is not None:
                    found.append(_LogInfo(when, entry.name))
                    break

        found.sort(key=lambda info: info.timestamp, reverse=True)
        return found

    @staticmethod
    def _time_from_name(filename: str, prefix: str, ext: str) -> Optional[datetime]:
        if not filename.startswith(prefix) or not filename.endswith(ext):
            return None
        stamp = filename[len(prefix) : len(filename) - len(ext)]
        try:
            return _parse_timestamp(stamp)
        except ValueError:
            return None