"""Archive writer adapters."""

from __future__ import annotations

import gzip
import io
import logging
import os
import shutil
import tarfile
import tempfile
import zipfile
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path, PurePosixPath

from depassembly.app.ports import ArchiveWriterPort, PlacementEntry
from depassembly.errors import ArchiveWriteError
from depassembly.model import ArchiveFormat
from depassembly.utils.patterns import path_selected

logger = logging.getLogger(__name__)

# Fixed timestamp so identical inputs produce byte-identical archives.
_ZIP_EPOCH = (1980, 1, 1, 0, 0, 0)
_TAR_EPOCH = 315532800


@dataclass(slots=True)
class StagedEntry:
    """A file waiting to be written: a plain file or a member of another archive."""

    source: Path
    mode: int
    member: str | None = None


def _join(destination: str, relative: str) -> str:
    destination = destination.strip("/")
    return f"{destination}/{relative}" if destination else relative


def _safe_member(name: str) -> bool:
    path = PurePosixPath(name.replace("\\", "/"))
    return not path.is_absolute() and ".." not in path.parts


class StagingArchiveWriter(ArchiveWriterPort):
    """Stage entries in submission order and materialize them on :meth:`write`.

    A later entry at an existing destination replaces the earlier one and
    moves to the end of the submission order.
    """

    def __init__(self, *, default_file_mode: int = 0o644, default_directory_mode: int = 0o755) -> None:
        self.default_file_mode = default_file_mode
        self.default_directory_mode = default_directory_mode
        self._entries: dict[str, StagedEntry] = {}
        self._directories: dict[str, int] = {}

    @property
    def destinations(self) -> list[str]:
        return list(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def add_file(self, source: Path, destination: str, mode: int | None = None) -> None:
        source = Path(source)
        if not source.exists():
            raise ArchiveWriteError(f"Source does not exist: {source}", destination=destination)
        file_mode = self.default_file_mode if mode is None else mode

        if source.is_dir():
            for path in sorted(source.rglob("*")):
                if path.is_file():
                    relative = path.relative_to(source).as_posix()
                    self._stage(_join(destination, relative), StagedEntry(path, file_mode))
            return

        self._stage(destination, StagedEntry(source, file_mode))

    def add_directory(
        self,
        source: Path,
        destination: str,
        includes: Sequence[str] = (),
        excludes: Sequence[str] = (),
        mode: int | None = None,
        directory_mode: int | None = None,
    ) -> None:
        source = Path(source)
        file_mode = self.default_file_mode if mode is None else mode
        if destination.strip("/"):
            self._register_directory(destination.strip("/"), directory_mode)

        if source.is_dir():
            for path in sorted(source.rglob("*")):
                if not path.is_file():
                    continue
                relative = path.relative_to(source).as_posix()
                if path_selected(relative, includes, excludes):
                    self._stage(_join(destination, relative), StagedEntry(path, file_mode), directory_mode)
        elif source.is_file() and zipfile.is_zipfile(source):
            self._stage_zip_members(source, destination, includes, excludes, file_mode, directory_mode)
        elif source.is_file() and tarfile.is_tarfile(source):
            self._stage_tar_members(source, destination, includes, excludes, file_mode, directory_mode)
        else:
            raise ArchiveWriteError(
                f"Cannot unpack {source}: not a directory or a zip/tar archive",
                destination=destination,
            )

    def _stage_zip_members(
        self,
        source: Path,
        destination: str,
        includes: Sequence[str],
        excludes: Sequence[str],
        file_mode: int,
        directory_mode: int | None,
    ) -> None:
        try:
            with zipfile.ZipFile(source) as archive:
                names = [info.filename for info in archive.infolist() if not info.is_dir()]
        except (OSError, zipfile.BadZipFile) as exc:
            raise ArchiveWriteError(f"Cannot read archive {source}: {exc}", destination=destination) from exc
        self._stage_members(source, names, destination, includes, excludes, file_mode, directory_mode)

    def _stage_tar_members(
        self,
        source: Path,
        destination: str,
        includes: Sequence[str],
        excludes: Sequence[str],
        file_mode: int,
        directory_mode: int | None,
    ) -> None:
        try:
            with tarfile.open(source) as archive:
                names = [member.name for member in archive.getmembers() if member.isfile()]
        except (OSError, tarfile.TarError) as exc:
            raise ArchiveWriteError(f"Cannot read archive {source}: {exc}", destination=destination) from exc
        self._stage_members(source, names, destination, includes, excludes, file_mode, directory_mode)

    def _stage_members(
        self,
        source: Path,
        names: Sequence[str],
        destination: str,
        includes: Sequence[str],
        excludes: Sequence[str],
        file_mode: int,
        directory_mode: int | None,
    ) -> None:
        for name in names:
            if not _safe_member(name):
                logger.warning("Skipping unsafe archive member %s in %s", name, source)
                continue
            if path_selected(name, includes, excludes):
                self._stage(
                    _join(destination, name),
                    StagedEntry(source, file_mode, member=name),
                    directory_mode,
                )

    def _stage(self, destination: str, entry: StagedEntry, directory_mode: int | None = None) -> None:
        destination = destination.replace("\\", "/").lstrip("/")
        if destination in self._entries:
            logger.debug("Replacing staged entry %s", destination)
            del self._entries[destination]
        self._entries[destination] = entry

        parent = PurePosixPath(destination).parent
        while str(parent) not in ("", "."):
            self._register_directory(str(parent), directory_mode)
            parent = parent.parent

    def _register_directory(self, path: str, directory_mode: int | None) -> None:
        if directory_mode is not None:
            self._directories[path] = directory_mode
        else:
            self._directories.setdefault(path, self.default_directory_mode)

    def _read(self, destination: str, entry: StagedEntry) -> bytes:
        try:
            if entry.member is None:
                return entry.source.read_bytes()
            if zipfile.is_zipfile(entry.source):
                with zipfile.ZipFile(entry.source) as archive:
                    return archive.read(entry.member)
            with tarfile.open(entry.source) as archive:
                handle = archive.extractfile(entry.member)
                if handle is None:
                    raise ArchiveWriteError(
                        f"Archive member {entry.member} in {entry.source} is not a regular file",
                        destination=destination,
                    )
                with handle:
                    return handle.read()
        except (OSError, KeyError, zipfile.BadZipFile, tarfile.TarError) as exc:
            raise ArchiveWriteError(
                f"Cannot read {entry.source}{'!' + entry.member if entry.member else ''}: {exc}",
                destination=destination,
            ) from exc

    def write(self, destination: Path, format: ArchiveFormat = "zip") -> Path:
        """Materialize every staged entry at ``destination`` in ``format``.

        Output is built in a temporary sibling and moved into place only once
        every entry was written, so a failed run leaves no archive behind.
        """
        destination = Path(destination)
        if format not in ("zip", "tar", "tar.gz", "dir"):
            raise ValueError(f"Unsupported archive format '{format}'. Choose zip, tar, tar.gz or dir.")
        try:
            destination.parent.mkdir(parents=True, exist_ok=True)
            if format == "dir":
                self._write_dir(destination)
            else:
                self._write_file(destination, format)
        except OSError as exc:
            raise ArchiveWriteError(
                f"Cannot write {format} archive {destination}: {exc}",
                destination=str(destination),
            ) from exc
        logger.info("Wrote %d entries to %s (%s)", len(self._entries), destination, format)
        return destination

    def _write_file(self, destination: Path, format: ArchiveFormat) -> None:
        fd, tmp_name = tempfile.mkstemp(
            dir=str(destination.parent), prefix=f".{destination.name}.", suffix=".tmp"
        )
        os.close(fd)
        tmp_path: Path | None = Path(tmp_name)
        try:
            if format == "zip":
                self._write_zip(tmp_path)
            else:
                self._write_tar(tmp_path, compressed=format == "tar.gz", archive_name=destination.name)
            os.replace(tmp_path, destination)
            tmp_path = None
        finally:
            if tmp_path is not None:
                tmp_path.unlink(missing_ok=True)

    def _write_zip(self, path: Path) -> None:
        with zipfile.ZipFile(path, "w", compression=zipfile.ZIP_DEFLATED) as archive:
            for directory in sorted(self._directories):
                info = zipfile.ZipInfo(f"{directory}/", date_time=_ZIP_EPOCH)
                info.external_attr = ((0o040000 | self._directories[directory]) << 16) | 0x10
                archive.writestr(info, b"")
            for name, entry in self._entries.items():
                info = zipfile.ZipInfo(name, date_time=_ZIP_EPOCH)
                info.compress_type = zipfile.ZIP_DEFLATED
                info.external_attr = (0o100000 | entry.mode) << 16
                archive.writestr(info, self._read(name, entry))

    def _write_tar(self, path: Path, *, compressed: bool, archive_name: str) -> None:
        if not compressed:
            with tarfile.open(path, "w") as archive:
                self._fill_tar(archive)
            return
        # The gzip header records the file name; keep the final one, not the temporary one.
        with open(path, "wb") as raw, gzip.GzipFile(
            filename=archive_name, mode="wb", fileobj=raw, mtime=_TAR_EPOCH
        ) as compressed_stream, tarfile.open(fileobj=compressed_stream, mode="w") as archive:
            self._fill_tar(archive)

    def _fill_tar(self, archive: tarfile.TarFile) -> None:
        for directory in sorted(self._directories):
            info = tarfile.TarInfo(directory)
            info.type = tarfile.DIRTYPE
            info.mode = self._directories[directory]
            info.mtime = _TAR_EPOCH
            archive.addfile(info)
        for name, entry in self._entries.items():
            data = self._read(name, entry)
            info = tarfile.TarInfo(name)
            info.size = len(data)
            info.mode = entry.mode
            info.mtime = _TAR_EPOCH
            archive.addfile(info, io.BytesIO(data))

    def _write_dir(self, destination: Path) -> None:
        staging: Path | None = Path(
            tempfile.mkdtemp(dir=str(destination.parent), prefix=f".{destination.name}.", suffix=".tmp")
        )
        try:
            self._populate_dir(staging)
            if destination.exists():
                # Merge into a directory the caller already owns.
                shutil.copytree(staging, destination, dirs_exist_ok=True)
            else:
                os.chmod(staging, self.default_directory_mode)
                os.replace(staging, destination)
                staging = None
        finally:
            if staging is not None:
                shutil.rmtree(staging, ignore_errors=True)

    def _populate_dir(self, root: Path) -> None:
        for path in sorted(self._directories):
            (root / path).mkdir(parents=True, exist_ok=True)
        for name, entry in self._entries.items():
            target = root / name
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_bytes(self._read(name, entry))
            try:
                os.chmod(target, entry.mode)
            except PermissionError:
                # Windows may not support POSIX chmod semantics; ignore best-effort failure.
                pass
        for path in sorted(self._directories, reverse=True):
            try:
                os.chmod(root / path, self._directories[path])
            except PermissionError:
                pass


class RecordingArchiveWriter(ArchiveWriterPort):
    """Archive writer that records placements without touching the filesystem."""

    def __init__(self) -> None:
        self.entries: list[PlacementEntry] = []

    @property
    def destinations(self) -> list[str]:
        seen: dict[str, None] = {}
        for entry in self.entries:
            seen.pop(entry.destination, None)
            seen[entry.destination] = None
        return list(seen)

    def add_file(self, source: Path, destination: str, mode: int | None = None) -> None:
        self.entries.append(
            PlacementEntry(source=Path(source), destination=destination, mode=mode)
        )

    def add_directory(
        self,
        source: Path,
        destination: str,
        includes: Sequence[str] = (),
        excludes: Sequence[str] = (),
        mode: int | None = None,
        directory_mode: int | None = None,
    ) -> None:
        self.entries.append(
            PlacementEntry(
                source=Path(source),
                destination=destination,
                mode=mode,
                directory_mode=directory_mode,
                unpack=True,
                includes=tuple(includes),
                excludes=tuple(excludes),
            )
        )
