"""Note content stored in {cache_dir}/{name}.txt, one file per note.

Creation is exclusive: the content is written to a temporary file and
published with os.link, which fails if the target already exists. Updates
replace the file atomically with os.replace. Mutations of one name are
serialized through a keyed lock table; this only covers a single process,
across processes create stays exclusive and update/delete are last-wins.
"""

import logging
import os
import tempfile
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

from notes_service.exceptions import (
    InvalidNoteNameError,
    NoteAlreadyExistsError,
    NoteNotFoundError,
    StorageUnavailableError,
)
from notes_service.schemas.note import NoteItem

logger = logging.getLogger(__name__)

NOTE_SUFFIX = ".txt"
TEMP_SUFFIX = ".tmp"
MAX_NAME_BYTES = 255 - len(NOTE_SUFFIX)
_FORBIDDEN_CHARS = ("/", "\\", "\x00")


def _name_problem(name: str) -> str | None:
    if not name:
        return "name must not be empty"
    if name in (".", ".."):
        return "name must not be a relative path segment"
    for ch in _FORBIDDEN_CHARS:
        if ch in name:
            return f"name must not contain {ch!r}"
    if len(name.encode("utf-8")) > MAX_NAME_BYTES:
        return f"name must be at most {MAX_NAME_BYTES} bytes"
    return None


def validate_name(name: str) -> str:
    """Return `name` unchanged if it is usable as a storage key, else raise."""
    reason = _name_problem(name)
    if reason is not None:
        logger.warning("Rejected note name", extra={"note": name, "reason": reason})
        raise InvalidNoteNameError(name, reason)
    return name


def name_from_filename(filename: str) -> str | None:
    """Recover a note name from a stored file name; None if it is not a note."""
    if not filename.endswith(NOTE_SUFFIX):
        return None
    name = filename[: -len(NOTE_SUFFIX)]
    if _name_problem(name) is not None:
        return None
    return name


class KeyedLocks:
    """Per-key mutual exclusion; locks are dropped once nobody holds them."""

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._locks: dict[str, list] = {}

    @contextmanager
    def hold(self, key: str) -> Iterator[None]:
        with self._guard:
            entry = self._locks.setdefault(key, [threading.Lock(), 0])
            entry[1] += 1
        try:
            with entry[0]:
                yield
        finally:
            with self._guard:
                entry[1] -= 1
                if entry[1] == 0:
                    del self._locks[key]

    def __len__(self) -> int:
        with self._guard:
            return len(self._locks)


class NoteRepository:
    """Name-addressed text notes in a flat directory."""

    def __init__(self, root: Path | str) -> None:
        self.root = Path(root)
        self._locks = KeyedLocks()

    def ensure_root(self) -> Path:
        self.root.mkdir(parents=True, exist_ok=True)
        return self.root

    def note_path(self, name: str) -> Path:
        return self.root / f"{validate_name(name)}{NOTE_SUFFIX}"

    def _write_temp(self, content: str) -> Path:
        fd, tmp = tempfile.mkstemp(dir=self.root, prefix=".", suffix=TEMP_SUFFIX)
        tmp_path = Path(tmp)
        try:
            with os.fdopen(fd, "w", encoding="utf-8", newline="") as fh:
                fh.write(content)
                fh.flush()
                os.fsync(fh.fileno())
        except BaseException:
            tmp_path.unlink(missing_ok=True)
            raise
        return tmp_path

    @staticmethod
    def _read_path(path: Path) -> str:
        with open(path, encoding="utf-8", newline="") as fh:
            return fh.read()

    def create(self, name: str, content: str) -> None:
        path = self.note_path(name)
        with self._locks.hold(name):
            try:
                tmp_path = self._write_temp(content)
            except OSError as e:
                logger.exception("Create failed", extra={"note": name})
                raise StorageUnavailableError(
                    "Could not write note", operation="create", path=str(path), original_error=e
                ) from e
            try:
                os.link(tmp_path, path)
            except FileExistsError:
                raise NoteAlreadyExistsError(name) from None
            except OSError as e:
                logger.exception("Create failed", extra={"note": name})
                raise StorageUnavailableError(
                    "Could not write note", operation="create", path=str(path), original_error=e
                ) from e
            finally:
                tmp_path.unlink(missing_ok=True)
        logger.info("Note created", extra={"note": name, "size": len(content)})

    def read(self, name: str) -> str:
        path = self.note_path(name)
        try:
            return self._read_path(path)
        except FileNotFoundError:
            raise NoteNotFoundError(name) from None
        except UnicodeDecodeError as e:
            raise StorageUnavailableError(
                "Stored note is not valid UTF-8", operation="read", path=str(path), original_error=e
            ) from e
        except OSError as e:
            logger.exception("Read failed", extra={"note": name})
            raise StorageUnavailableError(
                "Could not read note", operation="read", path=str(path), original_error=e
            ) from e

    def update(self, name: str, content: str) -> None:
        path = self.note_path(name)
        with self._locks.hold(name):
            if not path.is_file():
                raise NoteNotFoundError(name)
            try:
                tmp_path = self._write_temp(content)
                try:
                    os.replace(tmp_path, path)
                finally:
                    tmp_path.unlink(missing_ok=True)
            except OSError as e:
                logger.exception("Update failed", extra={"note": name})
                raise StorageUnavailableError(
                    "Could not write note", operation="update", path=str(path), original_error=e
                ) from e
        logger.info("Note updated", extra={"note": name, "size": len(content)})

    def delete(self, name: str) -> None:
        path = self.note_path(name)
        with self._locks.hold(name):
            try:
                path.unlink()
            except FileNotFoundError:
                raise NoteNotFoundError(name) from None
            except OSError as e:
                logger.exception("Delete failed", extra={"note": name})
                raise StorageUnavailableError(
                    "Could not delete note", operation="delete", path=str(path), original_error=e
                ) from e
        logger.info("Note deleted", extra={"note": name})

    def list_notes(self) -> list[NoteItem]:
        """Snapshot of all notes; entries removed mid-listing are skipped."""
        try:
            with os.scandir(self.root) as it:
                entries = [(e.name, Path(e.path)) for e in it if e.is_file()]
        except OSError as e:
            logger.exception("List failed", extra={"root": str(self.root)})
            raise StorageUnavailableError(
                "Error reading notes", operation="list", path=str(self.root), original_error=e
            ) from e

        notes: list[NoteItem] = []
        for filename, path in entries:
            name = name_from_filename(filename)
            if name is None:
                continue
            try:
                text = self._read_path(path)
            except FileNotFoundError:
                logger.debug("Note vanished during listing", extra={"note": name})
                continue
            except (OSError, UnicodeDecodeError) as e:
                raise StorageUnavailableError(
                    "Error reading notes", operation="list", path=str(path), original_error=e
                ) from e
            notes.append(NoteItem(name=name, text=text))
        notes.sort(key=lambda n: n.name)
        return notes
