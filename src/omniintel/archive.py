"""In-memory ZIP archive assembly: root folder -> category folders -> files."""

from __future__ import annotations

import io
import logging
import zipfile
from dataclasses import dataclass, field

from omniintel.errors import ArchiveInitError, SerializationError
from omniintel.sanitize import sanitize_name

logger = logging.getLogger(__name__)


@dataclass
class RootHandle:
    label: str

    @property
    def path(self) -> str:
        return self.label


@dataclass
class FolderHandle:
    root: RootHandle
    name: str
    _used_names: dict[str, int] = field(default_factory=dict, repr=False)

    @property
    def path(self) -> str:
        return f"{self.root.path}/{self.name}"

    def reserve_name(self, base: str) -> str:
        """Return ``base`` on first use, then ``base-2``, ``base-3``, ... in this folder.

        Names are compared case-insensitively so the files stay distinct when
        the archive is extracted on a case-insensitive filesystem.
        """
        key = base.casefold()
        count = self._used_names.get(key, 0) + 1
        self._used_names[key] = count
        if count == 1:
            return base
        candidate = f"{base}-{count}"
        while candidate.casefold() in self._used_names:
            count += 1
            candidate = f"{base}-{count}"
        self._used_names[key] = count
        self._used_names[candidate.casefold()] = 1
        return candidate


def prepend_cover_image(markdown: str, image_file_name: str) -> str:
    """Put a relative image reference at the top of the markdown."""
    return f"![Cover Image]({image_file_name})\n\n{markdown}"


class ArchiveBuilder:
    """Collects entries for a single archive build and serializes them once.

    Category folders are looked up by sanitized name within this builder only.
    """

    def __init__(self) -> None:
        self._root: RootHandle | None = None
        self._folders: dict[str, FolderHandle] = {}
        self._entries: dict[str, bytes] = {}

    @property
    def entries(self) -> dict[str, bytes]:
        return dict(self._entries)

    @property
    def root(self) -> RootHandle | None:
        return self._root

    def create_root(self, label: str) -> RootHandle:
        if self._root is not None:
            raise ArchiveInitError(f"Archive root already created: {self._root.label}")
        if not str(label or "").strip():
            raise ArchiveInitError("Archive root label is empty")
        self._root = RootHandle(label=sanitize_name(label))
        return self._root

    def add_category_folder(self, root: RootHandle, category_name: str) -> FolderHandle:
        self._check_root(root)
        name = sanitize_name(category_name)
        folder = self._folders.get(name)
        if folder is None:
            folder = FolderHandle(root=root, name=name)
            self._folders[name] = folder
        return folder

    def add_text_file(self, folder: FolderHandle, file_name: str, content: str) -> None:
        self._put(folder, file_name, content.encode("utf-8"))

    def add_binary_file(self, folder: FolderHandle, file_name: str, data: bytes) -> None:
        self._put(folder, file_name, bytes(data))

    def serialize(self) -> bytes:
        if self._root is None or not self._entries:
            raise SerializationError("Archive has no entries")

        buffer = io.BytesIO()
        try:
            with zipfile.ZipFile(buffer, "w", compression=zipfile.ZIP_DEFLATED) as zf:
                zf.writestr(f"{self._root.path}/", b"")
                for folder in self._folders.values():
                    zf.writestr(f"{folder.path}/", b"")
                for path, data in self._entries.items():
                    zf.writestr(path, data)
        except (OSError, ValueError, zipfile.LargeZipFile) as exc:
            raise SerializationError("Failed to compress archive") from exc

        payload = buffer.getvalue()
        logger.info(
            "Serialized archive %s: %d files, %d bytes",
            self._root.label,
            len(self._entries),
            len(payload),
        )
        return payload

    def _put(self, folder: FolderHandle, file_name: str, data: bytes) -> None:
        self._check_root(folder.root)
        if self._folders.get(folder.name) is not folder:
            raise ValueError(f"Folder {folder.name!r} does not belong to this archive")
        path = f"{folder.path}/{file_name}"
        if path in self._entries:
            logger.warning("Overwriting archive entry %s", path)
        self._entries[path] = data

    def _check_root(self, root: RootHandle) -> None:
        if root is not self._root:
            raise ValueError("Root handle does not belong to this archive")
