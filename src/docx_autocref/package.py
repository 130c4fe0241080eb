"""
OOXMLPackage class for reading and writing the .docx ZIP container.

Parts are kept in memory as bytes and exposed as text, so a part that is
never set is written back exactly as it was read. Entry order and each
entry's compression method are preserved.
"""

import io
import logging
import os
import shutil
import tempfile
import zipfile
from pathlib import Path
from typing import Any, BinaryIO

from .errors import PackageError

logger = logging.getLogger(__name__)


class OOXMLPackage:
    """Manages the OOXML ZIP package structure.

    Example:
        >>> with OOXMLPackage.open("document.docx") as pkg:
        ...     doc_xml = pkg.get_part_text("word/document.xml")
        ...     pkg.set_part_text("word/document.xml", doc_xml)
        ...     pkg.save("modified.docx")
    """

    def __init__(
        self,
        entries: list[zipfile.ZipInfo],
        data: dict[str, bytes],
        source_path: Path | None = None,
    ) -> None:
        """Initialize package with already-read archive contents.

        Use the class methods `open()` or `from_bytes()` instead of
        calling this constructor directly.

        Args:
            entries: Archive entries in their original order
            data: Entry contents keyed by entry name
            source_path: Original source file path, if opened from disk
        """
        self._entries = entries
        self._data = data
        self._source_path = source_path
        self._modified: set[str] = set()

    @classmethod
    def open(cls, source: str | Path | BinaryIO) -> "OOXMLPackage":
        """Open an OOXML package from a file path or file-like object.

        Args:
            source: Path to .docx file or file-like object containing it

        Returns:
            OOXMLPackage instance with the archive contents loaded

        Raises:
            PackageError: If the source is missing or is not a valid ZIP file
        """
        source_path: Path | None = None

        if isinstance(source, str | Path):
            source_path = Path(source)
            if not source_path.exists():
                raise PackageError(f"Document not found: {source_path}")
            zip_source: Path | BinaryIO = source_path
        else:
            zip_source = source

        if not zipfile.is_zipfile(zip_source):
            raise PackageError("Source must be a valid .docx (ZIP) file")

        # Reset stream position if it was checked by is_zipfile
        if hasattr(zip_source, "seek"):
            zip_source.seek(0)

        try:
            with zipfile.ZipFile(zip_source, "r") as zip_ref:
                entries = zip_ref.infolist()
                data = {info.filename: zip_ref.read(info) for info in entries}
        except (zipfile.BadZipFile, OSError) as e:
            raise PackageError(f"Failed to read .docx file: {e}") from e

        logger.debug("Opened package with %d parts", len(entries))
        return cls(entries, data, source_path)

    @classmethod
    def from_bytes(cls, data: bytes) -> "OOXMLPackage":
        """Open an OOXML package from bytes."""
        return cls.open(io.BytesIO(data))

    @property
    def source_path(self) -> Path | None:
        """Get the original source file path, if available."""
        return self._source_path

    @property
    def part_names(self) -> list[str]:
        return [info.filename for info in self._entries]

    @property
    def modified(self) -> bool:
        return bool(self._modified)

    def part_exists(self, part_name: str) -> bool:
        """Check if a package part exists."""
        return part_name in self._data

    def get_part_text(self, part_name: str) -> str:
        """Get a package part decoded as UTF-8 text.

        Args:
            part_name: Relative path within the package (e.g., "word/document.xml")

        Raises:
            PackageError: If the part is missing or is not UTF-8
        """
        if part_name not in self._data:
            raise PackageError(f"Package has no part '{part_name}'")
        try:
            return self._data[part_name].decode("utf-8")
        except UnicodeDecodeError as e:
            raise PackageError(f"Part '{part_name}' is not UTF-8 encoded: {e}") from e

    def set_part_text(self, part_name: str, text: str) -> None:
        """Replace a package part with new text, encoded as UTF-8.

        A part that does not exist yet is appended to the archive.
        """
        if part_name not in self._data:
            info = zipfile.ZipInfo(part_name)
            info.compress_type = zipfile.ZIP_DEFLATED
            self._entries.append(info)
        self._data[part_name] = text.encode("utf-8")
        self._modified.add(part_name)

    def _write_archive(self, target: BinaryIO) -> None:
        with zipfile.ZipFile(target, "w", zipfile.ZIP_DEFLATED) as zip_ref:
            for info in self._entries:
                # Reuse the original entry so timestamps and compression carry over
                if info.filename not in self._modified:
                    zip_ref.writestr(info, self._data[info.filename])
                    continue
                new_info = zipfile.ZipInfo(info.filename, date_time=info.date_time)
                new_info.compress_type = info.compress_type
                new_info.external_attr = info.external_attr
                zip_ref.writestr(new_info, self._data[info.filename])

    def save(self, output_path: str | Path) -> None:
        """Save the package to a .docx file.

        The archive is written to a temporary file in the target directory
        and moved over the target in one step, so an interrupted save never
        leaves a truncated document behind.

        Args:
            output_path: Path to save the .docx file

        Raises:
            PackageError: If the file cannot be written
        """
        output_path = Path(output_path)
        directory = output_path.parent

        try:
            fd, temp_name = tempfile.mkstemp(
                prefix=f".{output_path.name}.", suffix=".tmp", dir=directory
            )
        except OSError as e:
            raise PackageError(f"Cannot write to {directory}: {e}") from e

        try:
            with os.fdopen(fd, "wb") as temp_file:
                self._write_archive(temp_file)
            _copy_target_mode(output_path, temp_name)
            os.replace(temp_name, output_path)
        except OSError as e:
            raise PackageError(f"Failed to save {output_path}: {e}") from e
        finally:
            Path(temp_name).unlink(missing_ok=True)

        logger.debug("Saved package to %s", output_path)

    def save_to_bytes(self) -> bytes:
        """Save the package to bytes.

        Returns:
            The complete .docx file as bytes
        """
        buffer = io.BytesIO()
        self._write_archive(buffer)
        return buffer.getvalue()

    def __enter__(self) -> "OOXMLPackage":
        """Context manager support."""
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Context manager exit; parts live in memory so there is nothing to clean up."""


def _copy_target_mode(output_path: Path, temp_name: str) -> None:
    """Give the temp file the mode the target has, or would get from open()."""
    if output_path.exists():
        shutil.copymode(output_path, temp_name)
        return
    # mkstemp creates 0600; a plain open() would honor the umask instead
    umask = os.umask(0)
    os.umask(umask)
    os.chmod(temp_name, 0o666 & ~umask)
