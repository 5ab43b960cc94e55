"""
Idempotent textual file mutation.

Every edit is a localized splice into the existing text: the rest of the
file is preserved byte for byte and spliced text takes the line ending of
the file's first line. A second application of the same target is a no-op
reported as skipped. Writes go through a temporary file in the target
directory followed by a rename, so a file either reaches its new state or
is left exactly as it was.
"""

import logging
import os
import re
import tempfile
from pathlib import Path, PurePath
from typing import List, Union

from .domain.models import ArtifactTarget, MutationMode, MutationResult, StepStatus
from .exceptions import AnchorNotFoundError, FileEncodingError


logger = logging.getLogger(__name__)

# Last closing brace of the file, followed only by whitespace
TRAILING_BRACE_RE = re.compile(r"\}\s*\Z")

# Schema::create('table', function (Blueprint $table) { ... $table->timestamps();
CREATE_BLOCK_RE = re.compile(
    r"(Schema::create\(.*?function\s*\(\s*Blueprint\s+\$table\s*\)\s*\{)"
    r"(.*?)\n"
    r"([ \t]*\$table->timestamps\(\);)",
    re.DOTALL,
)

_COLUMN_NAME_RE = re.compile(r"^\$table->\w+\('((?:[^'\\]|\\.)*)'")


def atomic_write(path: Path, content: str) -> int:
    """
    Write ``content`` to ``path`` as UTF-8 via a temporary file and rename.

    Parent directories are created as needed. Returns the number of bytes
    written.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    encoded = content.encode("utf-8")

    fd, tmp_path = tempfile.mkstemp(dir=str(path.parent), prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(encoded)
        os.replace(tmp_path, path)
    except Exception:
        if os.path.exists(tmp_path):
            os.unlink(tmp_path)
        raise

    logger.debug(f"Wrote {len(encoded)} bytes to {path}")
    return len(encoded)


def read_text(path: Path) -> str:
    """Read a file as UTF-8 without newline translation."""
    return path.read_bytes().decode("utf-8")


def detect_newline(text: str) -> str:
    """Line ending of the first line of ``text``; LF when there is none."""
    first = text.find("\n")
    if first > 0 and text[first - 1] == "\r":
        return "\r\n"
    return "\n"


def convert_newlines(block: str, newline: str) -> str:
    return block.replace("\r\n", "\n").replace("\n", newline)


def insert_before_closing_brace(text: str, block: str) -> str:
    """
    Insert ``block`` right before the final closing brace of ``text``.

    Raises:
        AnchorNotFoundError: if the text does not end with a closing brace
    """
    match = TRAILING_BRACE_RE.search(text)
    if match is None:
        raise AnchorNotFoundError("No closing brace at end of file", anchor="}")
    newline = detect_newline(text)
    block = convert_newlines(block.rstrip(), newline)
    return text[:match.start()] + block + newline + text[match.start():]


def column_field_name(line: str) -> str:
    match = _COLUMN_NAME_RE.match(line.strip())
    return match.group(1) if match else ""


def insert_columns_before_timestamps(text: str, lines: List[str]) -> str:
    """
    Insert column definitions inside the create block, before the timestamps call.

    Each line is indented like the timestamps line. Lines for fields already
    defined in the block are dropped; when nothing remains the text is
    returned unchanged.

    Raises:
        AnchorNotFoundError: if no create block ending in a timestamps call exists
    """
    match = CREATE_BLOCK_RE.search(text)
    if match is None:
        raise AnchorNotFoundError(
            "Create-table block with a timestamps call not found",
            anchor="Schema::create(...) { ... $table->timestamps(); }",
        )

    body = match.group(2)
    new_lines = []
    for line in lines:
        name = column_field_name(line)
        existing = re.compile(r"\$table->\w+\(\s*'" + re.escape(name) + r"'")
        if name and existing.search(body):
            logger.debug(f"Column '{name}' already defined, skipping")
            continue
        new_lines.append(line.strip())

    if not new_lines:
        return text

    timestamps_line = match.group(3)
    indent = timestamps_line[:len(timestamps_line) - len(timestamps_line.lstrip())]
    newline = detect_newline(text)
    block = "".join(f"{indent}{line}{newline}" for line in new_lines)
    return text[:match.start(3)] + block + text[match.start(3):]


class FileMutator:
    """Applies artifact targets to files under one project root."""

    def __init__(self, project_root: Union[str, Path], force: bool = False):
        self.project_root = Path(project_root)
        self.force = force

    def resolve(self, relative: Union[str, PurePath]) -> Path:
        path = Path(relative)
        return path if path.is_absolute() else self.project_root / path

    def apply(self, target: ArtifactTarget) -> MutationResult:
        """
        Apply one target.

        Raises:
            FileNotFoundError: if a patch mode targets a missing file
            FileEncodingError: if the file to patch is not valid UTF-8
            AnchorNotFoundError: if the insertion anchor is absent
        """
        path = self.resolve(target.path)
        handlers = {
            MutationMode.CREATE_IF_ABSENT: self._create_if_absent,
            MutationMode.INSERT_BEFORE_MARKER: self._insert_before_marker,
            MutationMode.APPEND_IF_ABSENT: self._append_if_absent,
            MutationMode.ANCHORED_BLOCK_INSERT: self._anchored_block_insert,
        }
        return handlers[target.mode](path, target)

    def _result(self, status: StepStatus, path: Path, message: str) -> MutationResult:
        try:
            shown = path.relative_to(self.project_root).as_posix()
        except ValueError:
            shown = str(path)
        return MutationResult(status=status, path=shown, message=message)

    def _read_existing(self, path: Path) -> str:
        if not path.is_file():
            raise FileNotFoundError(f"File to patch not found: {path}")
        try:
            return read_text(path)
        except UnicodeDecodeError as e:
            raise FileEncodingError(f"File is not valid UTF-8: {e}", path=path) from e

    def _create_if_absent(self, path: Path, target: ArtifactTarget) -> MutationResult:
        if path.exists() and not (self.force and target.overwritable):
            return self._result(StepStatus.SKIPPED, path, "already exists")

        existed = path.exists()
        atomic_write(path, target.content)
        return self._result(StepStatus.CREATED, path, "overwritten" if existed else "created")

    def _insert_before_marker(self, path: Path, target: ArtifactTarget) -> MutationResult:
        text = self._read_existing(path)
        if target.marker and re.search(target.marker, text):
            return self._result(StepStatus.SKIPPED, path, "already contains the inserted code")

        try:
            patched = insert_before_closing_brace(text, target.content)
        except AnchorNotFoundError as e:
            e.context["path"] = str(path)
            raise
        atomic_write(path, patched)
        return self._result(StepStatus.PATCHED, path, "code inserted before closing brace")

    def _append_if_absent(self, path: Path, target: ArtifactTarget) -> MutationResult:
        text = self._read_existing(path)
        marker = target.marker or target.content.strip()
        if marker in text:
            return self._result(StepStatus.SKIPPED, path, "already present")

        newline = detect_newline(text)
        line = convert_newlines(target.content.strip("\r\n"), newline)
        atomic_write(path, text + newline + line + newline)
        return self._result(StepStatus.PATCHED, path, "line appended")

    def _anchored_block_insert(self, path: Path, target: ArtifactTarget) -> MutationResult:
        text = self._read_existing(path)
        lines = [line for line in target.content.split("\n") if line.strip()]
        if not lines:
            return self._result(StepStatus.SKIPPED, path, "nothing to insert")

        try:
            patched = insert_columns_before_timestamps(text, lines)
        except AnchorNotFoundError as e:
            e.context["path"] = str(path)
            raise
        if patched == text:
            return self._result(StepStatus.SKIPPED, path, "columns already defined")

        inserted = len(patched.splitlines()) - len(text.splitlines())
        atomic_write(path, patched)
        return self._result(StepStatus.PATCHED, path, f"{inserted} column line(s) inserted")
