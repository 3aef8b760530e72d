"""Idempotent, line-oriented text file edits.

All helpers operate on strings so they can be composed and tested without
touching disk; :func:`write_if_changed` is the single point that persists
a result. Applying any helper twice yields the same text as applying it once.
"""

import logging
import os
import re
import shutil
from collections.abc import Collection, Mapping
from datetime import datetime
from pathlib import Path
from tempfile import NamedTemporaryFile

logger = logging.getLogger(__name__)


def read_text(path: Path) -> str:
    """Read a text file, returning an empty string if it does not exist."""
    try:
        return path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return ""


def write_text_atomic(path: Path, content: str, mode: int | None = None) -> None:
    """Write a file atomically via a temporary file and ``os.replace()``.

    Args:
        path: Destination file.
        content: Full file content.
        mode: Optional permission bits applied before the rename.

    Raises:
        OSError: If the file cannot be written.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp_path: Path | None = None
    try:
        with NamedTemporaryFile(
            mode="w",
            encoding="utf-8",
            dir=path.parent,
            delete=False,
            suffix=".tmp",
        ) as f:
            tmp_path = Path(f.name)
            f.write(content)
        if mode is not None:
            os.chmod(tmp_path, mode)
        elif path.exists():
            shutil.copymode(path, tmp_path)
        os.replace(str(tmp_path), str(path))
    except OSError:
        if tmp_path is not None and tmp_path.exists():
            tmp_path.unlink()
        raise


def write_if_changed(path: Path, content: str, mode: int | None = None) -> bool:
    """Write ``content`` to ``path`` only if it differs from what is there.

    Args:
        path: Destination file.
        content: Desired file content.
        mode: Optional permission bits; a mode mismatch also counts as a change.

    Returns:
        True if the file was created or modified.
    """
    exists = path.exists()
    if exists and read_text(path) == content:
        if mode is None or (path.stat().st_mode & 0o777) == mode:
            return False
        os.chmod(path, mode)
        return True
    write_text_atomic(path, content, mode)
    logger.debug("%s %s", "Updated" if exists else "Created", path)
    return True


def _with_trailing_newline(text: str) -> str:
    if text and not text.endswith("\n"):
        return text + "\n"
    return text


def set_line(text: str, pattern: str, replacement: str) -> str:
    """Replace every line matching ``pattern``, or append ``replacement``.

    Mirrors ``grep -q pattern && sed -i 's/pattern.*/replacement/' || echo``.

    Args:
        text: Current file content.
        pattern: Regex anchored at line start (``^`` is implied).
        replacement: Full replacement line.

    Returns:
        New file content.
    """
    regex = re.compile(rf"^(?:{pattern}).*$", re.MULTILINE)
    if regex.search(text):
        return regex.sub(lambda _m: replacement, text)
    return _with_trailing_newline(text) + "\n" + replacement + "\n"


def ensure_block(text: str, needle: str, block: str) -> str:
    """Append ``block`` unless ``needle`` already occurs in ``text``."""
    if needle in text:
        return text
    return _with_trailing_newline(text) + "\n" + block.rstrip("\n") + "\n"


def upsert_keys(
    text: str,
    pairs: Mapping[str, str],
    separator: str = " = ",
    repeatable: Collection[str] = (),
    first_only: Collection[str] = (),
) -> str:
    """Set ``key<separator>value`` pairs in an ini-like file.

    Lines whose key matches (``^\\s*key\\s*=``) are rewritten in place;
    keys that never occur are appended in the order given.

    Keys in ``repeatable`` accumulate across lines, so their existing lines
    are left alone and the pair is appended unless a line already carries
    that exact value. Keys in ``first_only`` are ordered lists where only
    the first line is rewritten and later lines are kept.

    Args:
        text: Current file content.
        pairs: Keys and values to enforce.
        separator: Separator written between key and value.
        repeatable: Keys whose lines add to each other.
        first_only: Keys whose first line is the primary value.

    Returns:
        New file content.
    """
    seen: set[str] = set()
    lines = text.splitlines()
    patterns = {key: re.compile(rf"^\s*{re.escape(key)}\s*=\s*(.*?)\s*$") for key in pairs}

    for index, line in enumerate(lines):
        for key, regex in patterns.items():
            match = regex.match(line)
            if not match:
                continue
            if key in repeatable:
                if match.group(1) == pairs[key].strip():
                    seen.add(key)
            elif key not in first_only or key not in seen:
                lines[index] = f"{key}{separator}{pairs[key]}"
                seen.add(key)
            break

    for key, value in pairs.items():
        if key not in seen:
            lines.append(f"{key}{separator}{value}")

    return "\n".join(lines) + "\n" if lines else ""


def replace_managed_block(text: str, begin: str, end: str, block: str) -> str | None:
    """Replace the region between two marker lines (inclusive).

    Args:
        text: Current file content.
        begin: Text identifying the opening marker line.
        end: Text identifying the closing marker line.
        block: Replacement, including both marker lines.

    Returns:
        New content, or None if the opening marker is absent.
    """
    lines = text.splitlines(keepends=True)
    start = next((i for i, line in enumerate(lines) if begin in line), None)
    if start is None:
        return None
    stop = next((i for i in range(start, len(lines)) if end in lines[i]), None)
    if stop is None:
        # Unterminated block: treat everything after the marker as managed.
        stop = len(lines) - 1
    replacement = block.rstrip("\n") + "\n"
    return "".join(lines[:start]) + replacement + "".join(lines[stop + 1 :])


def upsert_managed_block(text: str, begin: str, end: str, block: str) -> str:
    """Replace a managed block in place or append it to the end of the file."""
    replaced = replace_managed_block(text, begin, end, block)
    if replaced is not None:
        return replaced
    return _with_trailing_newline(text) + "\n" + block.rstrip("\n") + "\n"


def backup_once(path: Path, suffix: str) -> Path | None:
    """Copy ``path`` to ``path + suffix`` unless that backup already exists.

    Returns:
        The backup path if one was created, None otherwise.
    """
    backup = path.with_name(path.name + suffix)
    if not path.is_file() or backup.exists():
        return None
    shutil.copy2(path, backup)
    return backup


def timestamped_backup(path: Path, label: str, now: datetime | None = None) -> Path | None:
    """Copy ``path`` to ``<name>.<label>-<YYYYmmddHHMMSS>.bak``.

    Returns:
        The backup path, or None when ``path`` does not exist.
    """
    if not path.is_file():
        return None
    stamp = (now or datetime.now()).strftime("%Y%m%d%H%M%S")
    backup = path.with_name(f"{path.name}.{label}-{stamp}.bak")
    shutil.copy2(path, backup)
    return backup
