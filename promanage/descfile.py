"""Parser for ``desc.txt`` project description files.

The format is line oriented::

    main: A short project description
    that may continue on following lines
    cat.png: Caption for photos/cat.png
    statue: Caption for any file whose name without extension is "statue"

A ``key: value`` line opens a key (trimmed, lowercased). Any other line is a
continuation of the current key. Lines before the first key are dropped and a
repeated key starts over rather than appending.
"""

from __future__ import annotations

import logging
import re
from pathlib import Path, PurePath

from pydantic import BaseModel, Field

from promanage.errors import ParseFailure

logger = logging.getLogger(__name__)

DESC_FILENAME = "desc.txt"
MAIN_KEY = "main"
BOM = "\ufeff"

_KEY_LINE_RE = re.compile(r"^\s*([^:]+):\s*(.*)$")


class DescriptionFile(BaseModel):
    """Parsed contents of a description file."""

    main: str | None = None
    entries: dict[str, str] = Field(default_factory=dict)

    def describe(self, filename: str) -> str:
        """Description for a media file by full name, then by name without extension."""
        full_key = filename.lower()
        stem_key = PurePath(filename).stem.lower()
        return self.entries.get(full_key) or self.entries.get(stem_key) or ""


def parse_desc_file(text: str) -> DescriptionFile:
    """Parse description file text. Never raises on malformed content."""
    if text.startswith(BOM):
        text = text[1:]
    lines = text.replace("\r\n", "\n").split("\n")
    # The newline ending the file does not open another line
    if lines[-1] == "":
        lines.pop()

    entries: dict[str, str] = {}
    current: str | None = None
    for line in lines:
        match = _KEY_LINE_RE.match(line)
        if match:
            current = match.group(1).strip().lower()
            entries[current] = match.group(2)
        elif current is not None:
            value = entries[current]
            entries[current] = f"{value}\n{line}" if value else line

    return DescriptionFile(main=entries.get(MAIN_KEY), entries=entries)


def format_desc_file(entries: dict[str, str]) -> str:
    """Serialize entries back to ``key: value`` lines."""
    return "".join(f"{key}: {value}\n" for key, value in entries.items())


def read_desc_file(path: Path) -> DescriptionFile:
    """Read and parse a description file.

    Raises:
        OSError: The file cannot be read.
        ParseFailure: The file is not valid UTF-8.
    """
    raw = path.read_bytes()
    try:
        text = raw.decode("utf-8")
    except UnicodeDecodeError as e:
        raise ParseFailure(f"{path} is not UTF-8 text: {e}") from e
    return parse_desc_file(text)


def load_project_description(root: Path) -> DescriptionFile:
    """Description file of a project root, empty when missing or unreadable."""
    path = root / DESC_FILENAME
    try:
        return read_desc_file(path)
    except FileNotFoundError:
        logger.debug("No %s in %s", DESC_FILENAME, root)
    except (OSError, ParseFailure) as e:
        logger.warning("Ignoring unreadable description file %s: %s", path, e)
    return DescriptionFile()


def find_description_file(folder: Path) -> Path | None:
    """Pick the description file of a NAS folder.

    Candidates are regular files with ``desc`` in their name; ``.txt`` wins
    over ``.md``, which wins over anything else. Ties go by name.
    """
    try:
        candidates = [p for p in folder.iterdir() if "desc" in p.name.lower() and p.is_file()]
    except OSError as e:
        logger.warning("Cannot list %s: %s", folder, e)
        return None

    def preference(path: Path) -> tuple[int, str]:
        suffix = path.suffix.lower()
        rank = 0 if suffix == ".txt" else 1 if suffix == ".md" else 2
        return rank, path.name.lower()

    if not candidates:
        return None
    return min(candidates, key=preference)
