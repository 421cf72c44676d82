"""On-disk store of named queries, one ``<name>.spl`` file each."""

from __future__ import annotations

from pathlib import Path

from .config import CONFIG_DIR
from .errors import InvalidInputError

SAVED_SEARCH_SUFFIX = ".spl"
DEFAULT_DIRECTORY = CONFIG_DIR / "saved_searches"


class SavedSearchStore:
    def __init__(self, directory: Path | None = None) -> None:
        self.directory = DEFAULT_DIRECTORY if directory is None else directory

    def _path_for(self, name: str) -> Path:
        clean = name.strip()
        if not clean:
            raise InvalidInputError("Name cannot be empty.")
        if "/" in clean or "\\" in clean or clean in {".", ".."}:
            raise InvalidInputError(f"Invalid search name: {clean!r}")
        return self.directory / f"{clean}{SAVED_SEARCH_SUFFIX}"

    def list_names(self) -> list[str]:
        """Return saved search names sorted alphabetically."""
        if not self.directory.is_dir():
            return []
        return sorted(
            path.stem
            for path in self.directory.iterdir()
            if path.is_file() and path.suffix == SAVED_SEARCH_SUFFIX
        )

    def save(self, name: str, query: str) -> Path:
        path = self._path_for(name)
        self.directory.mkdir(parents=True, exist_ok=True)
        # newline="" keeps the query bytes exactly as typed
        with path.open("w", encoding="utf-8", newline="") as handle:
            handle.write(query)
        return path

    def load(self, name: str) -> str:
        with self._path_for(name).open("r", encoding="utf-8", newline="") as handle:
            return handle.read()


__all__ = ["SavedSearchStore", "SAVED_SEARCH_SUFFIX"]
