"""File access for todo.txt files.

The task collection only deals in text. This module is the collaborator that
reads a file's text and writes text back, plus small helpers that wire any
pair of reader/writer callables to a collection.
"""

import logging
import shutil
from pathlib import Path
from typing import Callable, Optional, Union

from .collection import TaskCollection
from .config import ConfigModel, get_config

logger = logging.getLogger(__name__)


def load_collection(reader: Callable[[], str]) -> TaskCollection:
    """Load a collection from whatever text ``reader`` returns."""
    return TaskCollection.load(reader())


def save_collection(collection: TaskCollection, writer: Callable[[str], None]) -> None:
    """Hand the serialized collection to ``writer``."""
    writer(collection.to_string())


class TodoTxtStorage:
    """Reads and writes one todo.txt file on disk."""

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path).expanduser()

    def exists(self) -> bool:
        return self.path.exists()

    def read_text(self) -> str:
        """Return the file contents, or an empty string if the file is missing."""
        if not self.path.exists():
            logger.debug("%s does not exist yet, starting empty", self.path)
            return ""

        with open(self.path, "r", encoding="utf-8") as f:
            return f.read()

    def write_text(self, text: str) -> None:
        """Replace the file contents with ``text``."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, "w", encoding="utf-8", newline="\n") as f:
            f.write(text)
        logger.debug("Wrote %d bytes to %s", len(text), self.path)

    def load(self) -> TaskCollection:
        """Parse the file into a collection.

        Raises:
            MultipleParseError: If any line of the file is malformed
        """
        return load_collection(self.read_text)

    def save(self, collection: TaskCollection, rearrange: bool = False) -> None:
        """Write the collection back to the file."""
        if rearrange:
            collection.rearrange()
        save_collection(collection, self.write_text)
        collection.content = collection.to_string()

    def backup(self, backup_path: Optional[Path] = None) -> Optional[Path]:
        """Copy the file next to itself (``todo.txt.bak``) or to ``backup_path``.

        Returns:
            The backup path, or None when there is nothing to back up
        """
        if not self.path.exists():
            return None

        if backup_path is None:
            backup_path = self.path.with_name(self.path.name + ".bak")

        shutil.copy2(self.path, backup_path)
        logger.info("Backed up %s to %s", self.path, backup_path)
        return backup_path


def get_storage(config: Optional[ConfigModel] = None,
                path: Optional[Union[str, Path]] = None) -> TodoTxtStorage:
    """Storage for ``path``, or for the configured todo file."""
    if path is None:
        if config is None:
            config = get_config()
        path = config.todo_file
    return TodoTxtStorage(path)
