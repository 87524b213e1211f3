"""
Persistence of the offer ids that have already been notified.
"""
import json
import logging
import os
import tempfile
from pathlib import Path
from typing import FrozenSet, Iterable, Union

from .errors import PersistenceError

logger = logging.getLogger(__name__)


class StateStore:
    """Stores notified offer ids as a JSON array on disk."""

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)

    def load(self) -> FrozenSet[str]:
        """Load the notified ids.

        A missing file is created empty. A file that cannot be read or parsed
        yields an empty set so the check can still run.
        """
        if not self.path.exists():
            try:
                self._write([])
                logger.info(f"Created empty state file {self.path}")
            except PersistenceError as e:
                logger.error(f"Error creating state file: {e}")
            return frozenset()

        try:
            return self._read()
        except PersistenceError as e:
            logger.warning(f"⚠️ Error reading state file, starting with an empty set: {e}")
            return frozenset()

    def save(self, ids: Iterable[str]) -> None:
        """Overwrite the state file with the given ids.

        Raises:
            PersistenceError: if the file could not be written. The previous
                contents are left in place.
        """
        self._write(sorted(set(ids)))
        logger.debug(f"Saved notified offer ids to {self.path}")

    def _read(self) -> FrozenSet[str]:
        try:
            with open(self.path, "r", encoding="utf-8") as fh:
                data = json.load(fh)
        except (OSError, ValueError) as e:
            raise PersistenceError(f"could not read {self.path}: {e}") from e

        if not isinstance(data, list):
            raise PersistenceError(
                f"expected a JSON array in {self.path}, got {type(data).__name__}"
            )
        return frozenset(str(item) for item in data)

    def _write(self, ids: list) -> None:
        directory = self.path.parent
        try:
            directory.mkdir(parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(
                prefix=f".{self.path.name}.", suffix=".tmp", dir=directory
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as fh:
                    json.dump(ids, fh)
                os.replace(tmp_path, self.path)
            except BaseException:
                if os.path.exists(tmp_path):
                    os.unlink(tmp_path)
                raise
        except OSError as e:
            raise PersistenceError(f"could not write {self.path}: {e}") from e
