"""
Level files on disk: one level_<id>.json per level in a directory.
"""
import json
import logging
import os
import re
import tempfile
from typing import List

from core.catalog import TileCatalog
from core.codec import LevelData, decode_level, encode_level
from core.types import GridFormat, LevelDecodeError

logger = logging.getLogger(__name__)

_LEVEL_FILE_RE = re.compile(r"^level_(\d+)\.json$")


class LevelRepository:
    """Reads and writes numbered level files in one directory."""

    def __init__(self, directory: str):
        self.directory = directory

    def path_for(self, level_id: int) -> str:
        return os.path.join(self.directory, f"level_{level_id}.json")

    def exists(self, level_id: int) -> bool:
        return os.path.isfile(self.path_for(level_id))

    def list_levels(self) -> List[int]:
        """Ids of every level file present, sorted numerically."""
        if not os.path.isdir(self.directory):
            return []
        ids = []
        for name in os.listdir(self.directory):
            match = _LEVEL_FILE_RE.match(name)
            if match:
                ids.append(int(match.group(1)))
        return sorted(ids)

    def save(self, level: LevelData, fmt: GridFormat, catalog: TileCatalog) -> str:
        """
        Write level in fmt, replacing any existing file for its id.

        The document is written to a temporary file first and moved into
        place, so a failed write leaves the previous file intact.

        Returns:
            Path of the written file
        """
        document = encode_level(level, fmt, catalog)
        os.makedirs(self.directory, exist_ok=True)
        path = self.path_for(level.metadata.level_id)

        fd, tmp_path = tempfile.mkstemp(prefix=".level_", suffix=".json", dir=self.directory)
        try:
            with os.fdopen(fd, 'w') as f:
                json.dump(document, f, indent=2)
            os.replace(tmp_path, path)
        except OSError:
            if os.path.exists(tmp_path):
                os.remove(tmp_path)
            raise

        logger.info("Level %d saved to %s (%s)", level.metadata.level_id, path, fmt.value)
        return path

    def load(self, level_id: int, catalog: TileCatalog) -> LevelData:
        """
        Read and decode a level, auto-detecting its format.

        Raises:
            FileNotFoundError: If there is no file for level_id
            LevelDecodeError: If the file is not valid JSON or not a level
        """
        path = self.path_for(level_id)
        if not os.path.isfile(path):
            raise FileNotFoundError(f"Level {level_id} not found: {path}")

        with open(path, 'r') as f:
            try:
                document = json.load(f)
            except json.JSONDecodeError as e:
                raise LevelDecodeError(f"Invalid JSON in {path}: {e}") from e

        level = decode_level(document, catalog, level_id=level_id)
        logger.info("Level %d loaded from %s (%s)", level_id, path, level.grid_format.value)
        return level
