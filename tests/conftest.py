import os
import sys
import json
import pytest

# Add project root to sys.path (so tests can import core.*)
PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
sys.path.append(PROJECT_ROOT)

from core.catalog import TileCatalog
from core.placement import PlacementEngine
from core.session import LevelSession

CATALOG_PATH = os.path.join(PROJECT_ROOT, "data", "level_editor_data.json")


@pytest.fixture
def catalog():
    """Catalog shipped in data/: tiles r g b y p o; ice/grass Under, box/chain Cover,
    star/gem Collectable; specials stone and Rock."""
    return TileCatalog.load_from_file(CATALOG_PATH)


@pytest.fixture
def engine(catalog):
    return PlacementEngine(catalog)


@pytest.fixture
def session(catalog):
    """Session with a fresh 6x6 level of 'r' tiles."""
    s = LevelSession(catalog)
    s.new_level()
    return s


@pytest.fixture
def write_level(tmp_path):
    """Returns a function that writes a level document as level_<id>.json in tmp_path."""
    def _write(level_id, document):
        path = tmp_path / f"level_{level_id}.json"
        if isinstance(document, str):
            path.write_text(document)
        else:
            path.write_text(json.dumps(document))
        return path
    return _write
