"""
Read-only catalog of tile, objective and special-tile definitions.

The catalog is configuration data owned outside the editing core. The core
only ever looks codes up in it; nothing here is mutated after loading.
"""
import json
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

from core.types import CatalogError, FALLBACK_TILE_CODE, ObjectiveCategory

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TileDef:
    code: str
    name: str = ""


@dataclass(frozen=True)
class ObjectiveDef:
    code: str
    category: ObjectiveCategory
    name: str = ""


@dataclass(frozen=True)
class SpecialDef:
    code: str
    name: str = ""


class TileCatalog:
    """
    Lookup tables for every code a cell may carry.

    Attributes:
        tiles: Colour tile definitions, in catalog order
        objectives: Objective layer definitions with their category
        specials: Special (non-colour) tile definitions
    """

    def __init__(self,
                 tiles: List[TileDef],
                 objectives: List[ObjectiveDef],
                 specials: List[SpecialDef]):
        self.tiles: Tuple[TileDef, ...] = tuple(tiles)
        self.objectives: Tuple[ObjectiveDef, ...] = tuple(objectives)
        self.specials: Tuple[SpecialDef, ...] = tuple(specials)

        self._tiles_by_code: Dict[str, TileDef] = {t.code: t for t in self.tiles}
        self._objectives_by_code: Dict[str, ObjectiveDef] = {o.code: o for o in self.objectives}
        self._specials_by_code: Dict[str, SpecialDef] = {s.code: s for s in self.specials}

    # =============================================================================
    # LOOKUPS
    # =============================================================================

    def lookup_tile_by_code(self, code: str) -> Optional[TileDef]:
        return self._tiles_by_code.get(code)

    def lookup_objective_by_code(self, code: str) -> Optional[ObjectiveDef]:
        return self._objectives_by_code.get(code)

    def lookup_special_by_code(self, code: str, case_insensitive: bool = False) -> Optional[SpecialDef]:
        """
        Find a special tile by code.

        Args:
            code: Special tile code
            case_insensitive: Retry ignoring case when the exact code is unknown
                (used when reading files written by hand)
        """
        special = self._specials_by_code.get(code)
        if special is not None or not case_insensitive:
            return special

        lowered = code.lower()
        for candidate in self.specials:
            if candidate.code.lower() == lowered:
                return candidate
        return None

    def category_of(self, code: str) -> Optional[ObjectiveCategory]:
        objective = self._objectives_by_code.get(code)
        return objective.category if objective else None

    def is_collectable(self, code: str) -> bool:
        return self.category_of(code) == ObjectiveCategory.COLLECTABLE

    def is_special(self, code: str) -> bool:
        return code in self._specials_by_code

    # =============================================================================
    # LISTINGS
    # =============================================================================

    def all_tile_codes(self) -> List[str]:
        return [t.code for t in self.tiles]

    def all_objectives_by_category(self, category: ObjectiveCategory) -> List[ObjectiveDef]:
        return [o for o in self.objectives if o.category == category]

    def all_special_codes(self) -> List[str]:
        return [s.code for s in self.specials]

    def default_tile_code(self) -> str:
        """First catalog tile, used for fresh grids and lossy decodes."""
        return self.tiles[0].code if self.tiles else FALLBACK_TILE_CODE

    # =============================================================================
    # JSON IMPORT
    # =============================================================================

    @classmethod
    def from_json(cls, json_data: Dict[str, Any]) -> 'TileCatalog':
        """
        Build a catalog from its JSON description.

        Expected shape:
            {
              "tileTypes": [{"code": "r", "name": "Red"}, ...],
              "objectiveTypes": [{"code": "ice", "name": "Ice", "type": "Under"}, ...],
              "specialTiles": [{"code": "stone", "name": "Stone"}, ...]
            }
        """
        if not isinstance(json_data, dict):
            raise CatalogError("Catalog document must be a JSON object")

        try:
            tiles = [TileDef(str(t["code"]), str(t.get("name", ""))) for t in json_data.get("tileTypes", [])]
            specials = [SpecialDef(str(s["code"]), str(s.get("name", ""))) for s in json_data.get("specialTiles", [])]
            objectives = []
            for o in json_data.get("objectiveTypes", []):
                objectives.append(ObjectiveDef(
                    code=str(o["code"]),
                    category=ObjectiveCategory(o["type"]),
                    name=str(o.get("name", "")),
                ))
        except (KeyError, TypeError, ValueError) as e:
            raise CatalogError(f"Malformed catalog entry: {e}") from e

        if not tiles:
            raise CatalogError("Catalog defines no tile types")

        return cls(tiles, objectives, specials)

    @classmethod
    def load_from_file(cls, filename: str) -> 'TileCatalog':
        """Load a catalog from a JSON file."""
        try:
            with open(filename, 'r') as f:
                json_data = json.load(f)
        except FileNotFoundError as e:
            raise CatalogError(f"Catalog file not found: {filename}") from e
        except json.JSONDecodeError as e:
            raise CatalogError(f"Catalog file is not valid JSON: {e}") from e

        catalog = cls.from_json(json_data)
        logger.info("Loaded catalog %s: %d tiles, %d objectives, %d specials",
                    filename, len(catalog.tiles), len(catalog.objectives), len(catalog.specials))
        return catalog
