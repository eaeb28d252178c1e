"""
Zone Registry - named, categorized rectangles of the source tile-set.

Zones are used either as stamps (trees and other discrete objects) or as the
5x3 source block of an auto-tiled terrain (paths, water). The registry is
persisted on its own, independently of the map document.
"""
import json
import time
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional, Tuple

from PyQt6 import QtCore

from .storage import KeyValueStore, StorageError
from .logging import log_zones


ZONES_KEY = 'typeZones'
EXPORT_VERSION = '1.0'


class CategoryKind(Enum):
    """Zone categories with special stamping or auto-tile behavior"""
    TREE = "tree"
    PATH = "path"
    WATER = "water"
    CUSTOM = "custom"


@dataclass(frozen=True)
class ZoneCategory:
    """
    Category of a zone. Recognized kinds are TREE, PATH and WATER; anything
    else is CUSTOM and keeps its free-form name.
    """
    kind: CategoryKind
    name: str = ''

    @classmethod
    def parse(cls, value) -> 'ZoneCategory':
        if isinstance(value, ZoneCategory):
            return value
        text = str(value).strip() if value is not None else ''
        for kind in (CategoryKind.TREE, CategoryKind.PATH, CategoryKind.WATER):
            if text.lower() == kind.value:
                return cls(kind, kind.value)
        return cls.custom(text or CategoryKind.CUSTOM.value)

    @classmethod
    def custom(cls, name: str) -> 'ZoneCategory':
        return cls(CategoryKind.CUSTOM, name)

    @property
    def is_autotile(self) -> bool:
        """Path and water zones are 15-slot auto-tile source blocks"""
        return self.kind in (CategoryKind.PATH, CategoryKind.WATER)

    def __str__(self):
        return self.name


TREE = ZoneCategory(CategoryKind.TREE, 'tree')
PATH = ZoneCategory(CategoryKind.PATH, 'path')
WATER = ZoneCategory(CategoryKind.WATER, 'water')


@dataclass(frozen=True)
class ZoneBounds:
    """Inclusive rectangle in tile-set coordinates"""
    start_x: int
    start_y: int
    end_x: int
    end_y: int

    @classmethod
    def from_points(cls, p1: Tuple[int, int], p2: Tuple[int, int]) -> 'ZoneBounds':
        """Normalize two drag corners into a bounds rectangle"""
        return cls(min(p1[0], p2[0]), min(p1[1], p2[1]),
                   max(p1[0], p2[0]), max(p1[1], p2[1]))

    @property
    def width(self) -> int:
        return self.end_x - self.start_x + 1

    @property
    def height(self) -> int:
        return self.end_y - self.start_y + 1

    def tiles(self) -> List[Tuple[int, int]]:
        """Source tile coordinates covered by the bounds, column by column"""
        return [(x, y)
                for x in range(self.start_x, self.end_x + 1)
                for y in range(self.start_y, self.end_y + 1)]

    def to_json(self) -> Dict:
        return {
            'startX': self.start_x,
            'startY': self.start_y,
            'endX': self.end_x,
            'endY': self.end_y,
            'width': self.width,
            'height': self.height,
        }

    @classmethod
    def from_json(cls, data: Dict) -> 'ZoneBounds':
        return cls.from_points((int(data['startX']), int(data['startY'])),
                               (int(data['endX']), int(data['endY'])))


@dataclass
class Zone:
    """A named, categorized rectangle of source tiles"""
    id: str
    name: str
    category: ZoneCategory
    bounds: ZoneBounds
    created: str = field(default_factory=lambda: datetime.now().isoformat())

    @property
    def tiles(self) -> List[Tuple[int, int]]:
        return self.bounds.tiles()

    def to_json(self) -> Dict:
        return {
            'id': self.id,
            'name': self.name,
            'category': self.category.name,
            'bounds': self.bounds.to_json(),
            'tiles': [{'x': x, 'y': y} for x, y in self.tiles],
            'created': self.created,
        }

    @classmethod
    def from_json(cls, data: Dict) -> 'Zone':
        return cls(
            id=str(data['id']),
            name=str(data['name']),
            category=ZoneCategory.parse(data.get('category')),
            bounds=ZoneBounds.from_json(data['bounds']),
            created=str(data.get('created', '')),
        )


def generate_zone_id() -> str:
    return f"zone_{int(time.time() * 1000)}_{uuid.uuid4().hex[:9]}"


class ZoneRegistry(QtCore.QObject):
    """
    Registry of zones with interactive two-point creation.

    Signals:
        zones_changed: Emitted after zones are created, renamed, deleted or imported
        selection_changed: Emitted when the selected zone changes (zone or None)
    """

    zones_changed = QtCore.pyqtSignal()
    selection_changed = QtCore.pyqtSignal(object)

    def __init__(self, store: Optional[KeyValueStore] = None, key: str = ZONES_KEY):
        super().__init__()

        self._store = store
        self._key = key
        self._zones: List[Zone] = []
        self._selected: Optional[Zone] = None

        # In-progress drag: (start point, current point)
        self._creating: Optional[Tuple[Tuple[int, int], Tuple[int, int]]] = None

        self.load()

    @property
    def zones(self) -> List[Zone]:
        return list(self._zones)

    @property
    def selected(self) -> Optional[Zone]:
        return self._selected

    @property
    def is_creating(self) -> bool:
        return self._creating is not None

    @property
    def pending_bounds(self) -> Optional[ZoneBounds]:
        """Bounds of the zone being dragged out, for preview"""
        if self._creating is None:
            return None
        return ZoneBounds.from_points(*self._creating)

    def get(self, zone_id: str) -> Optional[Zone]:
        return next((z for z in self._zones if z.id == zone_id), None)

    def create_zone(self, p1: Tuple[int, int], p2: Tuple[int, int], name: str,
                    category='custom') -> Zone:
        """
        Create a zone from two corner points and persist the registry.

        Args:
            p1, p2: Opposite corners in tile-set coordinates (any order)
            name: Zone name
            category: ZoneCategory or category name
        """
        zone = Zone(
            id=generate_zone_id(),
            name=name.strip() if name else '',
            category=ZoneCategory.parse(category),
            bounds=ZoneBounds.from_points(p1, p2),
        )
        self._zones.append(zone)
        log_zones(f"Created zone '{zone.name}' ({zone.category}) "
                  f"{zone.bounds.width}x{zone.bounds.height} at "
                  f"({zone.bounds.start_x}, {zone.bounds.start_y})")
        self.save()
        self.zones_changed.emit()
        return zone

    def delete_zone(self, zone_id: str) -> bool:
        zone = self.get(zone_id)
        if zone is None:
            return False
        self._zones.remove(zone)
        if self._selected is zone:
            self._selected = None
            self.selection_changed.emit(None)
        self.save()
        self.zones_changed.emit()
        return True

    def rename_zone(self, zone_id: str, name: str) -> bool:
        zone = self.get(zone_id)
        if zone is None or not name or not name.strip():
            return False
        zone.name = name.strip()
        self.save()
        self.zones_changed.emit()
        return True

    def select(self, zone_id: str) -> Optional[Zone]:
        """Select a zone by id; an unknown id clears the selection"""
        self._selected = self.get(zone_id)
        self.selection_changed.emit(self._selected)
        return self._selected

    def deselect(self):
        self._selected = None
        self.selection_changed.emit(None)

    def by_category(self, category) -> List[Zone]:
        category = ZoneCategory.parse(category)
        return [z for z in self._zones if z.category == category]

    def categories(self) -> List[str]:
        """Distinct category names, sorted"""
        return sorted({z.category.name for z in self._zones})

    # =========================================================================
    # INTERACTIVE CREATION
    # =========================================================================

    def begin(self, point: Tuple[int, int]):
        self._creating = (point, point)

    def update(self, point: Tuple[int, int]):
        if self._creating is not None:
            self._creating = (self._creating[0], point)

    def finish(self, name: str, category='custom') -> Optional[Zone]:
        """
        Materialize the dragged-out zone.

        Returns:
            The new zone, or None if no drag was in progress
        """
        if self._creating is None:
            return None
        start, current = self._creating
        self._creating = None
        return self.create_zone(start, current, name, category)

    def cancel(self):
        self._creating = None

    # =========================================================================
    # PERSISTENCE
    # =========================================================================

    def save(self) -> bool:
        """
        Persist all zones to the store.

        Returns:
            True if successful, False otherwise
        """
        if self._store is None:
            return False
        data = {
            'zones': [z.to_json() for z in self._zones],
            'savedAt': datetime.now().isoformat(),
        }
        try:
            self._store.set(self._key, json.dumps(data))
            return True
        except StorageError as e:
            log_zones(f"Error saving zones: {e}")
            return False

    def load(self):
        """Load zones from the store; corrupt data leaves the registry empty"""
        self._zones = []
        self._selected = None
        if self._store is None:
            return
        raw = self._store.get(self._key)
        if not raw:
            return
        try:
            data = json.loads(raw)
            self._zones = [Zone.from_json(entry) for entry in data['zones']]
        except (json.JSONDecodeError, KeyError, TypeError, ValueError) as e:
            log_zones(f"Error loading zones: {e}")
            self._zones = []

    def export_zones(self) -> str:
        """All zones as an indented JSON document"""
        return json.dumps({
            'zones': [z.to_json() for z in self._zones],
            'exportedAt': datetime.now().isoformat(),
            'version': EXPORT_VERSION,
        }, indent=2)

    def import_zones(self, json_data: str) -> bool:
        """
        Replace all zones with those from an exported JSON document.

        Returns:
            True if the import succeeded
        """
        try:
            data = json.loads(json_data)
            zones = [Zone.from_json(entry) for entry in data['zones']]
        except (json.JSONDecodeError, KeyError, TypeError, ValueError) as e:
            log_zones(f"Error importing zones: {e}")
            return False

        self._zones = zones
        self._selected = None
        self.save()
        self.zones_changed.emit()
        return True
