"""
Per-page resource registry.

Tracks the page's resource dictionary by category and allocates image
XObject names. Font and XObject entries only enter through this class so
names stay unique within each category.
"""

import logging
from typing import Any, Dict, Iterable, Mapping, Optional, Set

import pikepdf
from pikepdf import Name

from constants.pdf_keys import KEY_FONT, KEY_XOBJECT
from utils.validation import ResourceCollisionError

logger = logging.getLogger(__name__)

IMAGE_NAME_PREFIX = "I"
FIRST_IMAGE_KEY = 1


def same_object(first: Any, second: Any) -> bool:
    if first is second:
        return True
    if isinstance(first, pikepdf.Object) and isinstance(second, pikepdf.Object):
        if first.is_indirect and second.is_indirect:
            return first.objgen == second.objgen
    return False


def resource_key(category: str) -> str:
    """Normalize a category or resource name to PDF name form."""
    return category if category.startswith('/') else f'/{category}'


class ResourceRegistry:
    """
    Resource names and references for one page.

    Names are stored without the leading slash (``F1``, ``I3``); categories
    are stored in PDF name form (``/Font``, ``/ExtGState``).
    """

    def __init__(self):
        self._fonts: Dict[str, Any] = {}
        self._xobjects: Dict[str, Any] = {}
        self._other: Dict[str, Any] = {}
        self._image_key = FIRST_IMAGE_KEY

    @property
    def image_key(self) -> int:
        """Next candidate number for an image name."""
        return self._image_key

    @property
    def fonts(self) -> Mapping[str, Any]:
        return dict(self._fonts)

    @property
    def xobjects(self) -> Mapping[str, Any]:
        return dict(self._xobjects)

    @property
    def categories(self) -> Set[str]:
        found = set(self._other)
        if self._fonts:
            found.add(KEY_FONT)
        if self._xobjects:
            found.add(KEY_XOBJECT)
        return found

    def allocated_image_names(self) -> Set[str]:
        """Every name the image counter has produced so far, I0 included."""
        return {f"{IMAGE_NAME_PREFIX}{n}" for n in range(self._image_key)}

    def allocate_image_name(self, reserved: Iterable[str] = ()) -> str:
        """Take the next unused ``I<n>`` name, skipping names already present or reserved."""
        taken = set(reserved) | set(self._xobjects)
        while True:
            name = f"{IMAGE_NAME_PREFIX}{self._image_key}"
            self._image_key += 1
            if name not in taken:
                return name

    def register_xobject(self, reference: Any) -> str:
        """Register an image XObject under a freshly allocated name."""
        name = self.allocate_image_name()
        self._xobjects[name] = reference
        logger.debug(f"Registered XObject {name}")
        return name

    def add_xobject(self, name: str, reference: Any) -> None:
        self._add(self._xobjects, "XObject", name, reference)

    def record_font(self, name: str, reference: Any) -> None:
        """Record a document font on this page; repeated use of the same font is a no-op."""
        self._add(self._fonts, "Font", name, reference)

    def has_font(self, name: str) -> bool:
        return name in self._fonts

    def has_xobject(self, name: str) -> bool:
        return name in self._xobjects

    def _add(self, entries: Dict[str, Any], category: str, name: str, reference: Any) -> None:
        existing = entries.get(name)
        if existing is not None:
            if same_object(existing, reference):
                return
            raise ResourceCollisionError(f"{category} resource {name} is already bound to another object")
        entries[name] = reference
        logger.debug(f"Recorded {category} resource {name}")

    def has_category(self, category: str) -> bool:
        return resource_key(category) in self.categories

    def get_category(self, category: str) -> Optional[Any]:
        key = resource_key(category)
        if key == KEY_FONT:
            return self.fonts or None
        if key == KEY_XOBJECT:
            return self.xobjects or None
        return self._other.get(key)

    def set_category(self, category: str, token: Any) -> None:
        """Set a category other than Font/XObject, which only grow through their own methods."""
        key = resource_key(category)
        if key in (KEY_FONT, KEY_XOBJECT):
            raise ValueError(f"{key} entries must be added by name")
        self._other[key] = token

    def to_dictionary(self) -> pikepdf.Dictionary:
        """Materialize as a pikepdf resource dictionary."""
        resources = pikepdf.Dictionary()
        for key, token in self._other.items():
            resources[key] = token
        if self._fonts:
            resources[KEY_FONT] = pikepdf.Dictionary(
                {resource_key(name): ref for name, ref in self._fonts.items()}
            )
        if self._xobjects:
            resources[KEY_XOBJECT] = pikepdf.Dictionary(
                {resource_key(name): ref for name, ref in self._xobjects.items()}
            )
        return resources

    def __repr__(self) -> str:
        return (
            f"ResourceRegistry(fonts={sorted(self._fonts)}, "
            f"xobjects={sorted(self._xobjects)}, other={sorted(self._other)})"
        )


def name_operand(name: str) -> Name:
    return Name(resource_key(name))
