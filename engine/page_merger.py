"""
Page Merger - Import another page's content into a page being built.

Copies the source page's operations and resources, renaming fonts and
image XObjects whose names would clash with the destination. The whole
import is planned before anything on the destination page changes, so a
rejected merge leaves the page untouched.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Set, TYPE_CHECKING, Union

import pikepdf
from pikepdf import Name

from constants.pdf_keys import KEY_CONTENTS, KEY_FONT, KEY_PARENT, KEY_PROC_SET, KEY_RESOURCES, KEY_XOBJECT
from constants.pdf_operators import OP_DO, OP_SET_FONT
from processors.content_stream import Operation
from processors.resource_registry import name_operand, same_object
from utils.validation import MalformedDocumentError, ResourceCollisionError

if TYPE_CHECKING:
    from engine.page_builder import PdfPageBuilder

logger = logging.getLogger(__name__)

MAX_INHERITANCE_DEPTH = 64


@dataclass
class MergePlan:
    """Everything a merge will add, decided before the page is modified."""
    categories: Dict[str, Any] = field(default_factory=dict)
    fonts: Dict[str, Any] = field(default_factory=dict)
    xobjects: Dict[str, Any] = field(default_factory=dict)
    font_renames: Dict[str, str] = field(default_factory=dict)
    xobject_renames: Dict[str, str] = field(default_factory=dict)


def read_operations(source_page: Union[pikepdf.Page, pikepdf.Dictionary]) -> List[Operation]:
    """Parse a page's content streams into operations."""
    page_obj = source_page.obj if isinstance(source_page, pikepdf.Page) else source_page
    if KEY_CONTENTS not in page_obj:
        return []
    return [Operation.from_instruction(i) for i in pikepdf.parse_content_stream(page_obj)]


def find_resources(page_obj: pikepdf.Dictionary) -> Optional[pikepdf.Dictionary]:
    """The page's resource dictionary, inherited from the page tree if not set directly."""
    node = page_obj
    for _ in range(MAX_INHERITANCE_DEPTH):
        resources = node.get(KEY_RESOURCES)
        if resources is not None:
            return resources
        node = node.get(KEY_PARENT)
        if node is None:
            return None
    raise MalformedDocumentError("Page tree is too deep or cyclic while resolving /Resources")


def rewrite_resource_names(operations: List[Operation], font_renames: Dict[str, str],
                           xobject_renames: Dict[str, str]) -> List[Operation]:
    """
    Rename the resource operand of set-font and paint-XObject operations.

    Single pass; returns a new list and leaves ``operations`` unchanged.
    """
    renames_by_operator = {OP_SET_FONT: font_renames, OP_DO: xobject_renames}
    rewritten = []
    for operation in operations:
        renames = renames_by_operator.get(operation.operator)
        if renames and operation.operands and isinstance(operation.operands[0], Name):
            new_name = renames.get(str(operation.operands[0]).lstrip('/'))
            if new_name is not None:
                operation = operation.with_first_operand(name_operand(new_name))
        rewritten.append(operation)
    return rewritten


def _require_indirect(category: str, name: str, token: Any) -> None:
    if not (isinstance(token, pikepdf.Object) and token.is_indirect):
        raise MalformedDocumentError(
            f"Expected {category} resource {name} to be an indirect reference"
        )


class PageMerger:
    """
    Copies a source page onto a PdfPageBuilder.

    Fonts are renamed when the document already has a font with the same
    name; image XObjects are renamed when their name is one the page's image
    counter has produced. Other resource categories are copied when the
    destination lacks them; otherwise the document's collision policy
    decides between failing and merging entry by entry.
    """

    def __init__(self, page: 'PdfPageBuilder'):
        self.page = page
        self.document = page.document
        self.policy = self.document.config.resource_collision_policy

    def merge(self, source_page: Union[pikepdf.Page, pikepdf.Dictionary]) -> List[Operation]:
        """
        Append the source page's operations to a fresh content stream.

        Returns:
            The appended operations

        Raises:
            ResourceCollisionError: If a resource category clashes and cannot be merged
            MalformedDocumentError: If a font or XObject is not an indirect reference
        """
        page_obj = source_page.obj if isinstance(source_page, pikepdf.Page) else source_page
        operations = read_operations(page_obj)
        resources = find_resources(page_obj)

        if resources is None:
            plan = MergePlan()
            rewritten = operations
        else:
            plan = self._plan(resources)
            rewritten = rewrite_resource_names(operations, plan.font_renames, plan.xobject_renames)

        self._commit(plan)

        if not self.page.current_stream.is_empty:
            self.page.new_content_stream_after()
        self.page.current_stream.extend(rewritten)

        logger.debug(
            f"Merged {len(rewritten)} operations into page {self.page.page_number} "
            f"(fonts renamed: {plan.font_renames}, xobjects renamed: {plan.xobject_renames})"
        )
        return rewritten

    # ------------------------------------------------------------------
    # Planning
    # ------------------------------------------------------------------

    def _plan(self, resources: pikepdf.Dictionary) -> MergePlan:
        plan = MergePlan()
        for key, value in resources.items():
            if key == KEY_FONT:
                self._plan_fonts(value, plan)
            elif key == KEY_XOBJECT:
                self._plan_xobjects(value, plan)
            else:
                plan.categories[key] = self._plan_category(key, value)
        return plan

    def _plan_fonts(self, fonts: pikepdf.Dictionary, plan: MergePlan) -> None:
        registry = self.page.resources
        source_names = {key.lstrip('/') for key in fonts.keys()}

        for key, reference in fonts.items():
            name = key.lstrip('/')
            _require_indirect("Font", name, reference)

            collides = self.document.find_font_by_name(name) is not None or registry.has_font(name)
            if collides:
                new_name = self._fresh_font_name(source_names | set(plan.fonts))
                plan.font_renames[name] = new_name
                name = new_name

            plan.fonts[name] = self.document.copy_token(reference)

    def _fresh_font_name(self, taken: Set[str]) -> str:
        while True:
            candidate = self.document.allocate_font_name()
            if candidate not in taken and not self.page.resources.has_font(candidate):
                return candidate

    def _plan_xobjects(self, xobjects: pikepdf.Dictionary, plan: MergePlan) -> None:
        registry = self.page.resources
        source_names = {key.lstrip('/') for key in xobjects.keys()}
        generated = registry.allocated_image_names()

        for key, reference in xobjects.items():
            name = key.lstrip('/')
            _require_indirect("XObject", name, reference)

            if name in generated or registry.has_xobject(name):
                new_name = registry.allocate_image_name(reserved=source_names | set(plan.xobjects))
                plan.xobject_renames[name] = new_name
                name = new_name

            plan.xobjects[name] = self.document.copy_token(reference)

    def _plan_category(self, key: str, value: Any) -> Any:
        registry = self.page.resources
        existing = registry.get_category(key)
        copied = self.document.copy_token(value)

        if existing is None:
            return copied

        if key == KEY_PROC_SET:
            merged = pikepdf.Array(list(existing))
            present = {str(proc) for proc in existing}
            for proc in copied:
                if str(proc) not in present:
                    merged.append(proc)
                    present.add(str(proc))
            return merged

        if self.policy != "merge":
            raise ResourceCollisionError(
                f"Page {self.page.page_number} already has {key} resources; "
                f"set resource_collision_policy='merge' to combine them"
            )

        if not (isinstance(existing, pikepdf.Dictionary) and isinstance(copied, pikepdf.Dictionary)):
            raise ResourceCollisionError(f"Cannot merge non-dictionary {key} resources")

        merged = pikepdf.Dictionary({name: token for name, token in existing.items()})
        for name, token in copied.items():
            if name in merged and not same_object(merged[name], token):
                raise ResourceCollisionError(f"{key} resource {name} is already bound to another object")
            merged[name] = token
        return merged

    # ------------------------------------------------------------------
    # Commit
    # ------------------------------------------------------------------

    def _commit(self, plan: MergePlan) -> None:
        registry = self.page.resources
        for key, token in plan.categories.items():
            registry.set_category(key, token)
        for name, reference in plan.fonts.items():
            registry.record_font(name, reference)
            self.document.reserve_font_name(name)
        for name, reference in plan.xobjects.items():
            registry.add_xobject(name, reference)
