"""Content stream model: immutable operations in mutable ordered streams."""

import logging
from dataclasses import dataclass
from typing import Any, Iterable, Iterator, List, Sequence, Tuple

import pikepdf
from pikepdf import ContentStreamInlineImage, ContentStreamInstruction, Operator

from constants.pdf_operators import OP_INLINE_IMAGE

logger = logging.getLogger(__name__)


def normalize_operator(operator) -> bytes:
    if isinstance(operator, bytes):
        return operator
    if isinstance(operator, str):
        return operator.encode('latin-1')
    try:
        return str(operator).encode('latin-1')
    except (UnicodeEncodeError, TypeError) as e:
        logger.warning(f"Could not normalize operator {operator!r}: {e}")
        return b''


def _to_pdf_operand(value: Any) -> Any:
    if isinstance(value, (bytes, bytearray)):
        return pikepdf.String(bytes(value))
    return value


@dataclass(frozen=True)
class Operation:
    """One content stream operator with its operands."""
    operator: bytes
    operands: Tuple[Any, ...] = ()

    @classmethod
    def from_instruction(cls, instruction) -> 'Operation':
        """Wrap an instruction produced by ``pikepdf.parse_content_stream``."""
        if isinstance(instruction, ContentStreamInlineImage):
            return cls(OP_INLINE_IMAGE, (instruction.iimage,))
        return cls(normalize_operator(instruction.operator), tuple(instruction.operands))

    def to_instruction(self):
        if self.operator == OP_INLINE_IMAGE:
            return ContentStreamInlineImage(self.operands[0])
        return ContentStreamInstruction(
            [_to_pdf_operand(operand) for operand in self.operands],
            Operator(self.operator.decode('latin-1')),
        )

    def with_first_operand(self, value: Any) -> 'Operation':
        """Copy of this operation with its first operand replaced."""
        return Operation(self.operator, (value,) + tuple(self.operands[1:]))


class ContentStream:
    """Ordered, append-only list of operations for one page content stream."""

    def __init__(self, operations: Iterable[Operation] = ()):
        self._operations: List[Operation] = list(operations)

    @property
    def operations(self) -> Sequence[Operation]:
        return tuple(self._operations)

    @property
    def is_empty(self) -> bool:
        return not self._operations

    def add(self, operation: Operation) -> None:
        self._operations.append(operation)

    def extend(self, operations: Iterable[Operation]) -> None:
        self._operations.extend(operations)

    def operators(self) -> List[bytes]:
        return [operation.operator for operation in self._operations]

    def to_bytes(self) -> bytes:
        """Serialize to content stream syntax."""
        return pikepdf.unparse_content_stream(
            [operation.to_instruction() for operation in self._operations]
        )

    def __len__(self) -> int:
        return len(self._operations)

    def __iter__(self) -> Iterator[Operation]:
        return iter(self._operations)

    def __repr__(self) -> str:
        return f"ContentStream({len(self._operations)} operations)"
