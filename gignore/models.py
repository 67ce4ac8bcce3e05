"""
where we store the
pydantic data structures
for compiled ignore rules

"""

from __future__ import annotations

from enum import Enum
from typing import Optional, Tuple

from pydantic import BaseModel, ConfigDict


class InstructionType(str, Enum):
    LITERAL = "literal"
    ANY_CHAR = "any_char"
    ANY_RUN = "any_run"
    CHAR_CLASS = "char_class"
    COMPONENT_WILDCARD = "component_wildcard"


class MatchInstruction(BaseModel):
    """One step of a component program.

    ``data`` holds the unescaped bytes of a literal, or a 256 entry
    membership table (one byte per value, 0 or 1) for a character class.
    """
    model_config = ConfigDict(frozen=True)

    kind: InstructionType
    data: bytes = b""

    @classmethod
    def literal(cls, data: bytes) -> MatchInstruction:
        return cls(kind=InstructionType.LITERAL, data=data)

    @classmethod
    def any_char(cls) -> MatchInstruction:
        return cls(kind=InstructionType.ANY_CHAR)

    @classmethod
    def any_run(cls) -> MatchInstruction:
        return cls(kind=InstructionType.ANY_RUN)

    @classmethod
    def char_class(cls, table: bytes) -> MatchInstruction:
        if len(table) != 256:
            raise ValueError("character class table must have 256 entries")
        return cls(kind=InstructionType.CHAR_CLASS, data=table)

    @classmethod
    def component_wildcard(cls) -> MatchInstruction:
        return cls(kind=InstructionType.COMPONENT_WILDCARD)

    def contains(self, byte: int) -> bool:
        return self.data[byte] == 1


class RuleComponent(BaseModel):
    model_config = ConfigDict(frozen=True)

    instructions: Tuple[MatchInstruction, ...] = ()
    double_star: bool = False
    single_star: bool = False

    @property
    def inert(self) -> bool:
        # an empty program only matches the empty segment
        return not self.instructions


class Rule(BaseModel):
    """A compiled pattern line."""
    model_config = ConfigDict(frozen=True)

    components: Tuple[RuleComponent, ...]
    negated: bool = False
    directory_only: bool = False
    anchored: bool = False
    pattern: str = ""
    source: Optional[str] = None
    line_number: Optional[int] = None


class RuleSet(BaseModel):
    """Ordered rules; later rules take precedence over earlier ones."""
    model_config = ConfigDict(frozen=True)

    rules: Tuple[Rule, ...] = ()

    def __len__(self) -> int:
        return len(self.rules)
