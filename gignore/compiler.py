"""

this module compiles
gitignore pattern lines into rules
"""

from __future__ import annotations

import logging
from typing import Callable, Dict, Iterable, List, Optional, Tuple, Union

from gignore.models import MatchInstruction, Rule, RuleComponent, RuleSet

logger = logging.getLogger(__name__)

Line = Union[str, bytes]

_BLANKS = b" \t\r\n"

_STAR = ord("*")
_QUESTION = ord("?")
_LBRACKET = ord("[")
_RBRACKET = ord("]")
_BACKSLASH = ord("\\")
_BANG = ord("!")
_CARET = ord("^")
_COLON = ord(":")
_DASH = ord("-")


class PatternError(ValueError):
    """Raised when a pattern component cannot be compiled."""


def _in(c: int, *ranges: Tuple[str, str]) -> bool:
    return any(ord(low) <= c <= ord(high) for low, high in ranges)


# ASCII only, byte values above 127 belong to no class
POSIX_CLASSES: Dict[bytes, Callable[[int], bool]] = {
    b"alnum": lambda c: _in(c, ("0", "9"), ("a", "z"), ("A", "Z")),
    b"alpha": lambda c: _in(c, ("a", "z"), ("A", "Z")),
    b"blank": lambda c: c in (0x20, 0x09),
    b"cntrl": lambda c: c < 32 or c == 127,
    b"digit": lambda c: _in(c, ("0", "9")),
    b"graph": lambda c: 33 <= c <= 126,
    b"lower": lambda c: _in(c, ("a", "z")),
    b"print": lambda c: 32 <= c <= 126,
    b"punct": lambda c: 33 <= c <= 47 or 58 <= c <= 64 or 91 <= c <= 96 or 123 <= c <= 126,
    b"space": lambda c: 9 <= c <= 13 or c == 32,
    b"upper": lambda c: _in(c, ("A", "Z")),
    b"xdigit": lambda c: _in(c, ("0", "9"), ("A", "F"), ("a", "f")),
}


def to_bytes(value: Line) -> bytes:
    if isinstance(value, bytes):
        return value
    return value.encode("utf-8", "surrogateescape")


def _ends_with_escape(data: bytes) -> bool:
    """True if the last byte of *data* is an unescaped backslash."""
    count = len(data) - len(data.rstrip(b"\\"))
    return count % 2 == 1


def trim_line(line: Line) -> bytes:
    """
    Cut the line at the first NUL byte and strip surrounding blanks,
    tabs, CR and LF. A trailing ``\\ `` keeps exactly one space.
    """
    data = to_bytes(line).split(b"\x00", 1)[0]
    head = data.lstrip(_BLANKS)
    trimmed = head.rstrip(_BLANKS)
    if len(trimmed) < len(head) and _ends_with_escape(trimmed) and head[len(trimmed):len(trimmed) + 1] == b" ":
        trimmed += b" "
    return trimmed


def _compile_char_class(text: bytes, r: int) -> Tuple[MatchInstruction, int]:
    """Compile the class whose opening ``[`` sits just before index *r*.

    Returns the instruction and the index just past the closing ``]``.
    """
    end = len(text)
    table = bytearray(256)

    if r >= end:
        raise PatternError("unclosed character class")

    negate = False
    if text[r] in (_BANG, _CARET):
        negate = True
        r += 1
        if r >= end:
            raise PatternError("unclosed character class")

    # a leading ']' is a member, not the end of the class
    if text[r] == _RBRACKET:
        table[_RBRACKET] = 1
        r += 1

    while r < end and text[r] != _RBRACKET:
        c = text[r]

        if c == _BACKSLASH and r + 1 < end:
            table[text[r + 1]] = 1
            r += 2
            continue

        if c == _LBRACKET and r + 2 < end and text[r + 1] == _COLON:
            r += 2
            s = r
            while s < end and (text[s] != _RBRACKET or text[s - 1] != _COLON):
                s += 1
            if s >= end or s < r + 2:
                raise PatternError("unclosed character class")

            predicate = POSIX_CLASSES.get(text[r:s - 1])
            if predicate is not None:
                for value in range(256):
                    if predicate(value):
                        table[value] = 1
            else:
                logger.debug("Unknown character class [:%s:]", text[r:s - 1].decode("ascii", "replace"))
            r = s + 1
            continue

        if r + 2 < end and text[r + 1] == _DASH and text[r + 2] != _RBRACKET:
            low, high = c, text[r + 2]
            # descending ranges are dropped
            if low <= high:
                table[low:high + 1] = b"\x01" * (high - low + 1)
            r += 3
            continue

        table[c] = 1
        r += 1

    if r >= end:
        raise PatternError("unclosed character class")
    r += 1

    if negate:
        table = bytearray(1 - value for value in table)

    return MatchInstruction.char_class(bytes(table)), r


def compile_component(text: Line) -> RuleComponent:
    """
    Compile one ``/``-free pattern segment into a match program.

    Raises PatternError for an unterminated character class.
    """
    text = to_bytes(text)

    if text == b"*":
        return RuleComponent(instructions=(MatchInstruction.any_run(),), single_star=True)
    if text == b"**":
        return RuleComponent(instructions=(MatchInstruction.component_wildcard(),), double_star=True)

    instructions: List[MatchInstruction] = []
    end = len(text)
    r = 0
    while r < end:
        c = text[r]
        if c == _STAR:
            instructions.append(MatchInstruction.any_run())
            r += 1
            continue
        if c == _QUESTION:
            instructions.append(MatchInstruction.any_char())
            r += 1
            continue
        if c == _LBRACKET:
            instruction, r = _compile_char_class(text, r + 1)
            instructions.append(instruction)
            continue

        literal = bytearray()
        while r < end and text[r] not in (_STAR, _QUESTION, _LBRACKET):
            if text[r] == _BACKSLASH and r + 1 < end:
                literal.append(text[r + 1])
                r += 2
                continue
            literal.append(text[r])
            r += 1
        instructions.append(MatchInstruction.literal(bytes(literal)))

    return RuleComponent(instructions=tuple(instructions))


def compile_rule(pattern: Line, source: Optional[str] = None, line_number: Optional[int] = None) -> Optional[Rule]:
    """Compile one trimmed, non-comment pattern.

    Returns None when the pattern has no components left to match,
    e.g. ``/`` or ``!/``.
    """
    body = to_bytes(pattern)
    display = body.decode("utf-8", "replace")

    negated = False
    anchored = False
    directory_only = False

    if body.startswith(b"!"):
        negated = True
        body = body[1:]
    if body.startswith(b"/"):
        anchored = True
        body = body[1:]
    if body.endswith(b"/") and not _ends_with_escape(body[:-1]):
        directory_only = True

    parts = [part for part in body.split(b"/") if part]
    if not parts:
        logger.debug("Skipping pattern without components: %r", display)
        return None

    components = []
    for part in parts:
        try:
            components.append(compile_component(part))
        except PatternError as e:
            logger.warning("Pattern %r: %s, segment %r will never match", display, e, part.decode("utf-8", "replace"))
            components.append(RuleComponent())

    return Rule(
        components=tuple(components),
        negated=negated,
        directory_only=directory_only,
        anchored=anchored or len(parts) > 1,
        pattern=display,
        source=source,
        line_number=line_number,
    )


def compile_lines(lines: Iterable[Line], source: Optional[str] = None) -> RuleSet:
    """Compile gitignore lines, in order, into a RuleSet."""
    rules: List[Rule] = []
    for number, line in enumerate(lines, start=1):
        pattern = trim_line(line)
        if not pattern or pattern == b"!" or pattern.startswith(b"#"):
            continue
        rule = compile_rule(pattern, source=source, line_number=number)
        if rule is not None:
            rules.append(rule)
    return RuleSet(rules=tuple(rules))
