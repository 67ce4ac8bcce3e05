"""

this module answers
is this path ignored?
"""

from __future__ import annotations

import os
from typing import Dict, List, Optional, Sequence, Tuple

from gignore.compiler import Line, to_bytes
from gignore.models import InstructionType, Rule, RuleComponent, RuleSet

_SLASH = b"/"


def clean_path(path: bytes) -> bytes:
    """
    Lexically clean a slash-separated path: collapse repeated separators,
    drop ``.`` elements and resolve ``..`` against the preceding name.
    An empty result becomes ``.``.
    """
    rooted = path.startswith(_SLASH)
    parts: List[bytes] = []
    for part in path.split(_SLASH):
        if not part or part == b".":
            continue
        if part == b"..":
            if parts and parts[-1] != b"..":
                parts.pop()
            elif not rooted:
                parts.append(part)
            continue
        parts.append(part)

    cleaned = _SLASH.join(parts)
    if rooted:
        return _SLASH + cleaned
    return cleaned or b"."


def is_valid_path(path: bytes) -> bool:
    """Unrooted, non-empty, and free of empty, ``.`` and ``..`` elements."""
    if not path or path.startswith(_SLASH) or path.endswith(_SLASH):
        return False
    return all(part not in (b"", b".", b"..") for part in path.split(_SLASH))


def split_path(path: bytes) -> List[bytes]:
    return [part for part in path.split(_SLASH) if part]


def match_component(segment: bytes, component: RuleComponent) -> bool:
    """
    Glob-match one path segment against one component program.

    Only the most recent ``*`` is remembered for backtracking, so the cost
    is bounded by len(segment) * len(program).
    """
    instructions = component.instructions
    count = len(instructions)
    i = j = 0
    star_j = star_i = -1

    while i < len(segment):
        if j < count:
            instruction = instructions[j]
            kind = instruction.kind
            if kind is InstructionType.ANY_CHAR:
                i += 1
                j += 1
                continue
            if kind is InstructionType.ANY_RUN:
                star_j, star_i = j, i
                j += 1
                continue
            if kind is InstructionType.COMPONENT_WILDCARD:
                return True
            if kind is InstructionType.CHAR_CLASS:
                if instruction.data[segment[i]]:
                    i += 1
                    j += 1
                    continue
            elif kind is InstructionType.LITERAL:
                if segment.startswith(instruction.data, i):
                    i += len(instruction.data)
                    j += 1
                    continue

        if star_j != -1:
            # let the last '*' swallow one more byte
            j = star_j + 1
            star_i += 1
            i = star_i
            continue

        return False

    while j < count and instructions[j].kind is InstructionType.ANY_RUN:
        j += 1

    return j >= count


def match_components(path: Sequence[bytes], components: Sequence[RuleComponent]) -> Tuple[bool, bool]:
    """Match rule components against path components from the start of both.

    Returns ``(matched, final)``. The attempt fails when either side runs
    out first; leading directories are checked separately by ``decide``.
    """
    memo: Dict[Tuple[int, int], Tuple[bool, bool]] = {}

    def walk(p: int, c: int) -> Tuple[bool, bool]:
        key = (p, c)
        if key in memo:
            return memo[key]

        while c < len(components):
            if p >= len(path):
                result = (False, False)
                break
            if components[c].double_star:
                result = (False, False)
                # longest consumption first, down to zero segments
                for start in range(len(path), p - 1, -1):
                    matched, final = walk(start, c + 1)
                    if matched:
                        result = (True, final)
                        break
                break
            if not match_component(path[p], components[c]):
                result = (False, False)
                break
            p += 1
            c += 1
        else:
            result = (p == len(path), p == len(path))

        memo[key] = result
        return result

    return walk(0, 0)


def rule_matches_path(rule: Rule, components: Sequence[bytes], is_directory: bool) -> bool:
    offsets = range(1) if rule.anchored else range(len(components))
    for offset in offsets:
        matched, final = match_components(components[offset:], rule.components)
        if matched:
            # a directory-only rule never matches a plain file
            return not (rule.directory_only and final and not is_directory)
    return False


def _prepare(path: Line) -> Optional[Tuple[List[bytes], bool]]:
    raw = to_bytes(path)
    if os.sep != "/":
        raw = raw.replace(os.sep.encode(), _SLASH)

    is_directory = raw.endswith(_SLASH)
    cleaned = clean_path(raw)
    if cleaned == b".":
        cleaned = _SLASH
        is_directory = True

    if not is_valid_path(cleaned):
        return None
    return split_path(cleaned), is_directory


def decide(rule_set: RuleSet, path: Line) -> Optional[Rule]:
    """Return the rule that decides *path*, or None if no rule applies.

    A returned negated rule means the path is explicitly not ignored.
    """
    prepared = _prepare(path)
    if prepared is None:
        return None
    components, is_directory = prepared
    rules = rule_set.rules

    # an ignored parent directory can't be re-included from below
    for depth in range(1, len(components)):
        prefix = components[:depth]
        for rule in reversed(rules):
            if rule_matches_path(rule, prefix, True):
                if not rule.negated:
                    return rule
                break

    for rule in reversed(rules):
        if rule_matches_path(rule, components, is_directory):
            return rule
    return None


def matches(rule_set: RuleSet, path: Line) -> bool:
    """True if *path* is ignored by *rule_set*."""
    rule = decide(rule_set, path)
    return rule is not None and not rule.negated
