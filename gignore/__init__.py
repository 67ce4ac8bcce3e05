"""gitignore pattern matching."""

from gignore.compiler import PatternError, compile_lines
from gignore.gitignore import IgnoreFilter, compile_file
from gignore.matcher import decide, matches
from gignore.models import Rule, RuleSet

__all__ = [
    "IgnoreFilter",
    "PatternError",
    "Rule",
    "RuleSet",
    "compile_file",
    "compile_lines",
    "decide",
    "matches",
]
