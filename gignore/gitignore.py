"""

this is a module for
reading .gitignore files
"""


# gitignore.py
from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Optional, Union

from gignore.compiler import compile_lines
from gignore.matcher import matches
from gignore.models import RuleSet

logger = logging.getLogger(__name__)

DEFAULT_IGNORE_FILE = ".gitignore"

# Hard-coded excludes that *always* apply
HARDCODED = [".git"]


def compile_file(path: Union[str, os.PathLike]) -> RuleSet:
    """Compile an ignore file.

    Lines are split on ``\\n`` only; a trailing ``\\r`` is left for the
    compiler to trim.
    """
    with open(path, "rb") as fh:
        data = fh.read()
    rule_set = compile_lines(data.split(b"\n"), source=os.fspath(path))
    logger.debug("Loaded %d rules from %s", len(rule_set), os.fspath(path))
    return rule_set


class IgnoreFilter:
    """Callable that answers: *should this path be ignored?*"""

    def __init__(self, root: Union[str, os.PathLike], ignore_file: str = DEFAULT_IGNORE_FILE):
        self.root = Path(root)
        self.hardcoded = compile_lines(HARDCODED)
        self.rules: Optional[RuleSet] = None
        gitignore = self.root / ignore_file
        if gitignore.is_file():
            self.rules = compile_file(gitignore)

    def __call__(self, path: Union[str, os.PathLike]) -> bool:
        """Return True if the path should be *excluded*."""
        path = Path(path)
        if not path.is_absolute():
            path = self.root / path
        try:
            rel = path.relative_to(self.root).as_posix()
        except ValueError:
            return False
        if path.is_dir():
            rel += "/"
        if matches(self.hardcoded, rel):
            return True
        if self.rules is not None and matches(self.rules, rel):
            return True
        return False
