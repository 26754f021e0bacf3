#!/usr/bin/env python3
"""
YAMINE FILE SELECTOR - Discovery
--------------------------------
Walks every root up to a bounded depth and keeps the YAML/JSON files it
finds, deduplicated by resolved path in first-seen order.

Ignore files are honoured the way git tools honour them: `.ignore` files
always, `.gitignore` files only inside a git work tree. Their patterns are
read in every walked directory and, for a root inside a repository, in the
directories between the repository top and the root.

Entries that cannot be inspected (permission denied, broken links, vanished
files) are skipped without interrupting the rest of the walk.

Author: Yamine Maintainers
Date: 2026-10-18
"""

import os
import logging
from pathlib import Path
from typing import Iterable, Iterator, List, Optional, Tuple, Union

import pathspec

from yamine.core.errors import SelectionError
from yamine.core.models import SourceFile

DEFAULT_LOGGER = "yamine.discovery"
IGNORE_FILE = ".ignore"
GITIGNORE_FILE = ".gitignore"

# (directory holding the ignore file, its compiled patterns)
IgnoreRules = List[Tuple[Path, pathspec.PathSpec]]


class FileSelector:
    """
    Produces the ordered list of SourceFiles for a run.
    A root that is a file sits at depth 0; its own children would be depth 1.
    """

    def __init__(self, include_hidden: bool = False, logger: Optional[logging.Logger] = None,
                 use_ignore_files: bool = True):
        self.include_hidden = include_hidden
        self.use_ignore_files = use_ignore_files
        self.logger = logger or logging.getLogger(DEFAULT_LOGGER)

    def walk(self, root: Union[str, Path], max_depth: int) -> Iterator[Path]:
        """
        Yields regular files below `root`, depth first, entries in name order.
        Symlinked directories are not followed. A file root is never filtered.
        """
        root = Path(root)
        try:
            if root.is_file():
                yield root
                return
            is_dir = root.is_dir()
        except OSError as e:
            self._skip(root, str(e))
            return

        if not is_dir:
            self._skip(root, "not a file or directory")
            return

        directory = Path(os.path.abspath(root))
        rules, in_repo = self._inherited_rules(directory)
        yield from self._walk_dir(directory, 1, max_depth, rules, in_repo)

    def _walk_dir(self, directory: Path, depth: int, max_depth: int,
                  rules: IgnoreRules, in_repo: bool) -> Iterator[Path]:
        # `depth` is the depth of the entries inside `directory`
        if depth > max_depth:
            return

        try:
            with os.scandir(directory) as it:
                entries = sorted(it, key=lambda entry: entry.name)
        except OSError as e:
            self._skip(directory, str(e))
            return

        if self.use_ignore_files:
            in_repo = in_repo or (directory / ".git").exists()
            rules = rules + self._read_rules(directory, in_repo)

        for entry in entries:
            if not self.include_hidden and entry.name.startswith('.'):
                continue

            try:
                is_dir = entry.is_dir(follow_symlinks=False)
                is_file = not is_dir and entry.is_file()
            except OSError as e:
                self._skip(entry.path, str(e))
                continue

            path = Path(entry.path)
            if rules and self._ignored(path, is_dir, rules):
                self.logger.debug(f"Ignoring '{path}'")
                continue

            if is_dir:
                yield from self._walk_dir(path, depth + 1, max_depth, rules, in_repo)
            elif is_file:
                yield path

    def _inherited_rules(self, directory: Path) -> Tuple[IgnoreRules, bool]:
        """Rules from the directories between the repository top and `directory`."""
        if not self.use_ignore_files:
            return [], False

        ancestors = []
        for parent in directory.parents:
            ancestors.append(parent)
            if (parent / ".git").exists():
                break
        else:
            return [], False

        rules: IgnoreRules = []
        for parent in reversed(ancestors):
            rules += self._read_rules(parent, True)
        return rules, True

    def _read_rules(self, directory: Path, in_repo: bool) -> IgnoreRules:
        names = (GITIGNORE_FILE, IGNORE_FILE) if in_repo else (IGNORE_FILE,)
        rules: IgnoreRules = []

        for name in names:
            path = directory / name
            if not path.is_file():
                continue
            try:
                lines = path.read_text(encoding="utf-8").splitlines()
            except (OSError, UnicodeDecodeError) as e:
                self._skip(path, str(e))
                continue
            rules.append((directory, pathspec.PathSpec.from_lines("gitwildmatch", lines)))

        return rules

    @staticmethod
    def _ignored(path: Path, is_dir: bool, rules: IgnoreRules) -> bool:
        for base, spec in rules:
            relative = path.relative_to(base).as_posix()
            if spec.match_file(relative + "/" if is_dir else relative):
                return True
        return False

    def select(self, roots: Iterable[Union[str, Path]], max_depth: int) -> List[SourceFile]:
        """Walks each root in order and keeps unique `.yaml` / `.json` files."""
        if max_depth < 0:
            raise ValueError(f"max_depth must be non-negative, got {max_depth}")

        roots = list(roots)
        selected: List[SourceFile] = []
        seen = set()

        for root in roots:
            for path in self.walk(root, max_depth):
                try:
                    source = SourceFile.from_path(path)
                except (OSError, RuntimeError) as e:
                    self._skip(path, str(e))
                    continue

                if source is None or source.path in seen:
                    continue

                seen.add(source.path)
                selected.append(source)

        self.logger.debug(f"Selected {len(selected)} file(s) from {len(roots)} root(s)")
        return selected

    def _skip(self, path: Union[str, Path], reason: str):
        self.logger.debug(str(SelectionError(path, reason)))
