"""Staged changes read through GitPython."""

import logging
import os
from typing import List, Optional, Set, Tuple

from git import Repo
from git.exc import GitCommandError, InvalidGitRepositoryError, NoSuchPathError

logger = logging.getLogger(__name__)


def _open_repo(root_directory: Optional[str]) -> Optional[Repo]:
    try:
        return Repo(root_directory or os.getcwd(), search_parent_directories=True)
    except (InvalidGitRepositoryError, NoSuchPathError):
        logger.debug("%s is not inside a git repository", root_directory)
        return None


def _staged_relative_paths(repo: Repo) -> List[str]:
    output = repo.git.diff('--name-only', '--cached', '--diff-filter=AM')
    return [line for line in output.splitlines() if line.strip()]


def get_staged_files(root_directory: Optional[str] = None) -> Set[str]:
    """Absolute paths of staged added/modified files; empty outside a repository."""
    repo = _open_repo(root_directory)
    if repo is None:
        return set()
    try:
        return {os.path.join(repo.working_tree_dir, rel) for rel in _staged_relative_paths(repo)}
    except GitCommandError as e:
        logger.warning("Could not list staged files: %s", e)
        return set()


def get_staged_changes(root_directory: Optional[str] = None) -> List[Tuple[str, str, str]]:
    """(absolute path, HEAD text, staged text) for every staged added/modified file.

    Added files have an empty HEAD text.
    """
    repo = _open_repo(root_directory)
    if repo is None:
        return []

    try:
        relative_paths = _staged_relative_paths(repo)
    except GitCommandError as e:
        logger.warning("Could not list staged files: %s", e)
        return []

    changes = []
    for rel in relative_paths:
        try:
            after = repo.git.show(f':{rel}', strip_newline_in_stdout=False)
        except GitCommandError as e:
            logger.warning("Could not read staged blob for %s: %s", rel, e)
            continue
        try:
            before = repo.git.show(f'HEAD:{rel}', strip_newline_in_stdout=False)
        except GitCommandError:
            before = ''
        changes.append((os.path.join(repo.working_tree_dir, rel), before, after))
    return changes
