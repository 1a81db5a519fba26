"""Local checkout backend: a file-tree snapshot with no history."""

import asyncio
import logging
import os
from pathlib import Path

from repotrust.checker.errors import UnsupportedFeatureError
from repotrust.clients.base import RepoClient
from repotrust.models.evidence import (
    AccessMode,
    BranchRef,
    CheckRun,
    Commit,
    Issue,
    Platform,
    Release,
    RepoInfo,
    RepoRef,
    User,
)

logger = logging.getLogger(__name__)

SKIPPED_DIRS = {".git", ".hg", ".svn"}


class LocalDirClient(RepoClient):
    """Reads files from a directory on disk.

    Only file-based checks can run against it; history-dependent calls raise
    ``UnsupportedFeatureError``.
    """

    def __init__(self, path: str | Path) -> None:
        self._root = Path(path).resolve()
        if not self._root.is_dir():
            raise NotADirectoryError(str(self._root))
        self._repo = RepoRef(platform=Platform.LOCAL, path=str(self._root))

    @property
    def repo(self) -> RepoRef:
        return self._repo

    @property
    def access_mode(self) -> AccessMode:
        return AccessMode.FILE_BASED

    def _unsupported(self, feature: str) -> UnsupportedFeatureError:
        return UnsupportedFeatureError("local directory client", feature)

    async def get_repo_info(self) -> RepoInfo:
        raise self._unsupported("repository metadata")

    async def get_default_branch(self) -> BranchRef:
        raise self._unsupported("branches")

    async def get_branch(self, name: str) -> BranchRef | None:
        raise self._unsupported("branches")

    async def list_releases(self) -> list[Release]:
        raise self._unsupported("releases")

    async def list_commits(self) -> list[Commit]:
        raise self._unsupported("commits")

    async def list_check_runs_for_ref(self, ref: str) -> list[CheckRun]:
        raise self._unsupported("check runs")

    async def list_contributors(self) -> list[User]:
        raise self._unsupported("contributors")

    async def list_issues(self) -> list[Issue]:
        raise self._unsupported("issues")

    def _walk(self) -> list[str]:
        paths = []
        for dirpath, dirnames, filenames in os.walk(self._root):
            dirnames[:] = sorted(d for d in dirnames if d not in SKIPPED_DIRS)
            for filename in sorted(filenames):
                full = Path(dirpath) / filename
                paths.append(full.relative_to(self._root).as_posix())
        return paths

    async def list_files(self) -> list[str]:
        paths = await asyncio.to_thread(self._walk)
        logger.debug(f"Found {len(paths)} files under {self._root}")
        return paths

    async def get_file_content(self, path: str) -> bytes:
        full = (self._root / path).resolve()
        if self._root not in full.parents:
            raise FileNotFoundError(path)
        return await asyncio.to_thread(full.read_bytes)
