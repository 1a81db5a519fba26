"""Tests for the local checkout backend."""

import pytest

from repotrust.checker.errors import UnsupportedFeatureError
from repotrust.clients.localdir import LocalDirClient
from repotrust.models.evidence import AccessMode, Platform


@pytest.fixture
def checkout(tmp_path):
    (tmp_path / "src").mkdir()
    (tmp_path / "src" / "main.py").write_text("print('hi')\n")
    (tmp_path / "LICENSE").write_text("MIT License\n")
    (tmp_path / ".git").mkdir()
    (tmp_path / ".git" / "HEAD").write_text("ref: refs/heads/main\n")
    return tmp_path


class TestLocalDirClient:
    """Tests for LocalDirClient."""

    def test_repo_ref(self, checkout):
        client = LocalDirClient(checkout)

        assert client.access_mode is AccessMode.FILE_BASED
        assert client.repo.platform is Platform.LOCAL
        assert client.repo.display_name == str(checkout.resolve())

    def test_not_a_directory(self, tmp_path):
        with pytest.raises(NotADirectoryError):
            LocalDirClient(tmp_path / "missing")

    @pytest.mark.asyncio
    async def test_list_files_skips_vcs_metadata(self, checkout):
        files = await LocalDirClient(checkout).list_files()

        assert files == ["LICENSE", "src/main.py"]

    @pytest.mark.asyncio
    async def test_file_content(self, checkout):
        client = LocalDirClient(checkout)

        assert await client.get_file_content("src/main.py") == b"print('hi')\n"
        with pytest.raises(FileNotFoundError):
            await client.get_file_content("nope.txt")

    @pytest.mark.asyncio
    async def test_paths_outside_root_rejected(self, checkout):
        (checkout.parent / "outside.txt").write_text("secret")

        with pytest.raises(FileNotFoundError):
            await LocalDirClient(checkout).get_file_content("../outside.txt")

    @pytest.mark.asyncio
    async def test_history_unsupported(self, checkout):
        client = LocalDirClient(checkout)

        with pytest.raises(UnsupportedFeatureError, match="commits"):
            await client.list_commits()
        with pytest.raises(UnsupportedFeatureError):
            await client.get_repo_info()
