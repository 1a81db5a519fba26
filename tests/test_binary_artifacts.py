"""Tests for the Binary-Artifacts check."""

import pytest

from conftest import FakeRepoClient, detail_texts, run_one
from repotrust.models.evidence import AccessMode

GRADLE_VALIDATION = """\
name: validate
on: [push]
jobs:
  validation:
    runs-on: ubuntu-latest
    steps:
      - uses: actions/checkout@v4
      - uses: gradle/wrapper-validation-action@v1
"""


class TestBinaryArtifacts:
    """Tests for the Binary-Artifacts check."""

    @pytest.mark.asyncio
    async def test_no_binaries(self):
        client = FakeRepoClient(files={"src/main.py": "print()", "README.md": "# hi"})
        result = await run_one(client, "Binary-Artifacts")

        assert result.score == 10
        assert result.reason == "no binaries found in the repo"

    @pytest.mark.asyncio
    async def test_one_point_per_binary(self):
        client = FakeRepoClient(
            files={"bin/tool.exe": b"\x00", "lib/libfoo.SO": b"\x00", "src/main.py": "x = 1"}
        )
        result = await run_one(client, "Binary-Artifacts")

        assert result.score == 8
        assert detail_texts(result, "Warn") == ["binary detected", "binary detected"]
        assert [d.msg.path for d in result.details] == ["bin/tool.exe", "lib/libfoo.SO"]

    @pytest.mark.asyncio
    async def test_score_floored_at_zero(self):
        files = {f"out/{i}.class": b"\xca\xfe" for i in range(12)}
        result = await run_one(FakeRepoClient(files=files), "Binary-Artifacts")

        assert result.score == 0

    @pytest.mark.asyncio
    async def test_validated_gradle_wrapper_ignored(self):
        client = FakeRepoClient(
            files={
                "gradle/wrapper/gradle-wrapper.jar": b"PK",
                ".github/workflows/validate.yml": GRADLE_VALIDATION,
            }
        )
        result = await run_one(client, "Binary-Artifacts")

        assert result.score == 10

    @pytest.mark.asyncio
    async def test_unvalidated_gradle_wrapper_counts(self):
        client = FakeRepoClient(files={"gradle/wrapper/gradle-wrapper.jar": b"PK"})
        result = await run_one(client, "Binary-Artifacts")

        assert result.score == 9

    @pytest.mark.asyncio
    async def test_runs_file_based(self):
        client = FakeRepoClient(access_mode=AccessMode.FILE_BASED, files={"a.dll": b"MZ"})
        result = await run_one(client, "Binary-Artifacts")

        assert result.score == 9
