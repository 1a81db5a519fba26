"""Tests for the Dangerous-Workflow check."""

import pytest

from conftest import FakeRepoClient, detail_texts, run_one
from repotrust.checker.errors import InvalidWorkflowError
from repotrust.checks.dangerous_workflow import is_untrusted_context, script_expressions
from repotrust.models.evidence import AccessMode

CHECK = "Dangerous-Workflow"
WORKFLOW = ".github/workflows/pr.yml"

UNTRUSTED_CHECKOUT = """\
name: pr
on:
  pull_request_target:
    types: [opened]
jobs:
  build:
    runs-on: ubuntu-latest
    steps:
      - uses: actions/checkout@v4
        with:
          ref: ${{ github.event.pull_request.head.sha }}
      - run: make test
"""

TRUSTED_CHECKOUT = """\
name: pr
on:
  pull_request_target:
    types: [opened]
jobs:
  build:
    runs-on: ubuntu-latest
    steps:
      - uses: actions/checkout@v4
        with:
          ref: ${{ github.base_ref }}
      - run: make test
"""

SCRIPT_INJECTION = """\
on: issues
jobs:
  greet:
    name: Greet
    runs-on: ubuntu-latest
    steps:
      - name: echo title
        run: |
          echo "${{ github.event.issue.title }}"
          echo "${{ github.sha }}"
"""


class TestDangerousWorkflow:
    """End-to-end tests through the dispatcher."""

    @pytest.mark.asyncio
    async def test_untrusted_checkout(self):
        client = FakeRepoClient(files={WORKFLOW: UNTRUSTED_CHECKOUT})
        result = await run_one(client, CHECK)

        assert result.score == 0
        assert result.reason == "dangerous workflow patterns detected"
        warnings = [d for d in result.details if d.type.value == "Warn"]
        assert len(warnings) == 1
        assert "untrusted code checkout" in warnings[0].msg.text
        assert warnings[0].msg.path == WORKFLOW
        assert warnings[0].msg.offset == 9

    @pytest.mark.asyncio
    async def test_trusted_checkout(self):
        client = FakeRepoClient(files={WORKFLOW: TRUSTED_CHECKOUT})
        result = await run_one(client, CHECK)

        assert result.score == 10
        assert detail_texts(result, "Warn") == []

    @pytest.mark.asyncio
    async def test_checkout_without_privileged_trigger(self):
        content = UNTRUSTED_CHECKOUT.replace("pull_request_target", "pull_request")
        result = await run_one(FakeRepoClient(files={WORKFLOW: content}), CHECK)

        assert result.score == 10

    @pytest.mark.asyncio
    async def test_script_injection(self):
        client = FakeRepoClient(files={WORKFLOW: SCRIPT_INJECTION})
        result = await run_one(client, CHECK)

        assert result.score == 0
        assert detail_texts(result, "Warn") == [
            "script injection with untrusted input 'github.event.issue.title'"
        ]
        finding = [f for f in result.findings if f.outcome.value == "True"][0]
        assert finding.values == {"job": "Greet"}

    @pytest.mark.asyncio
    async def test_no_workflows_inconclusive(self):
        result = await run_one(FakeRepoClient(files={"README.md": "hi"}), CHECK)

        assert result.score == -1
        assert result.reason == "no workflows found"

    @pytest.mark.asyncio
    async def test_invalid_workflow_is_error(self):
        result = await run_one(FakeRepoClient(files={WORKFLOW: "on: [push\njobs: {"}), CHECK)

        assert result.score == -1
        assert "invalid workflow .github/workflows/pr.yml" in result.error

    @pytest.mark.asyncio
    async def test_runs_file_based(self):
        client = FakeRepoClient(
            access_mode=AccessMode.FILE_BASED, files={WORKFLOW: UNTRUSTED_CHECKOUT}
        )
        result = await run_one(client, CHECK)

        assert result.score == 0


class TestExpressions:
    """Tests for script expression helpers."""

    def test_extracts_expressions(self):
        assert script_expressions("w.yml", "a ${{ x }} b ${{y}}") == ["x", "y"]

    def test_unterminated_expression(self):
        with pytest.raises(InvalidWorkflowError):
            script_expressions("w.yml", "echo ${{ github.event.issue.title")

    def test_untrusted_contexts(self):
        assert is_untrusted_context("github.event.pull_request.body")
        assert is_untrusted_context("github.head_ref")
        assert is_untrusted_context("github.event.commits[0].message")
        assert not is_untrusted_context("github.event.pull_request.number")
        assert not is_untrusted_context("github.sha")
