from __future__ import annotations

import asyncio

import pytest
from conftest import FakeTracker, api_issue

from issuesync.errors import FetchError
from issuesync.fetcher import sync_remote_to_local


def _remote() -> FakeTracker:
    return FakeTracker(
        [
            api_issue(2, "B", state="closed", body="Second body", labels=["bug", "urgent"]),
            api_issue(1, "A", state="open", body="First body"),
        ]
    )


def test_fetch_writes_one_file_per_issue(make_config):
    config = make_config()

    written = asyncio.run(sync_remote_to_local(config, _remote()))

    assert [p.name for p in written] == ["issue-2.md", "issue-1.md"]
    assert sorted(p.name for p in config.issues_dir.iterdir()) == ["issue-1.md", "issue-2.md"]
    assert (config.issues_dir / "issue-1.md").read_text(encoding="utf-8") == (
        "---\nnumber: 1\ntitle: A\nstate: open\nlabels: []\n---\n\nFirst body"
    )
    assert (config.issues_dir / "issue-2.md").read_text(encoding="utf-8") == (
        "---\nnumber: 2\ntitle: B\nstate: closed\nlabels: [bug, urgent]\n---\n\nSecond body"
    )


def test_fetch_is_idempotent(make_config):
    config = make_config()
    tracker = _remote()

    asyncio.run(sync_remote_to_local(config, tracker))
    first = {p.name: p.read_bytes() for p in config.issues_dir.iterdir()}
    asyncio.run(sync_remote_to_local(config, tracker))
    second = {p.name: p.read_bytes() for p in config.issues_dir.iterdir()}

    assert first == second
    assert tracker.list_calls == 2


def test_fetch_overwrites_local_edits_wholesale(make_config):
    config = make_config()
    config.issues_dir.mkdir(parents=True)
    stale = config.issues_dir / "issue-1.md"
    stale.write_text("---\nnumber: 1\ntitle: local edit\n---\n\nlots of local text " * 20)

    asyncio.run(sync_remote_to_local(config, FakeTracker([api_issue(1, "A", body="")])))

    assert stale.read_text(encoding="utf-8") == "---\nnumber: 1\ntitle: A\nstate: open\nlabels: []\n---\n\n"


def test_fetch_creates_missing_directory(make_config, tmp_path):
    config = make_config(issues_dir=tmp_path / "deep" / "nested" / "issues")

    asyncio.run(sync_remote_to_local(config, FakeTracker([api_issue(5, "E")])))

    assert (config.issues_dir / "issue-5.md").is_file()


def test_fetch_writes_empty_labels_when_label_data_is_unreadable(make_config):
    config = make_config()
    payload = api_issue(4, "D")
    payload["labels"] = "not-a-list"

    asyncio.run(sync_remote_to_local(config, FakeTracker([payload])))

    assert "labels: []" in (config.issues_dir / "issue-4.md").read_text(encoding="utf-8")


def test_fetch_emits_progress_line_per_issue(make_config, capsys):
    config = make_config()

    asyncio.run(sync_remote_to_local(config, _remote()))

    out = capsys.readouterr().out
    assert f"Synced issue #2 to {config.issues_dir / 'issue-2.md'}" in out
    assert f"Synced issue #1 to {config.issues_dir / 'issue-1.md'}" in out


def test_fetch_list_failure_raises_fetch_error(make_config, api_error):
    config = make_config()

    with pytest.raises(FetchError) as excinfo:
        asyncio.run(sync_remote_to_local(config, FakeTracker(list_error=api_error)))

    assert excinfo.value.__cause__ is api_error


def test_fetch_write_failure_aborts_remaining_writes(make_config):
    config = make_config()
    config.issues_dir.mkdir(parents=True)
    # A directory squatting on the target name makes the open() fail.
    (config.issues_dir / "issue-2.md").mkdir()
    tracker = FakeTracker([api_issue(3, "C"), api_issue(2, "B"), api_issue(1, "A")])

    with pytest.raises(FetchError) as excinfo:
        asyncio.run(sync_remote_to_local(config, tracker))

    assert excinfo.value.issue_number == 2
    assert (config.issues_dir / "issue-3.md").is_file()
    assert not (config.issues_dir / "issue-1.md").exists()


def test_fetch_directory_creation_failure(make_config, tmp_path):
    blocker = tmp_path / "blocker"
    blocker.write_text("file, not a directory")
    config = make_config(issues_dir=blocker / "issues")

    with pytest.raises(FetchError, match="Failed to create issues directory"):
        asyncio.run(sync_remote_to_local(config, FakeTracker([api_issue(1, "A")])))


def test_fetch_rejects_payload_without_number(make_config):
    config = make_config()

    with pytest.raises(FetchError, match="Malformed issue payload"):
        asyncio.run(sync_remote_to_local(config, FakeTracker([{"title": "no number"}])))
