from __future__ import annotations

import threading

import pytest
from conftest import FakeTracker, api_issue

from issuesync.concurrency import LoopBridge
from issuesync.errors import FetchError
from issuesync.runner import SyncRunner


class _RecordingTrigger:
    instances: list[_RecordingTrigger] = []

    def __init__(self, config, bridge, client):
        self.config = config
        self.bridge = bridge
        self.client = client
        self.started = False
        self.stopped = False
        _RecordingTrigger.instances.append(self)

    def start(self) -> None:
        self.started = True

    def stop(self, timeout=None) -> None:
        self.stopped = True


@pytest.fixture(autouse=True)
def _reset_triggers():
    _RecordingTrigger.instances = []


def test_one_shot_run_fetches_and_exits(make_config, capsys):
    config = make_config()
    tracker = FakeTracker([api_issue(1, "A"), api_issue(2, "B")])

    code = SyncRunner(
        config, tracker, poll_factory=_RecordingTrigger, watch_factory=_RecordingTrigger
    ).run()

    assert code == 0
    assert tracker.list_calls == 1
    assert sorted(p.name for p in config.issues_dir.iterdir()) == ["issue-1.md", "issue-2.md"]
    assert _RecordingTrigger.instances == []
    out = capsys.readouterr().out
    assert "Performing initial sync from GitHub to local..." in out
    assert "One-time sync completed. Use --watch for continuous sync." in out


def test_startup_failure_is_fatal_and_arms_nothing(make_config, api_error):
    config = make_config(watch=True)
    runner = SyncRunner(
        config,
        FakeTracker(list_error=api_error),
        poll_factory=_RecordingTrigger,
        watch_factory=_RecordingTrigger,
    )

    with pytest.raises(FetchError):
        runner.run()

    assert _RecordingTrigger.instances == []


def test_watch_mode_arms_both_triggers_with_shared_config(make_config, capsys):
    config = make_config(watch=True)
    tracker = FakeTracker([api_issue(1, "A")])
    bridge = LoopBridge()
    stop = threading.Event()
    runner = SyncRunner(
        config,
        tracker,
        bridge,
        poll_factory=_RecordingTrigger,
        watch_factory=_RecordingTrigger,
        idle_wake=0.01,
    )

    result: list[int] = []
    thread = threading.Thread(target=lambda: result.append(runner.run(stop)))
    thread.start()
    for _ in range(500):
        if len(_RecordingTrigger.instances) == 2:
            break
        stop.wait(0.01)
    stop.set()
    thread.join(timeout=5)

    assert result == [0]
    assert len(_RecordingTrigger.instances) == 2
    for trigger in _RecordingTrigger.instances:
        assert trigger.config is config
        assert trigger.bridge is bridge
        assert trigger.client is tracker
        assert trigger.started and trigger.stopped
    assert "Watch mode enabled. Monitoring for changes..." in capsys.readouterr().out


def test_watch_mode_blocks_until_stopped(make_config):
    config = make_config(watch=True)
    stop = threading.Event()
    runner = SyncRunner(
        config,
        FakeTracker([]),
        poll_factory=_RecordingTrigger,
        watch_factory=_RecordingTrigger,
        idle_wake=0.01,
    )
    thread = threading.Thread(target=runner.run, args=(stop,), daemon=True)
    thread.start()

    thread.join(timeout=0.2)
    assert thread.is_alive()

    stop.set()
    thread.join(timeout=5)
    assert not thread.is_alive()
