"""Tests for phase change watcher and session recorder."""

from breathpacer.timing import PhaseChangeWatcher, SessionRecorder


def test_phase_change_watcher_reports_transitions(make_timer, scheduler, box4):
    timer = make_timer(box4)
    changes = []
    PhaseChangeWatcher(timer, lambda prev, cur: changes.append((prev and prev.phase_key, cur.phase_key)))

    timer.start()
    scheduler.advance(16)

    assert changes == [
        (None, "inhale"),
        ("inhale", "hold1"),
        ("hold1", "exhale"),
        ("exhale", "hold2"),
        ("hold2", "inhale"),
    ]


def test_single_phase_reports_every_cycle(make_timer, scheduler, make_technique):
    timer = make_timer(make_technique([2]))
    changes = []
    PhaseChangeWatcher(timer, lambda prev, cur: changes.append(cur.phase_index))
    timer.start()
    scheduler.advance(6)
    assert changes == [0, 0, 0, 0]


def test_watcher_resets_with_timer(make_timer, scheduler, box4):
    timer = make_timer(box4)
    changes = []
    watcher = PhaseChangeWatcher(timer, lambda prev, cur: changes.append(prev))
    timer.start()
    scheduler.advance(1)
    timer.reset()
    assert watcher.current is None
    timer.start()
    assert changes == [None, None]


def test_watcher_close_detaches(make_timer, scheduler, box4):
    timer = make_timer(box4)
    changes = []
    watcher = PhaseChangeWatcher(timer, lambda prev, cur: changes.append(cur))
    watcher.close()
    timer.start()
    scheduler.advance(5)
    assert changes == []
    assert timer.get_capabilities()["listener_count"] == 0


def test_session_recorder(make_timer, scheduler, box4):
    timer = make_timer(box4)
    recorder = SessionRecorder(timer)

    timer.start()
    scheduler.advance(33)
    timer.stop()

    kinds = [r.kind for r in recorder.records]
    assert kinds == ["start", "cycleComplete", "cycleComplete", "stop"]
    assert recorder.records[-1].current_time == 33
    assert recorder.cycles_completed == 2
    summary = recorder.summary()
    assert summary == {"technique_id": "box4", "sessions": 1, "cycles_completed": 2, "records": 4}
    assert recorder.records[1].to_dict()["details"] == {"technique_id": "box4", "cycles_completed": 1}

    recorder.close()
    timer.start()
    assert len(recorder.records) == 4
