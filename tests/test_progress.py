from __future__ import annotations

import pytest
from pydantic import ValidationError

from research_swarm.models.progress import Phase, ProgressState, RunStatus, StepStatus
from research_swarm.models.research import SourceRecord
from research_swarm.services.progress import ProgressReporter

RECORDS = [
    SourceRecord(id=1, url="https://x.org", title="X"),
    SourceRecord(id=2, url="https://m.org", title="M"),
]


@pytest.fixture
def pushed() -> list[ProgressState]:
    return []


@pytest.fixture
def reporter(pushed) -> ProgressReporter:
    return ProgressReporter("solid state batteries", pushed.append, depth=3)


def test_initial_state_is_all_pending():
    state = ProgressState.initial("topic", 3)

    assert state.completed_steps == 0
    assert state.total_sources == 0
    assert state.execution_time == "0s"
    assert state.status is RunStatus.IN_FLIGHT
    assert [s.id for s in state.steps] == [1, 2, 3, 4]
    assert [s.action for s in state.steps] == [
        "Strategic Planning",
        "Vector Search",
        "Cognitive Extraction",
        "Synthesis",
    ]
    assert [s.icon.value for s in state.steps] == ["analyze", "search", "read", "write"]
    assert all(s.status is StepStatus.PENDING for s in state.steps)


def test_serialised_state_includes_completed_steps():
    payload = ProgressState.initial("topic", 3).model_dump(mode="json")

    assert payload["completed_steps"] == 0
    assert payload["steps"][0]["status"] == "pending"


def test_state_always_carries_exactly_four_steps():
    steps = ProgressState.initial("topic", 3).steps

    assert isinstance(steps, tuple)
    for wrong in (steps[:3], steps + steps[:1]):
        with pytest.raises(ValidationError):
            ProgressState(topic="topic", depth=3, steps=wrong)


def test_start_pushes_initial_snapshot(reporter, pushed):
    reporter.start()

    assert len(pushed) == 1
    assert pushed[0].completed_steps == 0

    with pytest.raises(RuntimeError):
        reporter.start()


def test_full_run_advances_one_step_per_push(reporter, pushed):
    reporter.start()
    reporter.complete(Phase.PLANNING, "Identified 2 research vectors.", next_description="Dispatching 2...")
    reporter.record_sources(RECORDS)
    reporter.complete(Phase.SEARCH, "Retrieved verified data from 2 sources.")
    reporter.complete(Phase.EXTRACTION, "Extracted verified facts with citations.")
    reporter.complete(Phase.SYNTHESIS, "Report generated.")

    assert [s.completed_steps for s in pushed] == [0, 1, 2, 3, 4]
    assert pushed[1].steps[1].description == "Dispatching 2..."
    assert pushed[1].total_sources == 0
    assert pushed[2].total_sources == 2
    assert [s.url for s in pushed[2].sources] == ["https://x.org", "https://m.org"]
    assert pushed[2].sources[0].type == "web"
    assert pushed[2].sources[0].relevance == 100
    assert pushed[-1].status is RunStatus.DONE


def test_execution_time_is_only_set_at_synthesis(reporter, pushed):
    reporter.start()
    reporter.complete(Phase.PLANNING, "planned")
    reporter.record_sources(RECORDS)
    reporter.complete(Phase.SEARCH, "searched")
    reporter.complete(Phase.EXTRACTION, "extracted")

    assert all(s.execution_time == "0s" for s in pushed)

    reporter.complete(Phase.SYNTHESIS, "done")

    assert pushed[-1].execution_time.endswith("s")
    float(pushed[-1].execution_time[:-1])


def test_phases_cannot_be_skipped(reporter):
    reporter.start()

    with pytest.raises(RuntimeError):
        reporter.complete(Phase.SEARCH, "too early")

    reporter.complete(Phase.PLANNING, "planned")
    with pytest.raises(RuntimeError):
        reporter.complete(Phase.PLANNING, "again")


def test_search_requires_recorded_sources(reporter):
    reporter.start()
    reporter.complete(Phase.PLANNING, "planned")

    with pytest.raises(RuntimeError):
        reporter.complete(Phase.SEARCH, "no sources yet")


def test_sources_are_recorded_once(reporter):
    reporter.record_sources(RECORDS)

    with pytest.raises(RuntimeError):
        reporter.record_sources(RECORDS)


def test_fail_keeps_completed_steps_and_marks_rest(reporter, pushed):
    reporter.start()
    reporter.complete(Phase.PLANNING, "planned")

    reporter.fail(RuntimeError("search down"))

    final = pushed[-1]
    assert final.status is RunStatus.FAILED
    assert final.completed_steps == 1
    assert final.steps[0].description == "planned"
    assert [s.description for s in final.steps[1:]] == ["Failed", "Failed", "Failed"]

    reporter.fail(RuntimeError("again"))
    assert len(pushed) == 3

    with pytest.raises(RuntimeError):
        reporter.complete(Phase.SEARCH, "after failure")


def test_pushed_snapshots_are_independent(reporter, pushed):
    reporter.start()
    reporter.complete(Phase.PLANNING, "planned")

    pushed[0].steps[0].description = "mutated by consumer"

    assert reporter.state.steps[0].description == "planned"
    assert pushed[0].completed_steps == 0
