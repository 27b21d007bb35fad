import pytest

from domain import DayLog, LocalState, SprintData
from services.sprint_service import SprintService


def _sprint(intensity="moderate", **kw):
    data = dict(id="s1", name="Exams", intensity=intensity, start_date="2024-04-01", deadline="2024-04-14")
    data.update(kw)
    return SprintData(**data)


def test_no_sprint_means_normal_context():
    ctx = SprintService.derive_sprint_context(None)
    assert not ctx.active
    assert ctx.target_multiplier == 1.0
    assert not SprintService.derive_sprint_context(_sprint(status="completed")).active


@pytest.mark.parametrize("intensity,bare_only,single,protect,mult", [
    ("moderate", False, False, False, 0.75),
    ("intense", True, False, False, 0.5),
    ("critical", True, True, True, 0.5),
])
def test_context_flags(intensity, bare_only, single, protect, mult):
    ctx = SprintService.derive_sprint_context(_sprint(intensity))
    assert ctx.active and ctx.name == "Exams"
    assert ctx.bare_minimum_only is bare_only
    assert ctx.single_checkin is single
    assert ctx.protect_streaks is protect
    assert ctx.target_multiplier == mult


def test_prompted_habits_under_bare_minimum_only(make_habit):
    habits = [
        make_habit("prayer", is_bare_minimum=True),
        make_habit("chore"),
        make_habit("league", category="bad"),
    ]
    prompted, extras = SprintService.prompted_habits(habits, SprintService.derive_sprint_context(_sprint("intense")))
    assert [h.slug for h in prompted] == ["prayer", "league"]
    assert [h.slug for h in extras] == ["chore"]

    prompted, extras = SprintService.prompted_habits(habits, SprintService.derive_sprint_context(None))
    assert len(prompted) == 3 and extras == []


def test_scaled_targets_round_half_up():
    moderate = SprintService.derive_sprint_context(_sprint("moderate"))
    intense = SprintService.derive_sprint_context(_sprint("intense"))
    assert SprintService.scaled_target("training-minutes", moderate) == 34
    assert SprintService.scaled_target("training-minutes", intense) == 23
    assert SprintService.scaled_target("bible-chapters", moderate) == 2
    assert SprintService.scaled_target("deep-work", intense) == 2
    assert SprintService.scaled_target("prayer", moderate) is None
    assert SprintService.scaled_target("pages-read", SprintService.derive_sprint_context(None)) == 20


def test_start_sprint_rules():
    state = LocalState()
    sprint = SprintService.start_sprint(state, "  Launch ", "critical", "2024-04-20", today="2024-04-01")
    assert state.active_sprint == sprint
    assert sprint.name == "Launch"
    assert sprint.start_date == "2024-04-01"
    with pytest.raises(ValueError):
        SprintService.start_sprint(state, "Again", "moderate", "2024-04-20", today="2024-04-02")

    with pytest.raises(ValueError):
        SprintService.start_sprint(LocalState(), "Late", "moderate", "2024-03-01", today="2024-04-01")
    with pytest.raises(ValueError):
        SprintService.start_sprint(LocalState(), "Bad", "moderate", "someday", today="2024-04-01")


def test_end_sprint_archives():
    state = LocalState(logs=[
        DayLog(date="2024-04-01", bare_minimum_met=True),
        DayLog(date="2024-04-02", bare_minimum_met=False),
        DayLog(date="2024-04-03", bare_minimum_met=True),
        DayLog(date="2024-04-20", bare_minimum_met=True),
    ])
    state.active_sprint = _sprint()
    archived = SprintService.end_sprint(state, "cancelled", now="2024-04-05T10:00:00+00:00")
    assert state.active_sprint is None
    assert state.sprint_history == [archived]
    assert archived.status == "cancelled"
    assert archived.bare_minimum_days_met == 2
    assert SprintService.end_sprint(state) is None


def test_protected_dates():
    from datetime import date
    state = LocalState(sprint_history=[
        _sprint("critical", status="completed", completed_at="2024-04-03T08:00:00"),
        _sprint("moderate", id="s2", start_date="2024-04-10", status="completed"),
    ])
    state.active_sprint = _sprint("critical", id="s3", start_date="2024-04-20", deadline="2024-05-01")
    dates = SprintService.protected_dates(state, date(2024, 4, 21))
    assert dates == {"2024-04-01", "2024-04-02", "2024-04-03", "2024-04-20", "2024-04-21"}
    assert SprintService.is_protected(state, "2024-04-02")
    assert not SprintService.is_protected(state, "2024-04-11")
    assert not SprintService.is_protected(state, "garbage")
