from domain import AdminSummary, BadHabitEntry, DayLog, HabitEntry, LocalState
from services.xp_service import XPService


def _log(date="2024-03-01", entries=None, bad=None, summary=None):
    return DayLog(
        date=date,
        entries={k: HabitEntry(status=v) if isinstance(v, str) or v is None else v for k, v in (entries or {}).items()},
        bad_entries={k: BadHabitEntry(occurred=v) for k, v in (bad or {}).items()},
        admin_summary=summary,
    )


def test_prayer_and_clean_day_with_bonus(catalog, small_xp):
    log = _log(entries={"id-prayer": "done"}, bad={"id-league": False})
    assert XPService.is_bare_minimum_met(log, catalog)
    assert XPService.recalculate_day_xp(log, catalog, small_xp) == 10 + 5 + 20


def test_recalculation_is_pure(catalog, small_xp):
    log = _log(entries={"id-prayer": "done"}, bad={"id-league": True})
    before = log.model_dump()
    first = XPService.recalculate_day_xp(log, catalog, small_xp)
    second = XPService.recalculate_day_xp(log, catalog, small_xp)
    assert first == second == 10 + 1 + 20
    assert log.model_dump() == before


def test_stored_xp_does_not_feed_back(catalog, small_xp):
    fresh = _log(entries={"id-prayer": "done"}, bad={"id-league": False})
    stale = fresh.model_copy(update={"xp_earned": 9999})
    assert XPService.recalculate_day_xp(fresh, catalog, small_xp) == XPService.recalculate_day_xp(stale, catalog, small_xp)
    state = LocalState(logs=[stale])
    assert XPService.milestone_xp(state, stale.date, catalog, small_xp) == 0


def test_missed_and_unlogged_earn_nothing(catalog, small_xp):
    assert XPService.recalculate_day_xp(_log(entries={"id-prayer": "missed"}), catalog, small_xp) == 0
    assert XPService.recalculate_day_xp(_log(bad={"id-league": None}), catalog, small_xp) == 0
    assert XPService.recalculate_day_xp(None, catalog, small_xp) == 0


def test_later_is_not_done(catalog, small_xp):
    log = _log(entries={"id-prayer": "later"})
    assert XPService.recalculate_day_xp(log, catalog, small_xp) == 0
    assert not XPService.is_bare_minimum_met(log, catalog)


def test_unknown_and_inactive_habits_ignored(make_habit, small_xp):
    habits = [make_habit("reading"), make_habit("chore", is_active=False)]
    log = _log(entries={"id-reading": "done", "id-chore": "done", "id-ghost": "done"})
    assert XPService.recalculate_day_xp(log, habits, small_xp) == 15


def test_measured_value_zero_counts(make_habit, small_xp):
    habits = [make_habit("pages-read", category="measured")]
    assert XPService.recalculate_day_xp(_log(entries={"id-pages-read": HabitEntry(value=0)}), habits, small_xp) == 15
    assert XPService.recalculate_day_xp(_log(entries={"id-pages-read": HabitEntry()}), habits, small_xp) == 0


def test_bare_minimum_needs_at_least_one_habit(make_habit):
    habits = [make_habit("reading")]
    assert not XPService.is_bare_minimum_met(_log(entries={"id-reading": "done"}), habits)


def test_perfect_day(make_habit, small_xp):
    habits = [
        make_habit("prayer", is_bare_minimum=True),
        make_habit("reading"),
        make_habit("league", category="bad"),
    ]
    xp = dict(small_xp, PERFECT_DAY=100)
    perfect = _log(entries={"id-prayer": "done", "id-reading": "done"}, bad={"id-league": False})
    assert XPService.is_perfect(perfect, habits)
    assert XPService.recalculate_day_xp(perfect, habits, xp) == 10 + 15 + 5 + 20 + 100

    slipped = _log(entries={"id-prayer": "done", "id-reading": "done"}, bad={"id-league": True})
    assert not XPService.is_perfect(slipped, habits)


def test_admin_summary_xp(make_habit, small_xp):
    habits = [make_habit("reading")]
    partial = _log(summary=AdminSummary(total=3, completed=2))
    assert XPService.recalculate_day_xp(partial, habits, small_xp) == 10
    cleared = _log(summary=AdminSummary(total=3, completed=3))
    assert XPService.recalculate_day_xp(cleared, habits, small_xp) == 15 + 25
    empty = _log(summary=AdminSummary(total=0, completed=0))
    assert XPService.recalculate_day_xp(empty, habits, small_xp) == 0


def test_milestone_on_seventh_day(make_habit, small_xp):
    habits = [make_habit("reading")]
    state = LocalState(logs=[_log(date=f"2024-03-{d:02d}", entries={"id-reading": "done"}) for d in range(1, 8)])
    assert XPService.milestone_xp(state, "2024-03-07", habits, small_xp) == 200
    assert XPService.milestone_xp(state, "2024-03-06", habits, small_xp) == 0


def test_levels():
    assert XPService.get_level_for_xp(0)["level"] == 1
    assert XPService.get_level_for_xp(499)["level"] == 1
    level = XPService.get_level_for_xp(500)
    assert level["level"] == 2 and level["next_xp"] == 1200
    top = XPService.get_level_for_xp(1_000_000)
    assert top["level"] == 15 and top["next_xp"] == 140000


def test_apply_delta_floors_at_zero():
    state = LocalState(total_xp=30)
    assert XPService.apply_delta(state, 50, 0) == -50
    assert state.total_xp == 0
    XPService.apply_delta(state, 0, 600)
    assert state.total_xp == 600
    assert state.current_level == 2
