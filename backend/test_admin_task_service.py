from datetime import date, timedelta

from services.admin_task_service import AdminTaskService
from services.day_log_service import today_str


def test_summary_counts_completed(db, user):
    today = today_str()
    first = AdminTaskService.add(db, user.id, " Pay rent ", today)
    AdminTaskService.add(db, user.id, "Email landlord", today)
    AdminTaskService.toggle(db, user.id, first.id)

    summary = AdminTaskService.summary(db, user.id, today)
    assert summary.total == 2 and summary.completed == 1
    assert summary.tasks[0].title == "Pay rent" and summary.tasks[0].completed


def test_empty_day_is_zero_snapshot(db, user):
    task = AdminTaskService.add(db, user.id, "Call bank", today_str())
    assert AdminTaskService.remove(db, user.id, task.id)
    summary = AdminTaskService.summary(db, user.id, today_str())
    assert summary is not None
    assert summary.total == 0 and summary.completed == 0


def test_purged_dates_keep_stored_snapshot(db, user):
    old = (date.today() - timedelta(days=30)).isoformat()
    assert AdminTaskService.summary(db, user.id, old) is None
