"""Example: drive the service layer directly (no Flask).

Marks three students, posts the day and prints the session rollup.
"""

import importlib
import sys
from datetime import date, time
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from config import get_settings_module

from src.school_attendance.school_attendance.container import build_container
from src.school_attendance.school_attendance.core.enums import AttendanceStatus


def main():
    settings = importlib.import_module(get_settings_module())
    container = build_container(settings=settings)

    draft = container.attendance_service.new_draft(class_id="class-7a", subject_id="math", work_date=date.today())
    draft.set_status("student-1", AttendanceStatus.PRESENT, time(16, 5))
    draft.set_status("student-2", AttendanceStatus.PRESENT, time(16, 20))
    draft.set_status("student-3", AttendanceStatus.ABSENT)

    result = container.posting_coordinator.post_draft(draft, recorder_id="teacher-1")
    print(result.session)
    container.shutdown()


if __name__ == "__main__":
    main()
