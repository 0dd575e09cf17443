"""Example: drive the submission flow through the services, without Flask."""

import importlib

from config import get_settings_module

from src.attendance_spaces.attendance_spaces.container import build_container
from src.attendance_spaces.attendance_spaces.submissions.model import RequestMeta
from src.attendance_spaces.attendance_spaces.submissions.service import new_submission_token


def main():
    settings = importlib.import_module(get_settings_module())
    container = build_container(db_config=settings.DB_CONFIG)
    writer = container.submission_writer

    view = writer.open_form("TEND-00042")
    print(view.resolution.state.value, [f.key for f in view.fields])
    if not view.resolution.accepting:
        return

    outcome = writer.submit(
        "TEND-00042",
        {"name": "Ada Lovelace", "email": "ada@example.com", "student_id": "1815"},
        identity=None,
        submission_token=new_submission_token(),
        meta=RequestMeta(),
    )
    print(outcome.notification.message, outcome.record.record_id if outcome.record else None)


if __name__ == "__main__":
    main()
