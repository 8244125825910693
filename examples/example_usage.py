"""Drive the pipeline through the service layer, without Flask.

Uses the in-memory backend and the demo directory, so it needs no database:

    python examples/example_usage.py
"""

import logging
from datetime import date

from attendance_pipeline.container import build_container
from attendance_pipeline.core.enums import Role
from attendance_pipeline.directory.model import Caller


def main():
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    container = build_container(storage_backend="memory")
    teacher = Caller(profile_id=2, role=Role.TEACHER, name="Teacher Demo")
    student = Caller(profile_id=3, role=Role.STUDENT, name="Student A")

    session_id = container.session_service.create_session(
        caller=teacher, subject_id=1, label="Week 1 lecture", mode="auto_recognition"
    )

    outcome = container.recognition_service.process_attempt(
        session_id=session_id, student_id=3, image_ref="captures/3.jpg", confidence=0.97, liveness=0.91, caller=teacher
    )
    print(outcome.message)

    outcome = container.recognition_service.process_attempt(
        session_id=session_id, student_id=4, image_ref="captures/4.jpg", confidence=0.80, liveness=0.70, caller=teacher
    )
    print(outcome.message)
    container.ledger_service.mark_attendance(session_id=session_id, student_id=4, status="absent", caller=teacher)

    request_id = container.leave_service.submit(
        caller=student, start_date=date(2026, 3, 2), end_date=date(2026, 3, 4), reason="Medical", subject_id=1
    )
    container.leave_service.review(request_id=request_id, status="approved", caller=teacher, notes="Get well soon")

    container.notification_queue.join()
    for entry in container.leaderboard_service.leaderboard(caller=teacher, timeframe="week"):
        print(entry.rank, entry.name, entry.score)
    print(container.report_service.generate(caller=teacher, report_type="summary").to_dict())


if __name__ == "__main__":
    main()
