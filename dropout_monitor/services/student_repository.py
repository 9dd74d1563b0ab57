from sqlalchemy.orm import Session
from uuid import uuid4

from dropout_monitor.models.student import Student


def find_student(db: Session, student_id: str) -> Student | None:
    return (
        db.query(Student)
        .filter(Student.student_id == student_id, Student.deleted_at.is_(None))
        .first()
    )


def upsert_student(
    db: Session,
    student_id: str,
    student_name: str,
    attendance: list | None,
    assignments: list | None,
    contacts: list | None,
) -> Student:
    """Insert a student or overwrite its raw records, keyed by ``student_id``.

    Flushes but does not commit; the caller owns the transaction.
    """
    student = find_student(db, student_id)

    if student:
        student.student_name = student_name
        student.attendance = attendance
        student.assignments = assignments
        student.contacts = contacts
    else:
        student = Student(
            id=str(uuid4()),
            student_id=student_id,
            student_name=student_name,
            attendance=attendance,
            assignments=assignments,
            contacts=contacts,
        )
        db.add(student)

    db.flush()
    return student
