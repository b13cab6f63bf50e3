from typing import List, Optional

from googleapiclient.discovery import build

from models import Assignment, Course, Student
from services.utils import best_name_match


def get_classroom_service(creds):
    return build("classroom", "v1", credentials=creds, cache_discovery=False)


def _to_course(course: dict) -> Course:
    return Course(
        id=course.get("id", ""),
        name=course.get("name") or "Untitled Course",
        section=course.get("section", ""),
        description_heading=course.get("descriptionHeading", ""),
        room=course.get("room", ""),
        enrollment_code=course.get("enrollmentCode", ""),
        alternate_link=course.get("alternateLink", ""),
        course_state=course.get("courseState", "ACTIVE"),
    )


def list_courses(creds, limit: int = 10) -> List[Course]:
    # no courseStates filter so PROVISIONED courses are listed too
    response = get_classroom_service(creds).courses().list(pageSize=limit).execute()
    return [_to_course(c) for c in response.get("courses", [])]


def find_course_by_name(creds, name: str) -> Optional[Course]:
    """Case-insensitive name match over the user's courses; None when nothing matches."""
    courses = list_courses(creds, limit=50)
    return best_name_match(courses, name, key=lambda c: c.name)


def create_course(creds, name: str, section: str = None, description: str = None, room: str = None) -> Course:
    body = {
        "name": name,
        "section": section,
        "descriptionHeading": description,
        "room": room,
        "ownerId": "me",
        # ACTIVE needs a verified teacher account
        "courseState": "PROVISIONED",
    }
    course = get_classroom_service(creds).courses().create(
        body={k: v for k, v in body.items() if v is not None}
    ).execute()
    return _to_course(course)


def _due(work: dict) -> Optional[str]:
    due = work.get("dueDate")
    if not due:
        return None
    text = f"{due.get('year', 0):04d}-{due.get('month', 0):02d}-{due.get('day', 0):02d}"
    time = work.get("dueTime")
    if time:
        text += f" {time.get('hours', 0):02d}:{time.get('minutes', 0):02d}"
    return text


def list_assignments(creds, course_id: str, limit: int = 10) -> List[Assignment]:
    response = get_classroom_service(creds).courses().courseWork().list(
        courseId=course_id,
        pageSize=limit,
        orderBy="dueDate desc",
        courseWorkStates=["PUBLISHED"],
    ).execute()

    return [
        Assignment(
            id=w.get("id", ""),
            course_id=w.get("courseId", course_id),
            title=w.get("title") or "Untitled Assignment",
            description=w.get("description", ""),
            due=_due(w),
            alternate_link=w.get("alternateLink", ""),
            state=w.get("state", ""),
        )
        for w in response.get("courseWork", [])
    ]


def list_students(creds, course_id: str, limit: int = 30) -> List[Student]:
    response = get_classroom_service(creds).courses().students().list(
        courseId=course_id,
        pageSize=limit,
    ).execute()

    return [
        Student(
            course_id=s.get("courseId", course_id),
            user_id=s.get("userId", ""),
            full_name=s.get("profile", {}).get("name", {}).get("fullName") or "Unknown",
            email_address=s.get("profile", {}).get("emailAddress", ""),
        )
        for s in response.get("students", [])
    ]
