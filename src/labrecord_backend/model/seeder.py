import logging
from sqlalchemy.orm import Session

from .subject import Subject

logger = logging.getLogger(__name__)

DEFAULT_SUBJECTS = [
    ('Problem Solving and Python Programming', 'CS101', 'CSE', 'Fundamentals of Python programming and problem solving'),
    ('Programming in C Laboratory', 'CS102', 'CSE', 'C programming fundamentals and practices'),
    ('Data Structures Laboratory', 'CS201', 'CSE', 'Implementation of data structures in C/C++'),
    ('Object Oriented Programming Laboratory', 'CS202', 'CSE', 'OOP concepts using Java/C++'),
    ('Artificial Intelligence and Machine Learning', 'CS301', 'CSE', 'AI/ML algorithms and implementations'),
    ('Database Management Systems', 'CS302', 'CSE', 'SQL and database design'),
    ('Introduction to Operating Systems', 'CS303', 'CSE', 'OS concepts and system programming'),
    ('Computer Networks', 'CS304', 'IT', 'Network protocols and configurations'),
    ('Object Oriented Software Engineering', 'CS305', 'IT', 'Software engineering with OOP'),
    ('Neural Networks Deep Learning', 'CS401', 'AIDS', 'Deep learning architectures'),
    ('Cybersecurity', 'CS402', 'IT', 'Security principles and practices'),
    ('Mobile Application Development', 'CS403', 'IT', 'Android/iOS app development'),
    ('Virtualization', 'CS404', 'IT', 'Virtualization technologies'),
    ('Web Essentials', 'CS405', 'CSE', 'HTML, CSS, JavaScript fundamentals'),
    ('Java Programming', 'CS406', 'CSE', 'Advanced Java programming'),
    ('Systems', 'CS407', 'AIDS', 'Systems programming and design'),
]


def seed_subjects(db: Session) -> int:
    """Insert the default subject catalogue, skipping codes that already exist.

    Returns the number of subjects created.
    """
    existing = {code for (code,) in db.query(Subject.code).filter(Subject.code.isnot(None)).all()}

    created = 0
    for name, code, department, description in DEFAULT_SUBJECTS:
        if code in existing:
            continue
        db.add(Subject(name=name, code=code, department=department, description=description))
        created += 1

    db.commit()
    logger.info("Seeded %d subjects", created)
    return created
