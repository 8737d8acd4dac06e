import logging

from learnhub.courses.course_models import Course
from learnhub.courses.course_repository import CourseRepository

logger = logging.getLogger(__name__)

# Sample catalog, loaded only into an empty store
SAMPLE_COURSES = [
    {
        "id": "1",
        "title": "Advanced System Administration",
        "description": "Master Linux server management and automation workflows.",
        "instructor": "John Doe",
        "category": "IT & Infrastructure",
        "thumbnail": "https://picsum.photos/seed/sysadmin/600/400",
        "enrolled_count": 125,
        "lessons": [
            {
                "id": "l1",
                "title": "Introduction to Bash",
                "type": "video",
                "content": "Learn the basics of shell scripting.",
                "url": "https://www.youtube.com/watch?v=dQw4w9WgXcQ",
            },
            {
                "id": "l2",
                "title": "Permission Mastery",
                "type": "text",
                "content": "Deep dive into chmod and chown.",
            },
            {
                "id": "l3",
                "title": "Server Hardening Guide",
                "type": "pdf",
                "content": "Secure your assets.",
            },
            {
                "id": "l3q",
                "title": "Permissions Checkpoint",
                "type": "quiz",
                "content": "Confirm what you learned about file permissions.",
                "quiz": {
                    "id": "quiz-l3q",
                    "is_graded": True,
                    "pass_mark": 0.8,
                    "questions": [
                        {
                            "id": "q1",
                            "text": "Which command changes the owner of a file?",
                            "options": ["chmod", "chown", "chgrp", "umask"],
                            "correct_option_index": 1,
                            "explanation": "chown changes user and group ownership.",
                        },
                        {
                            "id": "q2",
                            "text": "What does mode 755 grant to group members?",
                            "options": ["read and execute", "read, write and execute", "nothing", "write only"],
                            "correct_option_index": 0,
                        },
                    ],
                },
            },
        ],
    },
    {
        "id": "2",
        "title": "Modern Web Development with React",
        "description": "Learn React from scratch to production-ready applications.",
        "instructor": "Jane Smith",
        "category": "Software Engineering",
        "thumbnail": "https://picsum.photos/seed/react/600/400",
        "enrolled_count": 350,
        "lessons": [
            {
                "id": "l4",
                "title": "React Hooks Deep Dive",
                "type": "video",
                "content": "Understand useEffect and useMemo.",
            }
        ],
    },
]


async def ensure_seed_data(repo: CourseRepository) -> int:
    """Load the sample catalog into an empty store; returns how many courses were added"""
    if await repo.count() > 0:
        return 0

    for data in SAMPLE_COURSES:
        await repo.create_course(Course(**data))

    logger.info("Seeded %d sample courses into %s", len(SAMPLE_COURSES), repo.backend)
    return len(SAMPLE_COURSES)
