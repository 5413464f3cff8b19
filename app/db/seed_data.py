"""
Database Seed Data Module

Synthetic cohort for local development: an administrator, advisers, mentors,
two-member project teams, milestones with matching evaluations and peer
relations among each adviser's projects.

Run with: python -m app.db.seed_data          (seed)
          python -m app.db.seed_data clear    (drop and recreate the schema)
"""
import asyncio
import random
from datetime import datetime, timedelta
from typing import List

from faker import Faker
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import AsyncSessionLocal, init_db, drop_db
from app.core.security import get_password_hash
from app.models.cohort import Cohort
from app.models.deadline import Deadline, DeadlineType
from app.models.evaluation import EvaluationRelation
from app.models.project import Project, AchievementLevel
from app.models.roles import Student, Adviser, Mentor, Administrator
from app.models.user import User
from app.services.deadline_service import build_sections

fake = Faker()


# ==================== Sample Data Constants ====================

COHORT_YEAR = 2022
SEED_PASSWORD = "password"

NUM_ADVISERS = 3
NUM_MENTORS = 3
PROJECTS_PER_ADVISER = 3
NUM_MILESTONES = 3

MILESTONE_QUESTIONS = [
    "Project README (link)",
    "Project Poster (link)",
    "Project Video (link)",
]

EVALUATION_QUESTIONS = [
    ("What did the team do well?", False),
    ("What could the team improve on?", False),
    ("Any comments for the team's adviser?", True),
]


def _matric_no(index: int) -> str:
    return f"A{index:07d}{random.choice('ABCDEFGHJKLMNRUWXY')}"


def _nusnet_id(index: int) -> str:
    return f"E{index:07d}"


def _new_user(password_hash: str) -> User:
    return User(
        name=fake.name(),
        email=fake.unique.email().lower(),
        password=password_hash,
        self_intro=fake.sentence(nb_words=12),
    )


# ==================== Seed Functions ====================

async def seed_cohort(db: AsyncSession) -> Cohort:
    """Cohort running from May 2022 to the end of the next academic year"""
    cohort = Cohort(
        academic_year=COHORT_YEAR,
        start_date=datetime(COHORT_YEAR, 5, 1),
        end_date=datetime(COHORT_YEAR + 1, 4, 30, 23, 59, 59),
    )
    db.add(cohort)
    await db.flush()
    print(f"Created cohort {cohort.academic_year}")
    return cohort


async def seed_administrator(db: AsyncSession, password_hash: str) -> Administrator:
    user = User(name="Capstone Admin", email="admin@capstonehub.dev", password=password_hash)
    db.add(user)
    await db.flush()

    administrator = Administrator(
        user_id=user.id,
        start_date=datetime.utcnow() - timedelta(days=1),
        end_date=datetime.utcnow() + timedelta(days=365 * 5),
    )
    db.add(administrator)
    await db.flush()
    print(f"Created administrator {user.email}")
    return administrator


async def seed_staff(db: AsyncSession, password_hash: str, cohort: Cohort):
    """Advisers and mentors of the cohort"""
    advisers, mentors = [], []

    for index in range(1, NUM_ADVISERS + 1):
        user = _new_user(password_hash)
        db.add(user)
        await db.flush()
        adviser = Adviser(
            user_id=user.id,
            cohort_year=cohort.academic_year,
            matric_no=_matric_no(900 + index),
            nusnet_id=_nusnet_id(900 + index),
        )
        db.add(adviser)
        advisers.append(adviser)

    for _ in range(NUM_MENTORS):
        user = _new_user(password_hash)
        db.add(user)
        await db.flush()
        mentor = Mentor(user_id=user.id, cohort_year=cohort.academic_year)
        db.add(mentor)
        mentors.append(mentor)

    await db.flush()
    print(f"Created {len(advisers)} advisers and {len(mentors)} mentors")
    return advisers, mentors


async def seed_projects(
    db: AsyncSession,
    password_hash: str,
    cohort: Cohort,
    advisers: List[Adviser],
    mentors: List[Mentor],
) -> List[Project]:
    """Two students per project; every adviser gets PROJECTS_PER_ADVISER projects"""
    projects = []
    student_index = 1

    for adviser in advisers:
        for _ in range(PROJECTS_PER_ADVISER):
            team_name = fake.unique.catch_phrase()
            project = Project(
                name=team_name,
                team_name=team_name,
                achievement=random.choice(list(AchievementLevel)),
                cohort_year=cohort.academic_year,
                adviser_id=adviser.id,
                mentor_id=random.choice(mentors).id,
            )
            db.add(project)
            await db.flush()

            for _ in range(2):
                user = _new_user(password_hash)
                db.add(user)
                await db.flush()
                db.add(Student(
                    user_id=user.id,
                    cohort_year=cohort.academic_year,
                    project_id=project.id,
                    matric_no=_matric_no(student_index),
                    nusnet_id=_nusnet_id(student_index),
                ))
                student_index += 1

            projects.append(project)

    await db.flush()
    print(f"Created {len(projects)} projects with {student_index - 1} students")
    return projects


async def seed_deadlines(db: AsyncSession, cohort: Cohort) -> List[Deadline]:
    """Milestones 1 to 3, each followed two weeks later by the evaluation of it"""
    deadlines = []

    for number in range(1, NUM_MILESTONES + 1):
        milestone_due = cohort.start_date + timedelta(days=30 * number)
        milestone = Deadline(
            cohort_year=cohort.academic_year,
            name=f"Milestone {number}",
            desc=f"Submission for milestone {number}",
            due_by=milestone_due,
            type=DeadlineType.MILESTONE,
        )
        db.add(milestone)
        await db.flush()
        db.add_all(build_sections(milestone.id, [{
            "name": "Submission",
            "questions": [{"question": question} for question in MILESTONE_QUESTIONS],
        }]))

        evaluation = Deadline(
            cohort_year=cohort.academic_year,
            name=f"Evaluation {number}",
            desc=f"Peer evaluation of milestone {number}",
            due_by=milestone_due + timedelta(days=14),
            type=DeadlineType.EVALUATION,
            evaluating_milestone_id=milestone.id,
        )
        db.add(evaluation)
        await db.flush()
        db.add_all(build_sections(evaluation.id, [{
            "name": "Peer Evaluation",
            "questions": [
                {"question": question, "is_anonymous": anonymous}
                for question, anonymous in EVALUATION_QUESTIONS
            ],
        }]))

        deadlines.extend([milestone, evaluation])

    await db.flush()
    print(f"Created {len(deadlines)} deadlines")
    return deadlines


async def seed_relations(db: AsyncSession, projects: List[Project]) -> List[EvaluationRelation]:
    """Every project evaluates every other project under the same adviser"""
    relations = []
    by_adviser = {}
    for project in projects:
        by_adviser.setdefault(project.adviser_id, []).append(project)

    for group in by_adviser.values():
        for from_project in group:
            for to_project in group:
                if from_project.id == to_project.id:
                    continue
                relation = EvaluationRelation(from_project_id=from_project.id, to_project_id=to_project.id)
                db.add(relation)
                relations.append(relation)

    await db.flush()
    print(f"Created {len(relations)} evaluation relations")
    return relations


# ==================== Main Seed Function ====================

async def seed_all():
    """Seed all sample data"""
    print("=" * 50)
    print("Starting database seeding...")
    print("=" * 50)

    await init_db()
    password_hash = get_password_hash(SEED_PASSWORD)

    async with AsyncSessionLocal() as db:
        try:
            # Seed in order of dependencies
            cohort = await seed_cohort(db)
            await seed_administrator(db, password_hash)
            advisers, mentors = await seed_staff(db, password_hash, cohort)
            projects = await seed_projects(db, password_hash, cohort, advisers, mentors)
            await seed_deadlines(db, cohort)
            await seed_relations(db, projects)

            await db.commit()
            print("=" * 50)
            print(f"Database seeding completed! Every account uses the password '{SEED_PASSWORD}'")
            print("=" * 50)

        except Exception as e:
            await db.rollback()
            print(f"Error seeding database: {e}")
            raise


async def clear_all():
    """Drop and recreate the schema"""
    print("Clearing all data...")
    await drop_db()
    await init_db()
    print("All data cleared!")


if __name__ == "__main__":
    import sys

    if len(sys.argv) > 1 and sys.argv[1] == "clear":
        asyncio.run(clear_all())
    else:
        asyncio.run(seed_all())
