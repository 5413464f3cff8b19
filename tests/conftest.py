"""
Capstone Hub - Test Configuration and Fixtures
"""
import os
from datetime import datetime, timedelta
from typing import AsyncGenerator, List
import pytest
from httpx import AsyncClient, ASGITransport
from sqlalchemy import select
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.pool import NullPool
from faker import Faker

# Set testing environment
os.environ['ENVIRONMENT'] = 'testing'
os.environ['DATABASE_URL'] = 'sqlite+aiosqlite:///./test.db'
os.environ['SECRET_KEY'] = 'test-secret-key-for-testing-only'
os.environ['JWT_SECRET_KEY'] = 'test-jwt-secret-key-for-testing'
os.environ['RATE_LIMIT_ENABLED'] = 'false'
os.environ['BCRYPT_ROUNDS'] = '4'
os.environ['LOG_LEVEL'] = 'WARNING'

from app.main import app
from app.core.database import Base, get_db, get_session_factory, enable_sqlite_foreign_keys
from app.core.security import get_password_hash, create_access_token
from app.models.cohort import Cohort
from app.models.project import Project, AchievementLevel
from app.models.roles import Student, Adviser, Mentor, Administrator
from app.models.user import User
from app.services.email_service import get_email_notifier

fake = Faker()

TEST_PASSWORD = 'testpassword123'
CURRENT_YEAR = datetime.utcnow().year

# Test database setup
TEST_DATABASE_URL = 'sqlite+aiosqlite:///./test.db'
test_engine = create_async_engine(
    TEST_DATABASE_URL,
    echo=False,
    poolclass=NullPool,
    connect_args={'check_same_thread': False},
)
enable_sqlite_foreign_keys(test_engine)
TestSessionLocal = async_sessionmaker(
    test_engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
)


class RecordingNotifier:
    """Keeps every email instead of sending it"""

    def __init__(self):
        self.sent = []

    async def send_email(self, to_email, subject, html_content, text_content=None):
        self.sent.append({
            'to': to_email,
            'subject': subject,
            'html': html_content,
            'text': text_content,
        })
        return True

    @property
    def recipients(self) -> List[str]:
        return [email['to'] for email in self.sent]


@pytest.fixture(scope='function')
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Create a fresh database for each test; fixtures write through this session"""
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with TestSessionLocal() as session:
        yield session
        await session.rollback()

    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
async def client(db_session: AsyncSession, notifier: RecordingNotifier) -> AsyncGenerator[AsyncClient, None]:
    """Create test client; every request gets its own session on the test database"""
    async def override_get_db():
        async with TestSessionLocal() as session:
            try:
                yield session
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_session_factory] = lambda: TestSessionLocal
    app.dependency_overrides[get_email_notifier] = lambda: notifier

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url='http://test') as ac:
        yield ac

    app.dependency_overrides.clear()


# ==================== Users ====================

@pytest.fixture
def make_user(db_session: AsyncSession):
    """Factory for plain users"""
    async def _make_user(**fields) -> User:
        user = User(
            name=fields.pop('name', fake.name()),
            email=fields.pop('email', fake.unique.email().lower()),
            password=get_password_hash(fields.pop('password', TEST_PASSWORD)),
            **fields
        )
        db_session.add(user)
        await db_session.commit()
        await db_session.refresh(user)
        return user
    return _make_user


@pytest.fixture
def auth_headers_for():
    """Bearer headers signed for the given user"""
    def _headers(user: User) -> dict:
        token = create_access_token({'sub': str(user.id)})
        return {'Authorization': f'Bearer {token}'}
    return _headers


@pytest.fixture
async def cohort(db_session: AsyncSession) -> Cohort:
    """The cohort running today"""
    now = datetime.utcnow()
    cohort = Cohort(
        academic_year=CURRENT_YEAR,
        start_date=now - timedelta(days=30),
        end_date=now + timedelta(days=300),
    )
    db_session.add(cohort)
    await db_session.commit()
    return cohort


@pytest.fixture
async def admin_user(db_session: AsyncSession, make_user) -> User:
    """User holding an active administrator record"""
    user = await make_user(name='Admin User')
    db_session.add(Administrator(
        user_id=user.id,
        start_date=datetime.utcnow() - timedelta(days=1),
        end_date=datetime.utcnow() + timedelta(days=365),
    ))
    await db_session.commit()
    return user


@pytest.fixture
def admin_headers(admin_user: User, auth_headers_for) -> dict:
    return auth_headers_for(admin_user)


@pytest.fixture
async def adviser(db_session: AsyncSession, cohort: Cohort, make_user) -> Adviser:
    user = await make_user()
    adviser = Adviser(user_id=user.id, cohort_year=cohort.academic_year, matric_no='A0000901X', nusnet_id='E0000901')
    db_session.add(adviser)
    await db_session.commit()
    return adviser


@pytest.fixture
async def adviser_user(db_session: AsyncSession, adviser: Adviser) -> User:
    return await db_session.get(User, adviser.user_id)


@pytest.fixture
async def mentor(db_session: AsyncSession, cohort: Cohort, make_user) -> Mentor:
    user = await make_user()
    mentor = Mentor(user_id=user.id, cohort_year=cohort.academic_year)
    db_session.add(mentor)
    await db_session.commit()
    return mentor


# ==================== Projects ====================

@pytest.fixture
async def projects(db_session: AsyncSession, cohort: Cohort, adviser: Adviser, mentor: Mentor, make_user) -> List[Project]:
    """Two projects under the same adviser and mentor, one student each"""
    created = []
    for index in range(1, 3):
        project = Project(
            name=f'Project {index}',
            team_name=f'Team {index}',
            achievement=AchievementLevel.APOLLO,
            cohort_year=cohort.academic_year,
            adviser_id=adviser.id,
            mentor_id=mentor.id,
        )
        db_session.add(project)
        await db_session.flush()

        user = await make_user()
        db_session.add(Student(
            user_id=user.id,
            cohort_year=cohort.academic_year,
            project_id=project.id,
            matric_no=f'A000000{index}X',
            nusnet_id=f'E000000{index}',
        ))
        await db_session.commit()
        created.append(project)
    return created


@pytest.fixture
async def students(db_session: AsyncSession, projects: List[Project]) -> List[Student]:
    """Students of `projects`, in project order"""
    result = await db_session.execute(select(Student).order_by(Student.project_id))
    return list(result.scalars().all())


@pytest.fixture
async def student_user(db_session: AsyncSession, students: List[Student]) -> User:
    """Member of the first project"""
    return await db_session.get(User, students[0].user_id)
