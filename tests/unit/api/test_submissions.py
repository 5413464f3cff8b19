"""
Unit Tests for Submission and Dashboard Endpoints
"""
import pytest
from datetime import datetime, timedelta
from httpx import AsyncClient
from sqlalchemy import update

from app.models.roles import Student
from app.models.submission import Submission
from app.models.user import User


async def create_milestone(client: AsyncClient, admin_headers: dict, cohort_year: int, due_by: datetime,
                           questions=('README link', 'Poster link')) -> dict:
    """Milestone with one section; returns {'id', 'questionIds'}"""
    response = await client.post('/api/v1/deadlines', json={
        'cohortYear': cohort_year,
        'name': 'Milestone 1',
        'dueBy': due_by.isoformat(),
        'type': 'Milestone',
    }, headers=admin_headers)
    assert response.status_code == 201
    deadline_id = response.json()['id']

    response = await client.put(f'/api/v1/deadlines/{deadline_id}/questions', json={
        'sections': [{'name': 'Submission', 'questions': [{'question': q} for q in questions]}],
    }, headers=admin_headers)
    assert response.status_code == 200
    question_ids = [q['id'] for q in response.json()['sections'][0]['questions']]
    return {'id': deadline_id, 'questionIds': question_ids}


async def team_status(client: AsyncClient, admin_headers: dict, cohort_year: int, deadline_id: int) -> dict:
    response = await client.get(
        f'/api/v1/dashboard/admin/team-submissions?cohortYear={cohort_year}&deadlineId={deadline_id}',
        headers=admin_headers
    )
    assert response.status_code == 200
    return {row['fromProject']['id']: row['status'] for row in response.json()['rows']}


class TestSubmit:

    @pytest.mark.asyncio
    async def test_student_submits_for_own_project(
        self, client: AsyncClient, admin_headers, cohort, projects, student_user, auth_headers_for
    ):
        milestone = await create_milestone(client, admin_headers, cohort.academic_year, datetime.utcnow() + timedelta(days=7))

        response = await client.post('/api/v1/submissions', json={
            'deadlineId': milestone['id'],
            'fromProjectId': projects[0].id,
            'isDraft': False,
            'answers': [{'questionId': milestone['questionIds'][0], 'answer': 'https://example.com/readme'}],
        }, headers=auth_headers_for(student_user))

        assert response.status_code == 201
        data = response.json()
        assert data['fromProjectId'] == projects[0].id
        assert data['isDraft'] is False
        assert data['answers'] == [{'questionId': milestone['questionIds'][0], 'answer': 'https://example.com/readme'}]

    @pytest.mark.asyncio
    async def test_cannot_submit_for_other_project(
        self, client: AsyncClient, admin_headers, cohort, projects, student_user, auth_headers_for
    ):
        milestone = await create_milestone(client, admin_headers, cohort.academic_year, datetime.utcnow() + timedelta(days=7))

        response = await client.post('/api/v1/submissions', json={
            'deadlineId': milestone['id'],
            'fromProjectId': projects[1].id,
        }, headers=auth_headers_for(student_user))

        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_answer_to_foreign_question(
        self, client: AsyncClient, admin_headers, cohort, projects, student_user, auth_headers_for
    ):
        milestone = await create_milestone(client, admin_headers, cohort.academic_year, datetime.utcnow() + timedelta(days=7))

        response = await client.post('/api/v1/submissions', json={
            'deadlineId': milestone['id'],
            'fromProjectId': projects[0].id,
            'answers': [{'questionId': 9999, 'answer': 'x'}],
        }, headers=auth_headers_for(student_user))

        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_second_final_submission_rejected(
        self, client: AsyncClient, admin_headers, cohort, projects, student_user, auth_headers_for
    ):
        milestone = await create_milestone(client, admin_headers, cohort.academic_year, datetime.utcnow() + timedelta(days=7))
        body = {'deadlineId': milestone['id'], 'fromProjectId': projects[0].id, 'isDraft': False}

        first = await client.post('/api/v1/submissions', json=body, headers=auth_headers_for(student_user))
        second = await client.post('/api/v1/submissions', json=body, headers=auth_headers_for(student_user))

        assert first.status_code == 201
        assert second.status_code == 400


class TestEditSubmission:

    @pytest.mark.asyncio
    async def test_answers_replaced(
        self, client: AsyncClient, admin_headers, cohort, projects, student_user, auth_headers_for
    ):
        milestone = await create_milestone(client, admin_headers, cohort.academic_year, datetime.utcnow() + timedelta(days=7))
        first_q, second_q = milestone['questionIds']
        headers = auth_headers_for(student_user)
        created = await client.post('/api/v1/submissions', json={
            'deadlineId': milestone['id'],
            'fromProjectId': projects[0].id,
            'answers': [{'questionId': first_q, 'answer': 'old'}, {'questionId': second_q, 'answer': 'old'}],
        }, headers=headers)
        submission_id = created.json()['id']

        response = await client.put(f'/api/v1/submissions/{submission_id}', json={
            'answers': [{'questionId': second_q, 'answer': 'new'}],
            'isDraft': False,
        }, headers=headers)

        assert response.status_code == 200
        assert response.json()['answers'] == [{'questionId': second_q, 'answer': 'new'}]
        assert response.json()['isDraft'] is False

        detail = await client.get(f'/api/v1/submissions/{submission_id}', headers=headers)
        assert detail.status_code == 200
        assert detail.json()['deadline']['id'] == milestone['id']
        assert len(detail.json()['sections'][0]['questions']) == 2

    @pytest.mark.asyncio
    async def test_other_team_cannot_edit(
        self, client: AsyncClient, admin_headers, cohort, projects, students, student_user, auth_headers_for, db_session
    ):
        milestone = await create_milestone(client, admin_headers, cohort.academic_year, datetime.utcnow() + timedelta(days=7))
        created = await client.post('/api/v1/submissions', json={
            'deadlineId': milestone['id'],
            'fromProjectId': projects[0].id,
        }, headers=auth_headers_for(student_user))
        outsider = await db_session.get(User, students[1].user_id)

        response = await client.put(
            f'/api/v1/submissions/{created.json()["id"]}',
            json={'isDraft': False},
            headers=auth_headers_for(outsider)
        )

        assert response.status_code == 401


class TestSubmissionStatus:
    """Status on the admin table follows the last edit relative to dueBy"""

    @pytest.mark.asyncio
    async def test_on_time_then_late_after_edit(
        self, client: AsyncClient, admin_headers, cohort, projects, student_user, auth_headers_for, db_session
    ):
        now = datetime.utcnow()
        milestone = await create_milestone(client, admin_headers, cohort.academic_year, now + timedelta(days=7))
        headers = auth_headers_for(student_user)

        statuses = await team_status(client, admin_headers, cohort.academic_year, milestone['id'])
        assert statuses == {projects[0].id: 'Unsubmitted', projects[1].id: 'Unsubmitted'}

        created = await client.post('/api/v1/submissions', json={
            'deadlineId': milestone['id'],
            'fromProjectId': projects[0].id,
            'isDraft': False,
        }, headers=headers)
        submission_id = created.json()['id']

        # Move the submission and the deadline into the past, submission first
        await db_session.execute(
            update(Submission).where(Submission.id == submission_id).values(updated_at=now - timedelta(hours=2))
        )
        await db_session.commit()
        moved = await client.put(f'/api/v1/deadlines/{milestone["id"]}', json={
            'dueBy': (now - timedelta(hours=1)).isoformat(),
        }, headers=admin_headers)
        assert moved.status_code == 200

        statuses = await team_status(client, admin_headers, cohort.academic_year, milestone['id'])
        assert statuses[projects[0].id] == 'Submitted'

        await client.put(f'/api/v1/submissions/{submission_id}', json={'answers': []}, headers=headers)

        statuses = await team_status(client, admin_headers, cohort.academic_year, milestone['id'])
        assert statuses[projects[0].id] == 'Submitted_Late'
        assert statuses[projects[1].id] == 'Unsubmitted'

    @pytest.mark.asyncio
    async def test_drafts_do_not_count(
        self, client: AsyncClient, admin_headers, cohort, projects, student_user, auth_headers_for
    ):
        milestone = await create_milestone(client, admin_headers, cohort.academic_year, datetime.utcnow() + timedelta(days=7))
        await client.post('/api/v1/submissions', json={
            'deadlineId': milestone['id'],
            'fromProjectId': projects[0].id,
            'isDraft': True,
        }, headers=auth_headers_for(student_user))

        statuses = await team_status(client, admin_headers, cohort.academic_year, milestone['id'])

        assert statuses[projects[0].id] == 'Unsubmitted'

    @pytest.mark.asyncio
    async def test_filter_by_status(
        self, client: AsyncClient, admin_headers, cohort, projects, student_user, auth_headers_for
    ):
        milestone = await create_milestone(client, admin_headers, cohort.academic_year, datetime.utcnow() + timedelta(days=7))
        await client.post('/api/v1/submissions', json={
            'deadlineId': milestone['id'],
            'fromProjectId': projects[0].id,
            'isDraft': False,
        }, headers=auth_headers_for(student_user))

        response = await client.get(
            f'/api/v1/dashboard/admin/team-submissions?cohortYear={cohort.academic_year}'
            f'&deadlineId={milestone["id"]}&submissionStatus=Unsubmitted',
            headers=admin_headers
        )

        assert [row['fromProject']['id'] for row in response.json()['rows']] == [projects[1].id]

    @pytest.mark.asyncio
    async def test_student_dashboard(
        self, client: AsyncClient, admin_headers, cohort, projects, students, student_user, auth_headers_for
    ):
        milestone = await create_milestone(client, admin_headers, cohort.academic_year, datetime.utcnow() + timedelta(days=7))
        await client.post('/api/v1/submissions', json={
            'deadlineId': milestone['id'],
            'fromProjectId': projects[0].id,
            'isDraft': False,
        }, headers=auth_headers_for(student_user))

        response = await client.get(
            f'/api/v1/dashboard/student/{students[0].id}/deadlines', headers=auth_headers_for(student_user)
        )

        assert response.status_code == 200
        entries = response.json()
        assert entries[0]['deadline']['id'] == milestone['id']
        assert entries[0]['submission']['fromProjectId'] == projects[0].id

    @pytest.mark.asyncio
    async def test_student_without_project(self, client: AsyncClient, admin_headers, cohort, make_user, db_session):
        user = await make_user()
        student = Student(user_id=user.id, cohort_year=cohort.academic_year)
        db_session.add(student)
        await db_session.commit()

        response = await client.get(f'/api/v1/dashboard/student/{student.id}/deadlines', headers=admin_headers)

        assert response.status_code == 400
        assert response.json()['message'] == 'This student is not part of a project, and hence has no deadlines!'
