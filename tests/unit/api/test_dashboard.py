"""
Unit Tests for the Dashboard Read Models
"""
import pytest
from datetime import datetime, timedelta
from httpx import AsyncClient

from app.models.roles import Mentor
from app.models.user import User


async def create_deadline(client: AsyncClient, admin_headers: dict, cohort_year: int, type_: str, name: str,
                          evaluating_milestone_id: int = None) -> int:
    body = {
        'cohortYear': cohort_year,
        'name': name,
        'dueBy': (datetime.utcnow() + timedelta(days=7)).isoformat(),
        'type': type_,
    }
    if evaluating_milestone_id is not None:
        body['evaluatingMilestoneId'] = evaluating_milestone_id
    response = await client.post('/api/v1/deadlines', json=body, headers=admin_headers)
    assert response.status_code == 201
    return response.json()['id']


async def submit(client: AsyncClient, headers: dict, **fields) -> dict:
    response = await client.post('/api/v1/submissions', json={'isDraft': False, **fields}, headers=headers)
    assert response.status_code == 201
    return response.json()


@pytest.fixture
async def member_headers(db_session, students, auth_headers_for):
    """Auth headers for the student of each project, in project order"""
    headers = []
    for student in students:
        headers.append(auth_headers_for(await db_session.get(User, student.user_id)))
    return headers


@pytest.fixture
async def evaluation_round(client: AsyncClient, admin_headers, cohort, projects, member_headers):
    """
    Milestone 1 and the Evaluation of it, peer relations both ways between the
    two projects, and a final Milestone 1 submission from the second project.
    """
    milestone_id = await create_deadline(client, admin_headers, cohort.academic_year, 'Milestone', 'Milestone 1')
    evaluation_id = await create_deadline(
        client, admin_headers, cohort.academic_year, 'Evaluation', 'Evaluation 1', evaluating_milestone_id=milestone_id
    )
    response = await client.post('/api/v1/relations/group', json={'projectIds': [p.id for p in projects]},
                                 headers=admin_headers)
    assert response.json()['count'] == 2

    milestone_submission = await submit(client, member_headers[1], deadlineId=milestone_id,
                                        fromProjectId=projects[1].id)
    return {
        'milestoneId': milestone_id,
        'evaluationId': evaluation_id,
        'milestoneSubmissionId': milestone_submission['id'],
    }


async def team_rows(client: AsyncClient, admin_headers: dict, cohort_year: int, deadline_id: int) -> list:
    response = await client.get('/api/v1/dashboard/admin/team-submissions', params={
        'cohortYear': cohort_year, 'deadlineId': deadline_id,
    }, headers=admin_headers)
    assert response.status_code == 200
    return response.json()['rows']


class TestStudentEvaluations:

    @pytest.mark.asyncio
    async def test_evaluation_entry_carries_target_submission(
        self, client: AsyncClient, projects, students, member_headers, evaluation_round
    ):
        await submit(client, member_headers[0], deadlineId=evaluation_round['evaluationId'],
                     fromProjectId=projects[0].id, toProjectId=projects[1].id)

        response = await client.get(f'/api/v1/dashboard/student/{students[0].id}/deadlines',
                                    headers=member_headers[0])

        entries = response.json()
        assert [e['deadline']['type'] for e in entries] == ['Milestone', 'Evaluation']
        evaluation = entries[1]
        assert evaluation['toProject']['id'] == projects[1].id
        assert evaluation['toProjectSubmission']['id'] == evaluation_round['milestoneSubmissionId']
        assert evaluation['submission']['toProjectId'] == projects[1].id

    @pytest.mark.asyncio
    async def test_target_without_milestone_submission(
        self, client: AsyncClient, projects, students, member_headers, evaluation_round
    ):
        response = await client.get(f'/api/v1/dashboard/student/{students[1].id}/deadlines',
                                    headers=member_headers[1])

        evaluation = [e for e in response.json() if e['deadline']['type'] == 'Evaluation'][0]
        assert evaluation['toProject']['id'] == projects[0].id
        assert 'toProjectSubmission' not in evaluation
        assert 'submission' not in evaluation

    @pytest.mark.asyncio
    async def test_received_evaluations_include_adviser(
        self, client: AsyncClient, projects, students, adviser_user, member_headers, evaluation_round,
        auth_headers_for
    ):
        await submit(client, auth_headers_for(adviser_user), deadlineId=evaluation_round['evaluationId'],
                     fromUserId=adviser_user.id, toProjectId=projects[0].id)
        await submit(client, member_headers[1], deadlineId=evaluation_round['evaluationId'],
                     fromProjectId=projects[1].id, toProjectId=projects[0].id)

        response = await client.get(f'/api/v1/dashboard/student/{students[0].id}/evaluations-feedbacks',
                                    headers=member_headers[0])

        assert response.status_code == 200
        entries = response.json()
        assert [e['deadline']['id'] for e in entries] == [evaluation_round['evaluationId']]
        peer, from_adviser = entries[0]['submissions']
        assert peer['fromProject']['id'] == projects[1].id
        assert peer['submission']['fromProjectId'] == projects[1].id
        assert from_adviser['fromUser']['id'] == adviser_user.id
        assert from_adviser['submission']['fromUserId'] == adviser_user.id

    @pytest.mark.asyncio
    async def test_reads_are_repeatable(self, client: AsyncClient, students, member_headers, evaluation_round):
        url = f'/api/v1/dashboard/student/{students[0].id}/deadlines'

        first = await client.get(url, headers=member_headers[0])
        second = await client.get(url, headers=member_headers[0])

        assert first.json() == second.json()

    @pytest.mark.asyncio
    async def test_type_filter(self, client: AsyncClient, admin_headers, cohort, students, member_headers,
                               evaluation_round):
        await create_deadline(client, admin_headers, cohort.academic_year, 'Feedback', 'Adviser Feedback')
        url = f'/api/v1/dashboard/student/{students[0].id}/deadlines'

        everything = await client.get(url, headers=member_headers[0])
        feedback = await client.get(url, params={'type': 'Feedback'}, headers=member_headers[0])
        unknown = await client.get(url, params={'type': 'Poster'}, headers=member_headers[0])

        assert [e['deadline']['type'] for e in everything.json()] == ['Milestone', 'Evaluation', 'Feedback']
        assert [e['deadline']['type'] for e in feedback.json()] == ['Feedback']
        assert unknown.status_code == 400


class TestAdviserDashboard:

    @pytest.mark.asyncio
    async def test_feedback_owed_per_project(
        self, client: AsyncClient, admin_headers, cohort, projects, adviser, adviser_user, auth_headers_for
    ):
        feedback_id = await create_deadline(client, admin_headers, cohort.academic_year, 'Feedback', 'Adviser Feedback')

        response = await client.get(f'/api/v1/dashboard/adviser/{adviser.id}/deadlines',
                                    headers=auth_headers_for(adviser_user))

        assert response.status_code == 200
        entries = response.json()
        assert [e['deadline']['id'] for e in entries] == [feedback_id, feedback_id]
        assert [e['toProject']['id'] for e in entries] == [p.id for p in projects]
        assert all('submission' not in e for e in entries)

    @pytest.mark.asyncio
    async def test_evaluations_resolve_milestone_submission(
        self, client: AsyncClient, projects, adviser, adviser_user, auth_headers_for, evaluation_round
    ):
        headers = auth_headers_for(adviser_user)
        own = await submit(client, headers, deadlineId=evaluation_round['evaluationId'],
                           fromUserId=adviser_user.id, toProjectId=projects[1].id)

        response = await client.get(f'/api/v1/dashboard/adviser/{adviser.id}/deadlines', headers=headers)

        entries = response.json()
        assert [e['toProject']['id'] for e in entries] == [p.id for p in projects]
        assert entries[0]['toProject'].get('submissionId') is None
        assert entries[1]['toProject']['submissionId'] == evaluation_round['milestoneSubmissionId']
        assert 'submission' not in entries[0]
        assert entries[1]['submission']['id'] == own['id']

    @pytest.mark.asyncio
    async def test_type_filter(self, client: AsyncClient, admin_headers, cohort, adviser, adviser_user,
                               auth_headers_for, evaluation_round):
        await create_deadline(client, admin_headers, cohort.academic_year, 'Feedback', 'Adviser Feedback')

        response = await client.get(f'/api/v1/dashboard/adviser/{adviser.id}/deadlines',
                                    params={'type': 'Evaluation'}, headers=auth_headers_for(adviser_user))

        assert {e['deadline']['type'] for e in response.json()} == {'Evaluation'}

    @pytest.mark.asyncio
    async def test_submissions_grouped_by_deadline(
        self, client: AsyncClient, admin_headers, cohort, projects, adviser, adviser_user, student_user,
        auth_headers_for
    ):
        milestone_id = await create_deadline(client, admin_headers, cohort.academic_year, 'Milestone', 'Milestone 1')
        await submit(client, auth_headers_for(student_user), deadlineId=milestone_id, fromProjectId=projects[0].id)

        response = await client.get(f'/api/v1/dashboard/adviser/{adviser.id}/submissions',
                                    headers=auth_headers_for(adviser_user))

        entries = response.json()
        assert len(entries) == 1
        assert [s['fromProject']['id'] for s in entries[0]['submissions']] == [projects[0].id]

    @pytest.mark.asyncio
    async def test_other_users_are_turned_away(self, client: AsyncClient, adviser, student_user, auth_headers_for):
        response = await client.get(f'/api/v1/dashboard/adviser/{adviser.id}/deadlines',
                                    headers=auth_headers_for(student_user))

        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_adviser_without_projects(self, client: AsyncClient, adviser, admin_headers):
        response = await client.get(f'/api/v1/dashboard/adviser/{adviser.id}/deadlines', headers=admin_headers)

        assert response.status_code == 400
        assert 'not in charge of any projects' in response.json()['message']


class TestMentorDashboard:

    @pytest.mark.asyncio
    async def test_milestone_submissions(
        self, client: AsyncClient, admin_headers, cohort, projects, mentor, student_user, auth_headers_for, db_session
    ):
        milestone_id = await create_deadline(client, admin_headers, cohort.academic_year, 'Milestone', 'Milestone 1')
        await submit(client, auth_headers_for(student_user), deadlineId=milestone_id, fromProjectId=projects[0].id)
        mentor_user = await db_session.get(User, mentor.user_id)

        response = await client.get(f'/api/v1/dashboard/mentor/{mentor.id}/submissions',
                                    headers=auth_headers_for(mentor_user))

        assert response.status_code == 200
        rows = response.json()[0]['submissions']
        assert [r['fromProject']['id'] for r in rows] == [p.id for p in projects]
        assert rows[0]['submission']['fromProjectId'] == projects[0].id
        assert rows[1].get('submission') is None

    @pytest.mark.asyncio
    async def test_type_filter_outside_milestones(self, client: AsyncClient, admin_headers, cohort, projects, mentor):
        await create_deadline(client, admin_headers, cohort.academic_year, 'Milestone', 'Milestone 1')

        response = await client.get(f'/api/v1/dashboard/mentor/{mentor.id}/submissions',
                                    params={'type': 'Feedback'}, headers=admin_headers)

        assert response.status_code == 200
        assert response.json() == []

    @pytest.mark.asyncio
    async def test_mentor_without_projects(self, client: AsyncClient, admin_headers, cohort, make_user, db_session):
        user = await make_user()
        mentor = Mentor(user_id=user.id, cohort_year=cohort.academic_year)
        db_session.add(mentor)
        await db_session.commit()

        response = await client.get(f'/api/v1/dashboard/mentor/{mentor.id}/submissions', headers=admin_headers)

        assert response.status_code == 400


class TestTeamSubmissions:

    @pytest.mark.asyncio
    async def test_evaluation_rows_per_relation(
        self, client: AsyncClient, admin_headers, cohort, projects, member_headers, evaluation_round
    ):
        await submit(client, member_headers[0], deadlineId=evaluation_round['evaluationId'],
                     fromProjectId=projects[0].id, toProjectId=projects[1].id)

        rows = await team_rows(client, admin_headers, cohort.academic_year, evaluation_round['evaluationId'])

        statuses = {(r['fromProject']['id'], r['toProject']['id']): r['status'] for r in rows}
        assert statuses == {
            (projects[0].id, projects[1].id): 'Submitted',
            (projects[1].id, projects[0].id): 'Unsubmitted',
        }

    @pytest.mark.asyncio
    async def test_feedback_rows_name_the_adviser(
        self, client: AsyncClient, admin_headers, cohort, projects, adviser_user, member_headers
    ):
        feedback_id = await create_deadline(client, admin_headers, cohort.academic_year, 'Feedback', 'Adviser Feedback')
        await submit(client, member_headers[0], deadlineId=feedback_id, fromProjectId=projects[0].id,
                     toUserId=adviser_user.id)

        rows = await team_rows(client, admin_headers, cohort.academic_year, feedback_id)

        assert [r['toUser']['id'] for r in rows] == [adviser_user.id, adviser_user.id]
        assert [r['status'] for r in rows] == ['Submitted', 'Unsubmitted']

    @pytest.mark.asyncio
    async def test_deadline_from_another_cohort(self, client: AsyncClient, admin_headers, cohort, projects):
        milestone_id = await create_deadline(client, admin_headers, cohort.academic_year, 'Milestone', 'Milestone 1')

        response = await client.get('/api/v1/dashboard/admin/team-submissions', params={
            'cohortYear': cohort.academic_year + 1, 'deadlineId': milestone_id,
        }, headers=admin_headers)

        assert response.status_code == 400
        assert response.json()['message'] == f'Deadline {milestone_id} is not part of cohort {cohort.academic_year + 1}'
