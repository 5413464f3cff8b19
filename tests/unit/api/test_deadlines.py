"""
Unit Tests for Deadline Endpoints
"""
import pytest
from datetime import datetime, timedelta
from httpx import AsyncClient

from app.models.cohort import Cohort


def deadline_body(cohort_year: int, **overrides) -> dict:
    body = {
        'cohortYear': cohort_year,
        'name': 'Milestone 1',
        'dueBy': (datetime.utcnow() + timedelta(days=7)).isoformat(),
        'type': 'Milestone',
    }
    body.update(overrides)
    return body


class TestQuestions:

    @pytest.mark.asyncio
    async def test_replace_sections(self, client: AsyncClient, admin_headers, cohort):
        created = await client.post('/api/v1/deadlines', json=deadline_body(cohort.academic_year), headers=admin_headers)
        deadline_id = created.json()['id']

        response = await client.put(f'/api/v1/deadlines/{deadline_id}/questions', json={'sections': [
            {'name': 'Links', 'questions': [{'question': 'Poster', 'type': 'Url'}]},
            {'name': 'Reflection', 'questions': [
                {'question': 'Scope', 'type': 'Dropdown', 'options': ['Small', 'Large']},
                {'question': 'Notes', 'type': 'Paragraph'},
            ]},
        ]}, headers=admin_headers)

        assert response.status_code == 200
        sections = response.json()['sections']
        assert [s['sectionNumber'] for s in sections] == [1, 2]
        assert [q['questionNumber'] for q in sections[1]['questions']] == [1, 2]
        assert sections[1]['questions'][0]['options'] == ['Small', 'Large']

        replaced = await client.put(f'/api/v1/deadlines/{deadline_id}/questions', json={'sections': []},
                                    headers=admin_headers)
        assert replaced.json()['sections'] == []

    @pytest.mark.asyncio
    async def test_application_template(self, client: AsyncClient, admin_headers, cohort):
        created = await client.post(
            '/api/v1/deadlines', json=deadline_body(cohort.academic_year, type='Application'), headers=admin_headers
        )

        response = await client.get(f'/api/v1/deadlines/{created.json()["id"]}/questions', headers=admin_headers)

        questions = response.json()['sections'][0]['questions']
        assert questions[-1]['type'] == 'Dropdown'
        assert 'Artemis' in questions[-1]['options']


class TestDuplicate:

    @pytest.mark.asyncio
    async def test_copy_keeps_questions(self, client: AsyncClient, admin_headers, cohort):
        created = await client.post('/api/v1/deadlines', json=deadline_body(cohort.academic_year), headers=admin_headers)
        deadline_id = created.json()['id']
        await client.put(f'/api/v1/deadlines/{deadline_id}/questions', json={'sections': [
            {'name': 'Links', 'questions': [{'question': 'Poster'}, {'question': 'Video'}]},
        ]}, headers=admin_headers)

        response = await client.post(
            f'/api/v1/deadlines/{deadline_id}/duplicate', json={'cohortYear': cohort.academic_year}, headers=admin_headers
        )

        assert response.status_code == 201
        copy = response.json()
        assert copy['name'] == 'Copy of Milestone 1'
        assert copy['id'] != deadline_id

        questions = await client.get(f'/api/v1/deadlines/{copy["id"]}/questions', headers=admin_headers)
        assert [q['question'] for q in questions.json()['sections'][0]['questions']] == ['Poster', 'Video']

    @pytest.mark.asyncio
    async def test_evaluation_stays_in_cohort(self, client: AsyncClient, admin_headers, cohort, db_session):
        now = datetime.utcnow()
        db_session.add(Cohort(
            academic_year=cohort.academic_year + 1,
            start_date=now + timedelta(days=301),
            end_date=now + timedelta(days=600),
        ))
        await db_session.commit()

        milestone = await client.post(
            '/api/v1/deadlines', json=deadline_body(cohort.academic_year), headers=admin_headers
        )
        evaluation = await client.post('/api/v1/deadlines', json=deadline_body(
            cohort.academic_year,
            name='Evaluation 1',
            type='Evaluation',
            evaluatingMilestoneId=milestone.json()['id'],
        ), headers=admin_headers)
        assert evaluation.status_code == 201

        response = await client.post(
            f'/api/v1/deadlines/{evaluation.json()["id"]}/duplicate',
            json={'cohortYear': cohort.academic_year + 1},
            headers=admin_headers
        )

        assert response.status_code == 400


class TestDeadlines:

    @pytest.mark.asyncio
    async def test_evaluation_needs_milestone(self, client: AsyncClient, admin_headers, cohort):
        response = await client.post(
            '/api/v1/deadlines',
            json=deadline_body(cohort.academic_year, type='Evaluation'),
            headers=admin_headers
        )

        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_unknown_cohort(self, client: AsyncClient, admin_headers, cohort):
        response = await client.post('/api/v1/deadlines', json=deadline_body(1900), headers=admin_headers)

        assert response.status_code == 400
        assert response.json()['message'] == 'Cohort 1900 does not exist'

    @pytest.mark.asyncio
    async def test_list_by_cohort(self, client: AsyncClient, admin_headers, cohort, student_user, auth_headers_for):
        await client.post('/api/v1/deadlines', json=deadline_body(cohort.academic_year), headers=admin_headers)
        await client.post(
            '/api/v1/deadlines', json=deadline_body(cohort.academic_year, name='Milestone 2'), headers=admin_headers
        )

        response = await client.get(
            f'/api/v1/deadlines?cohortYear={cohort.academic_year}&name=milestone 2',
            headers=auth_headers_for(student_user)
        )

        assert [d['name'] for d in response.json()] == ['Milestone 2']

    @pytest.mark.asyncio
    async def test_delete(self, client: AsyncClient, admin_headers, cohort):
        created = await client.post('/api/v1/deadlines', json=deadline_body(cohort.academic_year), headers=admin_headers)
        deadline_id = created.json()['id']

        response = await client.delete(f'/api/v1/deadlines/{deadline_id}', headers=admin_headers)

        assert response.status_code == 200
        assert (await client.get(f'/api/v1/deadlines/{deadline_id}', headers=admin_headers)).status_code == 404
