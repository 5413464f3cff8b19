"""
Unit Tests for Announcement Endpoints
"""
import pytest
from httpx import AsyncClient

from app.models.user import User


async def post_announcement(client: AsyncClient, admin_headers: dict, cohort_year: int, **overrides):
    body = {
        'cohortYear': cohort_year,
        'title': 'Liftoff',
        'content': 'Orbital starts next week.',
    }
    body.update(overrides)
    response = await client.post('/api/v1/announcements', json=body, headers=admin_headers)
    assert response.status_code == 201
    return response.json()


class TestCreateAnnouncement:

    @pytest.mark.asyncio
    async def test_emails_the_audience(
        self, client: AsyncClient, admin_headers, cohort, students, adviser_user, notifier, db_session
    ):
        await post_announcement(
            client, admin_headers, cohort.academic_year, targetAudienceRole='Student', shouldSendEmail=True
        )

        expected = [(await db_session.get(User, s.user_id)).email for s in students]
        assert sorted(notifier.recipients) == sorted(expected)
        assert adviser_user.email not in notifier.recipients
        assert notifier.sent[0]['subject'].endswith('Liftoff')

    @pytest.mark.asyncio
    async def test_no_email_by_default(self, client: AsyncClient, admin_headers, cohort, students, notifier):
        data = await post_announcement(client, admin_headers, cohort.academic_year)

        assert data['targetAudienceRole'] == 'All'
        assert notifier.sent == []

    @pytest.mark.asyncio
    async def test_only_admins_post(self, client: AsyncClient, cohort, student_user, auth_headers_for):
        response = await client.post('/api/v1/announcements', json={
            'cohortYear': cohort.academic_year,
            'title': 'Hello',
            'content': 'World',
        }, headers=auth_headers_for(student_user))

        assert response.status_code == 401


class TestAudience:
    """Students only see announcements addressed to everyone or to students"""

    @pytest.mark.asyncio
    async def test_listing_is_filtered(
        self, client: AsyncClient, admin_headers, cohort, student_user, auth_headers_for
    ):
        everyone = await post_announcement(client, admin_headers, cohort.academic_year)
        advisers_only = await post_announcement(
            client, admin_headers, cohort.academic_year, targetAudienceRole='Adviser'
        )

        as_student = await client.get('/api/v1/announcements', headers=auth_headers_for(student_user))
        as_admin = await client.get('/api/v1/announcements', headers=admin_headers)

        assert [a['id'] for a in as_student.json()] == [everyone['id']]
        assert [a['id'] for a in as_admin.json()] == [advisers_only['id'], everyone['id']]

    @pytest.mark.asyncio
    async def test_detail_outside_audience(
        self, client: AsyncClient, admin_headers, cohort, student_user, auth_headers_for
    ):
        mentors_only = await post_announcement(client, admin_headers, cohort.academic_year, targetAudienceRole='Mentor')

        response = await client.get(
            f'/api/v1/announcements/{mentors_only["id"]}', headers=auth_headers_for(student_user)
        )

        assert response.status_code == 401


class TestReadTracking:

    @pytest.mark.asyncio
    async def test_read_percentage(self, client: AsyncClient, admin_headers, cohort, students, student_user,
                                   auth_headers_for):
        announcement = await post_announcement(
            client, admin_headers, cohort.academic_year, targetAudienceRole='Student'
        )
        headers = auth_headers_for(student_user)

        await client.post(f'/api/v1/announcements/{announcement["id"]}/read', headers=headers)
        await client.post(f'/api/v1/announcements/{announcement["id"]}/read', headers=headers)
        response = await client.get(
            f'/api/v1/announcements/{announcement["id"]}/read-percentage', headers=admin_headers
        )

        assert response.json() == {'totalReadCount': 1, 'totalUserCount': 2, 'readPercentage': 0.5}

        listed = await client.get('/api/v1/announcements', headers=headers)
        assert listed.json()[0]['isRead'] is True

    @pytest.mark.asyncio
    async def test_read_percentage_requires_admin(
        self, client: AsyncClient, admin_headers, cohort, student_user, auth_headers_for
    ):
        announcement = await post_announcement(client, admin_headers, cohort.academic_year)

        response = await client.get(
            f'/api/v1/announcements/{announcement["id"]}/read-percentage', headers=auth_headers_for(student_user)
        )

        assert response.status_code == 401


class TestComments:

    @pytest.mark.asyncio
    async def test_threads(self, client: AsyncClient, admin_headers, cohort, student_user, auth_headers_for):
        announcement = await post_announcement(client, admin_headers, cohort.academic_year)
        base = f'/api/v1/announcements/{announcement["id"]}'
        headers = auth_headers_for(student_user)

        root = await client.post(f'{base}/comments', json={'content': 'When is Milestone 1?'}, headers=headers)
        reply = await client.post(f'{base}/comments', json={
            'content': 'End of May.',
            'parentCommentId': root.json()['id'],
        }, headers=admin_headers)
        detail = await client.get(base, headers=headers)

        assert reply.status_code == 201
        thread = detail.json()['threads'][0]
        assert thread['rootId'] == root.json()['id']
        assert [c['content'] for c in thread['comments']] == ['When is Milestone 1?', 'End of May.']

        listed = await client.get('/api/v1/announcements', headers=headers)
        assert listed.json()[0]['commentCount'] == 2

    @pytest.mark.asyncio
    async def test_only_author_edits(
        self, client: AsyncClient, admin_headers, cohort, student_user, auth_headers_for
    ):
        announcement = await post_announcement(client, admin_headers, cohort.academic_year)
        base = f'/api/v1/announcements/{announcement["id"]}/comments'
        comment = await client.post(base, json={'content': 'Typo'}, headers=auth_headers_for(student_user))
        comment_id = comment.json()['id']

        by_admin = await client.put(f'{base}/{comment_id}', json={'content': 'Fixed'}, headers=admin_headers)
        by_author = await client.put(
            f'{base}/{comment_id}', json={'content': 'Fixed'}, headers=auth_headers_for(student_user)
        )

        assert by_admin.status_code == 401
        assert by_author.json()['content'] == 'Fixed'

    @pytest.mark.asyncio
    async def test_delete_comment(self, client: AsyncClient, admin_headers, cohort, student_user, auth_headers_for):
        announcement = await post_announcement(client, admin_headers, cohort.academic_year)
        base = f'/api/v1/announcements/{announcement["id"]}/comments'
        comment = await client.post(base, json={'content': 'Bye'}, headers=auth_headers_for(student_user))

        response = await client.delete(f'{base}/{comment.json()["id"]}', headers=admin_headers)

        assert response.status_code == 200
        detail = await client.get(f'/api/v1/announcements/{announcement["id"]}', headers=admin_headers)
        assert detail.json()['threads'] == []
