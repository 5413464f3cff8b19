"""
Unit Tests for Forum and Vote Event Endpoints
"""
import pytest
from datetime import datetime, timedelta
from httpx import AsyncClient

from app.models.user import User


class TestForum:

    @pytest.mark.asyncio
    async def test_post_with_nested_comments(self, client: AsyncClient, student_user, admin_headers, auth_headers_for):
        headers = auth_headers_for(student_user)
        post = await client.post('/api/v1/forum-posts', json={
            'title': 'Deploying to Render',
            'body': 'Anyone got the free tier working?',
            'category': 'Question',
        }, headers=headers)
        assert post.status_code == 201
        post_id = post.json()['id']

        first = await client.post(f'/api/v1/forum-posts/{post_id}/comments', json={'content': 'Yes'}, headers=admin_headers)
        root_id = first.json()['comments'][0]['id']
        nested = await client.post(f'/api/v1/forum-posts/{post_id}/comments', json={
            'content': 'How?',
            'parentCommentId': root_id,
        }, headers=headers)

        comments = nested.json()['comments']
        assert len(comments) == 1
        assert comments[0]['replies'][0]['content'] == 'How?'
        assert comments[0]['author']['id'] != student_user.id

    @pytest.mark.asyncio
    async def test_category_filters(self, client: AsyncClient, student_user, admin_headers, auth_headers_for):
        headers = auth_headers_for(student_user)
        await client.post('/api/v1/forum-posts', json={'title': 'Mine', 'body': 'x'}, headers=headers)
        await client.post('/api/v1/forum-posts', json={
            'title': 'Theirs', 'body': 'y', 'category': 'Showcase'
        }, headers=admin_headers)

        mine = await client.get('/api/v1/forum-posts?category=YourPosts', headers=headers)
        showcase = await client.get('/api/v1/forum-posts?category=Showcase', headers=headers)
        everything = await client.get('/api/v1/forum-posts?category=All', headers=headers)
        unknown = await client.get('/api/v1/forum-posts?category=Memes', headers=headers)

        assert [p['title'] for p in mine.json()] == ['Mine']
        assert [p['title'] for p in showcase.json()] == ['Theirs']
        assert len(everything.json()) == 2
        assert unknown.status_code == 400

    @pytest.mark.asyncio
    async def test_only_author_edits(self, client: AsyncClient, students, auth_headers_for, db_session):
        author = await db_session.get(User, students[0].user_id)
        other = await db_session.get(User, students[1].user_id)
        post = await client.post('/api/v1/forum-posts', json={'title': 'Hi', 'body': 'x'},
                                 headers=auth_headers_for(author))
        post_id = post.json()['id']

        by_other = await client.put(f'/api/v1/forum-posts/{post_id}', json={'title': 'Mine now'},
                                    headers=auth_headers_for(other))
        by_author = await client.put(f'/api/v1/forum-posts/{post_id}', json={'title': 'Hello'},
                                     headers=auth_headers_for(author))

        assert by_other.status_code == 401
        assert by_author.json()['title'] == 'Hello'

    @pytest.mark.asyncio
    async def test_delete_comment_takes_replies(self, client: AsyncClient, student_user, auth_headers_for):
        headers = auth_headers_for(student_user)
        post = await client.post('/api/v1/forum-posts', json={'title': 'Hi', 'body': 'x'}, headers=headers)
        post_id = post.json()['id']
        root = await client.post(f'/api/v1/forum-posts/{post_id}/comments', json={'content': 'a'}, headers=headers)
        root_id = root.json()['comments'][0]['id']
        await client.post(f'/api/v1/forum-posts/{post_id}/comments', json={
            'content': 'b', 'parentCommentId': root_id
        }, headers=headers)

        response = await client.delete(f'/api/v1/forum-posts/{post_id}/comments/{root_id}', headers=headers)
        detail = await client.get(f'/api/v1/forum-posts/{post_id}', headers=headers)

        assert response.status_code == 200
        assert detail.json()['comments'] == []


class TestVoteEvents:
    """Administrators only"""

    @pytest.fixture
    def window(self):
        now = datetime.utcnow()
        return {'startTime': (now + timedelta(days=1)).isoformat(), 'endTime': (now + timedelta(days=2)).isoformat()}

    @pytest.mark.asyncio
    async def test_requires_admin(self, client: AsyncClient, student_user, auth_headers_for):
        response = await client.get('/api/v1/vote-events', headers=auth_headers_for(student_user))

        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_window_must_be_ordered(self, client: AsyncClient, admin_headers, window):
        response = await client.post('/api/v1/vote-events', json={
            'title': 'Best Poster',
            'startTime': window['endTime'],
            'endTime': window['startTime'],
        }, headers=admin_headers)

        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_voter_intake(self, client: AsyncClient, admin_headers, admin_user, window):
        created = await client.post('/api/v1/vote-events', json={'title': 'Best Poster', **window},
                                    headers=admin_headers)
        assert created.status_code == 201
        event_id = created.json()['id']
        base = f'/api/v1/vote-events/{event_id}'

        management = await client.put(f'{base}/voter-management', json={'isRegistrationOpen': True},
                                      headers=admin_headers)
        voter = await client.post(f'{base}/external-voters', json={'voterId': 'guest-001'}, headers=admin_headers)
        duplicate = await client.post(f'{base}/external-voters', json={'voterId': 'guest-001'}, headers=admin_headers)
        await client.put(f'{base}/internal-voters/{admin_user.id}', headers=admin_headers)
        detail = await client.get(base, headers=admin_headers)

        assert management.json()['isRegistrationOpen'] is True
        assert management.json()['hasExternalList'] is False
        assert voter.json()['voterId'] == 'guest-001'
        assert duplicate.status_code == 400
        assert detail.json()['internalVoterIds'] == [admin_user.id]
        assert detail.json()['voterManagement']['isRegistrationOpen'] is True

        removed = await client.delete(f'{base}/external-voters/guest-001', headers=admin_headers)
        assert removed.status_code == 200
        assert (await client.get(f'{base}/external-voters', headers=admin_headers)).json() == []
