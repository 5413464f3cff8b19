"""
Unit Tests for announcement comment threading
"""
from datetime import datetime, timedelta
from types import SimpleNamespace

from app.services.announcement_service import comment_threads

START = datetime(2024, 6, 1, 12, 0)


def comment(id, minutes, parent=None, deleted=False):
    return SimpleNamespace(
        id=id,
        announcement_id=1,
        author_id=1,
        parent_comment_id=parent,
        content=f'comment {id}',
        deleted_at=START if deleted else None,
        created_at=START + timedelta(minutes=minutes),
        updated_at=None,
    )


class TestCommentThreads:
    """Replies group under their root; threads newest first"""

    def test_empty(self):
        assert comment_threads([]) == []

    def test_replies_follow_root_oldest_first(self):
        threads = comment_threads([
            comment(1, 0),
            comment(3, 5, parent=2),
            comment(2, 2, parent=1),
        ])

        assert len(threads) == 1
        assert threads[0].root_id == 1
        assert [c.id for c in threads[0].comments] == [1, 2, 3]

    def test_threads_newest_first(self):
        threads = comment_threads([
            comment(1, 0),
            comment(2, 10),
            comment(3, 20, parent=1),
        ])

        assert [t.root_id for t in threads] == [2, 1]

    def test_deleted_comment_keeps_its_place(self):
        threads = comment_threads([comment(1, 0, deleted=True), comment(2, 1, parent=1)])

        assert threads[0].comments[0].deleted_at is not None
        assert [c.id for c in threads[0].comments] == [1, 2]

    def test_missing_parent_starts_new_thread(self):
        threads = comment_threads([comment(5, 0, parent=4)])

        assert threads[0].root_id == 5
