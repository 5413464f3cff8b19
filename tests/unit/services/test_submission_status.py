"""
Unit Tests for submission status and target shapes
"""
import pytest
from datetime import datetime, timedelta

from app.core.exceptions import BadRequestError
from app.models.deadline import Deadline, DeadlineType
from app.models.submission import Submission, SubmissionStatus
from app.schemas.submission import SubmissionCreate
from app.services.submission_service import classify_submission, latest_by, check_submission_shape

DUE = datetime(2024, 6, 1, 23, 59, 59)


def make_deadline(type=DeadlineType.MILESTONE) -> Deadline:
    return Deadline(id=1, cohort_year=2024, name='Milestone 1', due_by=DUE, type=type)


def make_submission(id=1, updated_at=DUE, is_draft=False, **fields) -> Submission:
    return Submission(id=id, deadline_id=1, updated_at=updated_at, is_draft=is_draft, **fields)


class TestClassify:
    """Late strictly after dueBy; drafts count as nothing"""

    def test_nothing_submitted(self):
        assert classify_submission(None, make_deadline()) == SubmissionStatus.UNSUBMITTED

    def test_draft_is_unsubmitted(self):
        submission = make_submission(updated_at=DUE - timedelta(days=1), is_draft=True)

        assert classify_submission(submission, make_deadline()) == SubmissionStatus.UNSUBMITTED

    def test_before_due(self):
        submission = make_submission(updated_at=DUE - timedelta(hours=1))

        assert classify_submission(submission, make_deadline()) == SubmissionStatus.SUBMITTED

    def test_exactly_at_due_is_on_time(self):
        assert classify_submission(make_submission(updated_at=DUE), make_deadline()) == SubmissionStatus.SUBMITTED

    def test_after_due_is_late(self):
        submission = make_submission(updated_at=DUE + timedelta(seconds=1))

        assert classify_submission(submission, make_deadline()) == SubmissionStatus.SUBMITTED_LATE


class TestLatestBy:
    """One submission per key: final beats draft, then newest"""

    def test_final_beats_newer_draft(self):
        final = make_submission(id=1, updated_at=DUE - timedelta(days=2), from_project_id=5)
        draft = make_submission(id=2, updated_at=DUE, is_draft=True, from_project_id=5)

        picked = latest_by([final, draft], key=lambda s: s.from_project_id)

        assert picked[5] is final

    def test_newest_final_wins(self):
        older = make_submission(id=1, updated_at=DUE - timedelta(days=2), from_project_id=5)
        newer = make_submission(id=2, updated_at=DUE - timedelta(days=1), from_project_id=5)

        picked = latest_by([newer, older], key=lambda s: s.from_project_id)

        assert picked[5] is newer

    def test_keys_kept_apart(self):
        a = make_submission(id=1, from_project_id=5)
        b = make_submission(id=2, from_project_id=6)

        picked = latest_by([a, b], key=lambda s: s.from_project_id)

        assert set(picked) == {5, 6}


class TestSubmissionShape:
    """Who may submit to whom depends on the deadline type"""

    def test_milestone_from_project(self):
        check_submission_shape(make_deadline(), SubmissionCreate(deadline_id=1, from_project_id=1))

    def test_milestone_with_target_rejected(self):
        with pytest.raises(BadRequestError):
            check_submission_shape(make_deadline(), SubmissionCreate(deadline_id=1, from_project_id=1, to_project_id=2))

    @pytest.mark.parametrize('fields', [
        {'from_project_id': 1, 'to_project_id': 2},
        {'from_user_id': 9, 'to_project_id': 2},
    ])
    def test_evaluation_shapes(self, fields):
        check_submission_shape(make_deadline(DeadlineType.EVALUATION), SubmissionCreate(deadline_id=1, **fields))

    def test_evaluation_needs_target(self):
        with pytest.raises(BadRequestError):
            check_submission_shape(make_deadline(DeadlineType.EVALUATION), SubmissionCreate(deadline_id=1, from_project_id=1))

    def test_feedback_targets_user(self):
        check_submission_shape(
            make_deadline(DeadlineType.FEEDBACK),
            SubmissionCreate(deadline_id=1, from_project_id=1, to_user_id=9)
        )

    def test_application_goes_elsewhere(self):
        with pytest.raises(BadRequestError, match='application endpoint'):
            check_submission_shape(make_deadline(DeadlineType.APPLICATION), SubmissionCreate(deadline_id=1))
