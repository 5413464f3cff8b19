"""
Unit Tests for the application form schema
"""
import pytest

from app.core.exceptions import BadRequestError
from app.models.deadline import QuestionType
from app.services.application_form import CURRENT_APPLICATION_FORM, validate_particulars


def particulars_answers(**overrides):
    """Answers in form order; question ids are 101, 102, ..."""
    values = {
        'student1_name': 'Ada Lovelace',
        'student2_name': 'Alan Turing',
        'student1_email': 'ada@example.com',
        'student2_email': 'alan@example.com',
        'student1_matric_no': 'A0000001X',
        'student2_matric_no': 'A0000002Y',
        'student1_nusnet_id': 'E0000001',
        'student2_nusnet_id': 'E0000002',
        'team_name': 'Analytical Engines',
        'achievement': 'Gemini',
    }
    values.update(overrides)
    return [(101 + index, values[f.key]) for index, f in enumerate(CURRENT_APPLICATION_FORM.fields)]


class TestDecode:
    """Answers map onto fields by ascending question id"""

    def test_decode_in_order(self):
        decoded = CURRENT_APPLICATION_FORM.decode(particulars_answers())

        assert decoded['student1_email'] == 'ada@example.com'
        assert decoded['student2_nusnet_id'] == 'E0000002'
        assert decoded['achievement'] == 'Gemini'

    def test_submission_order_does_not_matter(self):
        answers = list(reversed(particulars_answers()))
        decoded = CURRENT_APPLICATION_FORM.decode(answers)

        assert decoded['student1_name'] == 'Ada Lovelace'
        assert decoded['team_name'] == 'Analytical Engines'

    def test_extra_answers_ignored(self):
        answers = particulars_answers() + [(999, 'Why do you want to join?')]

        assert len(CURRENT_APPLICATION_FORM.decode(answers)) == CURRENT_APPLICATION_FORM.size

    def test_values_trimmed(self):
        decoded = CURRENT_APPLICATION_FORM.decode(particulars_answers(team_name='  Spaced  '))

        assert decoded['team_name'] == 'Spaced'

    def test_too_few_answers(self):
        with pytest.raises(BadRequestError, match='sufficient questions'):
            CURRENT_APPLICATION_FORM.decode(particulars_answers()[:5])


class TestTemplate:

    def test_template_matches_fields(self):
        template = CURRENT_APPLICATION_FORM.section_template()

        assert len(template['questions']) == CURRENT_APPLICATION_FORM.size
        assert template['questions'][0]['question'] == 'Student 1 Name'

    def test_achievement_is_dropdown(self):
        question = CURRENT_APPLICATION_FORM.section_template()['questions'][-1]

        assert question['type'] == QuestionType.DROPDOWN
        assert 'Artemis' in question['options']


class TestValidateParticulars:

    def test_valid(self):
        validate_particulars(CURRENT_APPLICATION_FORM.decode(particulars_answers()))

    @pytest.mark.parametrize('field, message', [
        ('student2_email', 'Student 2 Email is invalid'),
        ('student1_matric_no', 'Student 1 Matriculation Number is invalid'),
        ('student2_nusnet_id', 'Student 2 NUSNET ID is invalid'),
    ])
    def test_malformed_identity(self, field, message):
        particulars = CURRENT_APPLICATION_FORM.decode(particulars_answers(**{field: 'bogus'}))

        with pytest.raises(BadRequestError, match=message):
            validate_particulars(particulars)

    def test_unknown_achievement(self):
        particulars = CURRENT_APPLICATION_FORM.decode(particulars_answers(achievement='Mercury'))

        with pytest.raises(BadRequestError, match='Level of Achievement'):
            validate_particulars(particulars)

    def test_team_name_required(self):
        particulars = CURRENT_APPLICATION_FORM.decode(particulars_answers(team_name=''))

        with pytest.raises(BadRequestError, match='Team Name'):
            validate_particulars(particulars)
