"""
Versioned schema for the application form.

The first questions of every Application deadline carry the applicants'
particulars. Question generation (when the deadline is created) and answer
decoding (when an application is submitted) both read the field list below,
so the two cannot drift apart.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Tuple

from app.core.exceptions import BadRequestError
from app.models.deadline import QuestionType
from app.models.project import AchievementLevel
from app.utils.validators import is_valid_email, is_valid_matric_no, is_valid_nusnet_id


@dataclass(frozen=True)
class FormField:
    key: str
    label: str
    type: QuestionType = QuestionType.SHORT_ANSWER
    options: Tuple[str, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class ApplicationFormSchema:
    version: int
    section_name: str
    fields: Tuple[FormField, ...]

    @property
    def size(self) -> int:
        return len(self.fields)

    def section_template(self) -> Dict:
        """Section payload used to seed a new Application deadline"""
        return {
            "name": self.section_name,
            "desc": "Particulars of both team members. Do not reorder these questions.",
            "questions": [
                {
                    "question": form_field.label,
                    "type": form_field.type,
                    "options": list(form_field.options),
                }
                for form_field in self.fields
            ],
        }

    def decode(self, answers: List[Tuple[int, str]]) -> Dict[str, str]:
        """Map (question_id, answer) pairs onto field keys by ascending question id"""
        if len(answers) < self.size:
            raise BadRequestError(
                "Application form does not have sufficient questions to track students' particulars"
            )
        ordered = sorted(answers, key=lambda pair: pair[0])[:self.size]
        return {
            form_field.key: (answer or "").strip()
            for form_field, (_, answer) in zip(self.fields, ordered)
        }


APPLICATION_FORM_V1 = ApplicationFormSchema(
    version=1,
    section_name="Team Particulars",
    fields=(
        FormField("student1_name", "Student 1 Name"),
        FormField("student2_name", "Student 2 Name"),
        FormField("student1_email", "Student 1 Email"),
        FormField("student2_email", "Student 2 Email"),
        FormField("student1_matric_no", "Student 1 Matriculation Number"),
        FormField("student2_matric_no", "Student 2 Matriculation Number"),
        FormField("student1_nusnet_id", "Student 1 NUSNET ID"),
        FormField("student2_nusnet_id", "Student 2 NUSNET ID"),
        FormField("team_name", "Team Name"),
        FormField(
            "achievement",
            "Proposed Level of Achievement",
            QuestionType.DROPDOWN,
            tuple(level.value for level in AchievementLevel),
        ),
    ),
)

CURRENT_APPLICATION_FORM = APPLICATION_FORM_V1


def validate_particulars(particulars: Dict[str, str]) -> None:
    """Raise on the first malformed email, matriculation number or NUSNET id"""
    checks = (
        ("email", is_valid_email, "Email"),
        ("matric_no", is_valid_matric_no, "Matriculation Number"),
        ("nusnet_id", is_valid_nusnet_id, "NUSNET ID"),
    )
    for suffix, check, label in checks:
        for index in (1, 2):
            if not check(particulars[f"student{index}_{suffix}"]):
                raise BadRequestError(f"Student {index} {label} is invalid")

    try:
        AchievementLevel(particulars["achievement"])
    except ValueError:
        raise BadRequestError("Proposed Level of Achievement is invalid")

    if not particulars["team_name"]:
        raise BadRequestError("Team Name is required")
