"""Section grouping for survey question lists.

Questions and section headers share one flat ordered list. For display the
list is partitioned into groups: a group starts at a section header (or at
the top of the list, untitled) and holds the questions up to the next
header. Display numbering runs over the whole survey, not per group.
"""

from dataclasses import dataclass, field
from typing import Iterable, Optional

from surveykit.schemas.survey import Question


@dataclass(frozen=True)
class NumberedQuestion:
    """A question with its 1-based position among answerable questions."""
    number: int
    question: Question

    @property
    def label(self) -> str:
        """Display label, e.g. "3. What is your favorite color?"."""
        return f"{self.number}. {self.question.title}"


@dataclass(frozen=True)
class QuestionGroup:
    """A run of questions under an optional section title.

    Attributes:
        title: Section title, None for the implicit leading group
        header_id: Id of the section-header question that opened the group
        questions: Numbered questions in survey order
    """
    title: Optional[str]
    header_id: Optional[str] = None
    questions: tuple[NumberedQuestion, ...] = field(default_factory=tuple)

    @property
    def is_empty(self) -> bool:
        return not self.title and not self.questions


def group_questions(questions: Iterable[Question]) -> list[QuestionGroup]:
    """Partition a flat question list into display groups.

    Groups with neither a title nor questions are dropped; a titled
    section with no questions is kept so it still renders as a heading.

    Args:
        questions: Questions and section headers in survey order

    Returns:
        Groups in survey order

    Example:
        >>> groups = group_questions([a, b, section_s1, c, d])
        >>> [(g.title, [n.number for n in g.questions]) for g in groups]
        [(None, [1, 2]), ('S1', [3, 4])]
    """
    groups: list[QuestionGroup] = []
    title: Optional[str] = None
    header_id: Optional[str] = None
    current: list[NumberedQuestion] = []
    number = 0

    def close_group() -> None:
        group = QuestionGroup(title=title, header_id=header_id, questions=tuple(current))
        if not group.is_empty:
            groups.append(group)

    for question in questions:
        if question.is_section_header:
            close_group()
            title = question.title.strip() or None
            header_id = question.id
            current = []
            continue

        number += 1
        current.append(NumberedQuestion(number=number, question=question))

    close_group()
    return groups
