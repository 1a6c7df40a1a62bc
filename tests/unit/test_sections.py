"""Unit tests for section grouping and numbering."""

from surveykit.schemas.survey import Question
from surveykit.services.sections import group_questions


def text(qid: str) -> Question:
    return Question(id=qid, type="short-text", title=f"Question {qid}")


def header(qid: str, title: str) -> Question:
    return Question(id=qid, type="section-header", title=title)


class TestGroupQuestions:
    """Tests for group_questions."""

    def test_leading_group_and_section(self):
        groups = group_questions([text("a"), text("b"), header("s1", "S1"), text("c"), text("d")])

        assert [(g.title, [n.number for n in g.questions]) for g in groups] == [
            (None, [1, 2]),
            ("S1", [3, 4]),
        ]
        assert groups[1].header_id == "s1"

    def test_numbering_runs_across_groups(self):
        groups = group_questions([header("s1", "First"), text("a"), header("s2", "Second"), text("b")])
        assert groups[1].questions[0].number == 2
        assert groups[1].questions[0].label == "2. Question b"

    def test_untitled_empty_leading_group_dropped(self):
        groups = group_questions([header("s1", "Only"), text("a")])
        assert len(groups) == 1
        assert groups[0].title == "Only"

    def test_titled_empty_section_kept(self):
        groups = group_questions([text("a"), header("s1", "Empty section")])
        assert len(groups) == 2
        assert groups[1].title == "Empty section"
        assert groups[1].questions == ()

    def test_blank_header_title_merges_as_untitled(self):
        groups = group_questions([header("s1", "   ")])
        assert groups == []

    def test_no_questions(self):
        assert group_questions([]) == []

    def test_every_question_appears_once(self, sample_survey):
        groups = group_questions(sample_survey.questions)
        ids = [n.question.id for g in groups for n in g.questions]
        assert ids == [q.id for q in sample_survey.answerable_questions()]
