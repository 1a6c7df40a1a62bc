"""Unit tests for survey Pydantic schemas.

Tests validation logic for questions, surveys and themes.
"""

import pytest
from pydantic import ValidationError

from surveykit.schemas.survey import (
    ChoiceOption,
    InputType,
    InputValidation,
    Privacy,
    Question,
    QuestionType,
    SavedTheme,
    Survey,
    ThemeConfig,
)


class TestChoiceOption:
    """Tests for ChoiceOption schema."""

    def test_valid_choice_option(self):
        """Test creating valid choice option."""
        option = ChoiceOption(label="Rojo", value="red")
        assert option.label == "Rojo"
        assert option.value == "red"
        assert option.id is None

    def test_empty_label_invalid(self):
        with pytest.raises(ValidationError):
            ChoiceOption(label="", value="red")

    def test_empty_value_invalid(self):
        with pytest.raises(ValidationError):
            ChoiceOption(label="Rojo", value="")


class TestQuestion:
    """Tests for Question schema."""

    def test_text_question_defaults(self):
        question = Question(id="q1", type="short-text", title="Name")
        assert question.type == QuestionType.SHORT_TEXT
        assert question.required is False
        assert question.options is None
        assert question.is_section_header is False

    def test_section_header_never_required(self):
        """Test that section headers are forced to not required."""
        question = Question(id="s1", type="section-header", title="About you", required=True)
        assert question.required is False
        assert question.is_section_header is True

    def test_options_on_text_question_invalid(self):
        with pytest.raises(ValidationError) as exc_info:
            Question(
                id="q1",
                type="short-text",
                title="Name",
                options=[{"label": "A", "value": "a"}],
            )
        assert "cannot have options" in str(exc_info.value)

    def test_empty_options_list_normalized(self):
        question = Question(id="q1", type="date", title="When?", options=[])
        assert question.options is None

    def test_duplicate_option_values_invalid(self):
        with pytest.raises(ValidationError) as exc_info:
            Question(
                id="q1",
                type="single-choice",
                title="Color",
                options=[
                    {"label": "Red", "value": "red"},
                    {"label": "Rojo", "value": "red"},
                ],
            )
        assert "Duplicate option values" in str(exc_info.value)

    def test_unknown_type_invalid(self):
        with pytest.raises(ValidationError):
            Question(id="q1", type="matrix", title="Grid")

    def test_scale_max_defaults(self):
        stars = Question(id="s", type="star-rating", title="Stars")
        scale = Question(id="n", type="numeric-scale", title="Scale")
        assert stars.scale_max == 5
        assert scale.scale_max == 10

    def test_scale_max_override(self):
        question = Question(id="s", type="star-rating", title="Stars", max_rating=7)
        assert question.scale_max == 7

    @pytest.mark.parametrize("max_rating", [1, 11])
    def test_max_rating_bounds(self, max_rating):
        with pytest.raises(ValidationError):
            Question(id="s", type="star-rating", title="Stars", max_rating=max_rating)

    def test_find_option(self):
        question = Question(
            id="q1",
            type="dropdown",
            title="City",
            options=[{"label": "Lima", "value": "lima"}],
        )
        assert question.find_option("lima").label == "Lima"
        assert question.find_option("quito") is None
        assert question.option_values() == ["lima"]

    def test_text_validation_rules(self):
        question = Question(
            id="zip",
            type="short-text",
            title="Zip",
            validation={"input_type": "digits-only", "max_length": 5},
        )
        assert question.validation == InputValidation(input_type=InputType.DIGITS_ONLY, max_length=5)


class TestSurvey:
    """Tests for the complete Survey schema."""

    def test_valid_survey(self, sample_survey):
        assert sample_survey.id == "feedback"
        assert sample_survey.privacy == Privacy.PUBLIC
        assert len(sample_survey.questions) == 9

    def test_minimal_survey(self):
        survey = Survey()
        assert survey.title == ""
        assert survey.questions == []
        assert survey.limit_one_response is False

    def test_duplicate_question_ids_invalid(self):
        with pytest.raises(ValidationError) as exc_info:
            Survey(
                title="Dup",
                questions=[
                    {"id": "q1", "type": "short-text", "title": "A"},
                    {"id": "q1", "type": "long-text", "title": "B"},
                ],
            )
        assert "Duplicate question IDs" in str(exc_info.value)

    def test_allowed_emails_normalized(self, private_survey):
        assert private_survey.allowed_emails == ["ana@example.com", "bob@example.com"]
        assert private_survey.is_private is True

    def test_allowed_emails_deduplicated(self):
        survey = Survey(allowed_emails=["A@x.com", "a@x.com ", "", "b@x.com"])
        assert survey.allowed_emails == ["a@x.com", "b@x.com"]

    def test_answerable_questions_skip_headers(self, sample_survey):
        ids = [q.id for q in sample_survey.answerable_questions()]
        assert "about" not in ids
        assert ids[0] == "name"
        assert len(ids) == 8

    def test_get_question(self, sample_survey):
        assert sample_survey.get_question("color").title == "Favorite color"
        assert sample_survey.get_question("missing") is None

    def test_invalid_privacy(self):
        with pytest.raises(ValidationError):
            Survey(privacy="secret")


class TestThemes:
    """Tests for theme schemas."""

    def test_theme_defaults(self):
        theme = ThemeConfig()
        assert theme.background_color == "#ffffff"
        assert theme.active_color is None

    def test_text_style_alignment_validated(self):
        with pytest.raises(ValidationError):
            ThemeConfig(title_style={"text_align": "justify"})

    def test_saved_theme_requires_name(self):
        with pytest.raises(ValidationError):
            SavedTheme(name="", config=ThemeConfig())
