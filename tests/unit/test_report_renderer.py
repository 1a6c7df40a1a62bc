"""Unit tests for the HTML report renderer.

Tests Jinja2 rendering of the results table and thank-you page.
"""

from datetime import datetime, timezone

import pytest

from surveykit.schemas.response import ResponseRecord
from surveykit.services.report_renderer import ReportRenderer, TemplateRenderError
from surveykit.services.results import build_results_view


class TestReportRenderer:
    """Tests for ReportRenderer class."""

    def test_results_table(self, sample_survey, now):
        responses = [
            ResponseRecord(
                id="r1",
                survey_id="feedback",
                answers={"name": "Ana", "color": "red"},
                submitted_at=datetime(2026, 10, 18, 9, 30, tzinfo=timezone.utc),
            )
        ]
        view = build_results_view(sample_survey, responses, now=now)

        html = ReportRenderer().render_results(view)

        assert "<th>Your name</th>" in html
        assert "<td>Rojo</td>" in html
        assert "18/10/2026 09:30:00" in html
        assert "Responses: 1" in html
        assert "Last 7 days: 1" in html

    def test_answers_are_escaped(self, sample_survey, now):
        responses = [
            ResponseRecord(
                id="r1",
                survey_id="feedback",
                answers={"name": "<script>alert(1)</script>"},
                submitted_at=now,
            )
        ]
        html = ReportRenderer().render_results(build_results_view(sample_survey, responses, now=now))

        assert "<script>" not in html
        assert "&lt;script&gt;" in html

    def test_empty_results(self, sample_survey, now):
        html = ReportRenderer().render_results(build_results_view(sample_survey, [], now=now))
        assert "No responses yet." in html
        assert "Last response: -" in html

    def test_timezone_applied(self, sample_survey):
        submitted = datetime(2026, 1, 15, 12, 0, tzinfo=timezone.utc)
        responses = [ResponseRecord(id="r1", survey_id="feedback", submitted_at=submitted)]
        view = build_results_view(sample_survey, responses, now=submitted)

        html = ReportRenderer("America/Lima", "%H:%M").render_results(view)

        assert "<td>07:00</td>" in html

    def test_thank_you_escapes_rich_text(self):
        html = ReportRenderer().render_thank_you("Feedback", "<b>Thanks!</b>")
        assert "&lt;b&gt;Thanks!&lt;/b&gt;" in html

    def test_thank_you_default_message(self):
        html = ReportRenderer().render_thank_you("Feedback", None)
        assert "Your answers have been recorded." in html

    def test_undefined_variable_raises_error(self):
        """Test that undefined variables raise error with StrictUndefined."""
        renderer = ReportRenderer()
        with pytest.raises(TemplateRenderError, match="Failed to render"):
            renderer._render("thank_you.html", title="Only title")
