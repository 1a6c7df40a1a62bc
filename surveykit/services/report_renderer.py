"""HTML rendering of results reports and thank-you pages using Jinja2.

Survey titles, descriptions, rich-text messages and answers are all
untrusted input, so every template is rendered with autoescaping on.
"""

from datetime import datetime
from typing import Optional

from jinja2 import DictLoader, Environment, StrictUndefined, TemplateError

from surveykit.schemas.results import ResultsView
from surveykit.services.results import DEFAULT_TIMESTAMP_FORMAT, format_timestamp
from surveykit.logging_config import get_logger

logger = get_logger(__name__)

RESULTS_TEMPLATE = """<!DOCTYPE html>
<html lang="en">
<head><meta charset="utf-8"><title>Results: {{ view.title }}</title></head>
<body>
<h1>Results: {{ view.title or "Untitled" }}</h1>
<section class="summary">
  <p>Responses: {{ view.summary.total }}</p>
  <p>Last response: {{ latest or "-" }}</p>
  <p>Last {{ view.summary.window_days }} days: {{ view.summary.recent_count }}</p>
</section>
{% if not view.rows %}
<p>No responses yet.</p>
{% else %}
<table>
  <thead>
    <tr><th>Submitted at</th>{% for column in view.columns %}<th>{{ column }}</th>{% endfor %}</tr>
  </thead>
  <tbody>
  {% for row in rows %}
    <tr><td>{{ row.timestamp }}</td>{% for cell in row.cells %}<td>{{ cell }}</td>{% endfor %}</tr>
  {% endfor %}
  </tbody>
</table>
{% endif %}
</body>
</html>
"""

THANK_YOU_TEMPLATE = """<!DOCTYPE html>
<html lang="en">
<head><meta charset="utf-8"><title>{{ title }}</title></head>
<body>
<h2>Thank you!</h2>
<p>{{ message or "Your answers have been recorded." }}</p>
</body>
</html>
"""


class TemplateRenderError(Exception):
    """Raised when template rendering fails."""
    pass


class ReportRenderer:
    """Service for rendering escaped HTML pages."""

    def __init__(self, tz_name: str = "UTC", timestamp_format: Optional[str] = None):
        """Initialize Jinja2 environment with strict settings."""
        self.env = Environment(
            loader=DictLoader({
                "results.html": RESULTS_TEMPLATE,
                "thank_you.html": THANK_YOU_TEMPLATE,
            }),
            autoescape=True,  # Escape HTML for security
            undefined=StrictUndefined,  # Raise error on undefined variables
        )
        self.tz_name = tz_name
        self.timestamp_format = timestamp_format

    def _format(self, value: Optional[datetime]) -> Optional[str]:
        if value is None:
            return None
        return format_timestamp(value, self.tz_name, self.timestamp_format or DEFAULT_TIMESTAMP_FORMAT)

    def render_results(self, view: ResultsView) -> str:
        """Render the results table and summary for a survey.

        Raises:
            TemplateRenderError: If rendering fails
        """
        rows = [
            {"timestamp": self._format(row.submitted_at), "cells": row.cells}
            for row in view.rows
        ]
        return self._render(
            "results.html",
            view=view,
            rows=rows,
            latest=self._format(view.summary.latest_submitted_at),
        )

    def render_thank_you(self, title: str, message: Optional[str]) -> str:
        return self._render("thank_you.html", title=title, message=message)

    def _render(self, template_name: str, **context) -> str:
        try:
            template = self.env.get_template(template_name)
            rendered = template.render(**context)
            logger.debug(f"Rendered {template_name}")
            return rendered
        except TemplateError as e:
            logger.error(f"Template rendering error: {e}")
            raise TemplateRenderError(f"Failed to render template: {e}")
