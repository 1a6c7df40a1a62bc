"""Shareable links and embed snippets for published surveys."""

from urllib.parse import quote

from markupsafe import escape


def share_url(base_url: str, survey_id: str) -> str:
    """Public respondent link.

    Example:
        >>> share_url("https://forms.example.com/", "abc123")
        'https://forms.example.com/survey?id=abc123'
    """
    return f"{base_url.rstrip('/')}/survey?id={quote(survey_id, safe='')}"


def results_url(base_url: str, survey_id: str) -> str:
    """Admin results link."""
    return f"{base_url.rstrip('/')}/api/admin/results?id={quote(survey_id, safe='')}"


def embed_code(base_url: str, survey_id: str, height: str = "600px") -> str:
    """HTML snippet that embeds the survey in another page."""
    src = escape(share_url(base_url, survey_id))
    return f'<iframe src="{src}" width="100%" height="{escape(height)}" frameborder="0"></iframe>'
