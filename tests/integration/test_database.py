"""Integration tests for the SQL-backed survey store.

These tests verify the complete database layer including:
- Survey documents round-tripping through JSON columns
- Merge upserts
- Response ordering and lookup by email
- Cascade delete of responses with their survey
- Storage error translation
"""

from datetime import datetime, timedelta, timezone
from unittest.mock import patch

import pytest
from sqlalchemy import select
from sqlalchemy.exc import OperationalError

from surveykit.models.response import SurveyResponse
from surveykit.models.survey import SurveyDocument
from surveykit.schemas.survey import Survey, ThemeConfig
from surveykit.services.survey_store import (
    StorageError,
    StoragePermissionError,
    translate_storage_error,
)


class TestSurveyDocuments:
    """Integration tests for survey persistence."""

    def test_create_and_get(self, sql_store, sample_survey_data):
        survey_id = sql_store.create_survey(Survey(**sample_survey_data))

        loaded = sql_store.get_survey(survey_id)

        assert loaded.id == survey_id
        assert loaded.title == "Customer Feedback"
        assert [q.id for q in loaded.questions] == [q["id"] for q in sample_survey_data["questions"]]
        assert loaded.get_question("color").find_option("red").label == "Rojo"
        assert loaded.created_at.tzinfo is not None

    def test_create_ignores_client_id(self, sql_store):
        survey_id = sql_store.create_survey(Survey(id="chosen-by-client", title="X"))
        assert survey_id != "chosen-by-client"
        assert sql_store.get_survey("chosen-by-client") is None

    def test_get_missing(self, sql_store):
        assert sql_store.get_survey("missing") is None

    def test_update_merges_top_level_fields(self, sql_store, sample_survey_data):
        survey_id = sql_store.create_survey(Survey(**sample_survey_data))

        sql_store.update_survey(Survey(id=survey_id, title="Renamed"))

        loaded = sql_store.get_survey(survey_id)
        assert loaded.title == "Renamed"
        assert loaded.description == sample_survey_data["description"]
        assert len(loaded.questions) == 9

    def test_update_creates_when_missing(self, sql_store):
        sql_store.update_survey(Survey(id="seeded", title="From YAML"))
        assert sql_store.get_survey("seeded").title == "From YAML"

    def test_update_requires_id(self, sql_store):
        with pytest.raises(ValueError):
            sql_store.update_survey(Survey(title="No id"))

    def test_list_newest_first(self, sql_store, db_session):
        base = datetime(2026, 1, 1, tzinfo=timezone.utc)
        for index, survey_id in enumerate(["old", "mid", "new"]):
            db_session.add(SurveyDocument(
                id=survey_id,
                title=survey_id,
                document={"title": survey_id},
                created_at=base + timedelta(days=index),
            ))
        db_session.commit()

        assert [s.id for s in sql_store.list_surveys()] == ["new", "mid", "old"]

    def test_delete_cascades_responses(self, sql_store, db_session, sample_survey_data):
        survey_id = sql_store.create_survey(Survey(**sample_survey_data))
        sql_store.submit_response(survey_id, {"name": "Ana"})
        sql_store.submit_response(survey_id, {"name": "Bob"})

        assert sql_store.delete_survey(survey_id) is True

        remaining = db_session.execute(select(SurveyResponse)).scalars().all()
        assert remaining == []
        assert sql_store.get_survey(survey_id) is None

    def test_delete_missing(self, sql_store):
        assert sql_store.delete_survey("missing") is False


class TestResponses:
    """Integration tests for response records."""

    def test_submit_and_list(self, sql_store, sample_survey_data):
        survey_id = sql_store.create_survey(Survey(**sample_survey_data))
        answers = {"name": "Ana", "hobbies": ["reading"], "stars": 4}

        response_id = sql_store.submit_response(survey_id, answers, "ana@example.com")

        responses = sql_store.list_responses(survey_id)
        assert len(responses) == 1
        assert responses[0].id == response_id
        assert responses[0].answers == answers
        assert responses[0].respondent_email == "ana@example.com"
        assert responses[0].submitted_at.tzinfo == timezone.utc

    def test_list_oldest_first(self, sql_store, db_session):
        sql_store.update_survey(Survey(id="s1", title="S1"))
        base = datetime(2026, 1, 1, tzinfo=timezone.utc)
        for index, response_id in enumerate(["second", "first"]):
            db_session.add(SurveyResponse(
                id=response_id,
                survey_id="s1",
                answers={},
                submitted_at=base - timedelta(hours=index),
            ))
        db_session.commit()

        assert [r.id for r in sql_store.list_responses("s1")] == ["first", "second"]

    def test_responses_scoped_to_survey(self, sql_store):
        sql_store.update_survey(Survey(id="s1"))
        sql_store.update_survey(Survey(id="s2"))
        sql_store.submit_response("s1", {"q": "a"})

        assert sql_store.list_responses("s2") == []

    def test_find_response_by_email(self, sql_store):
        sql_store.update_survey(Survey(id="s1"))
        sql_store.submit_response("s1", {}, "ana@example.com")

        assert sql_store.find_response_by_email("s1", "ana@example.com") is True
        assert sql_store.find_response_by_email("s1", "bob@example.com") is False
        assert sql_store.find_response_by_email("other", "ana@example.com") is False

    def test_response_for_missing_survey_is_storage_error(self, sql_store):
        with pytest.raises(StorageError):
            sql_store.submit_response("missing", {"q": "a"})


class TestThemes:
    def test_create_list_delete(self, sql_store):
        theme_id = sql_store.create_theme("Ocean", ThemeConfig(background_color="#003366", active_color="#00ccff"))

        themes = sql_store.list_themes()
        assert len(themes) == 1
        assert themes[0].id == theme_id
        assert themes[0].config.active_color == "#00ccff"

        assert sql_store.delete_theme(theme_id) is True
        assert sql_store.delete_theme(theme_id) is False
        assert sql_store.list_themes() == []


class TestStorageErrors:
    """Tests for backend error translation."""

    def test_permission_error(self):
        error = translate_storage_error(PermissionError("nope"), "save the survey")
        assert isinstance(error, StoragePermissionError)
        assert "save the survey" in str(error)

    def test_readonly_database_message(self):
        exc = OperationalError("INSERT", {}, Exception("attempt to write a readonly database"))
        assert isinstance(translate_storage_error(exc, "save"), StoragePermissionError)

    def test_generic_failure(self):
        error = translate_storage_error(OperationalError("SELECT", {}, Exception("disk I/O error")), "load")
        assert type(error) is StorageError

    def test_session_failure_surfaces_as_storage_error(self, sql_store):
        failure = OperationalError("SELECT", {}, Exception("database is locked"))
        with patch.object(sql_store.db, "get", side_effect=failure):
            with pytest.raises(StorageError):
                sql_store.get_survey("any")
