"""Shared FastAPI dependencies for the route modules."""

from fastapi import Depends
from sqlalchemy.orm import Session

from surveykit.config import get_settings
from surveykit.models.database import get_db
from surveykit.services.asset_store import AssetStore, LocalAssetStore
from surveykit.services.report_renderer import ReportRenderer
from surveykit.services.survey_store import SqlSurveyStore, SurveyStore


def get_store(db: Session = Depends(get_db)) -> SurveyStore:
    return SqlSurveyStore(db)


def get_asset_store() -> AssetStore:
    settings = get_settings()
    return LocalAssetStore(settings.asset_dir, settings.asset_base_url)


def get_renderer() -> ReportRenderer:
    settings = get_settings()
    return ReportRenderer(settings.display_timezone, settings.export_timestamp_format)
