"""Admin endpoints: survey management, results, themes and assets.

Every route here requires the admin bearer token.
"""

from datetime import datetime, timezone

from fastapi import APIRouter, Depends, File, HTTPException, Query, Response, UploadFile
from fastapi.responses import HTMLResponse

from surveykit.config import get_settings
from surveykit.middleware.admin_auth import verify_admin_token
from surveykit.schemas.api import (
    AssetUploadView,
    CreatedView,
    CreateThemeRequest,
    ImportQuestionsRequest,
    ShareLinksView,
    SurveySummaryView,
)
from surveykit.schemas.results import ResultsView
from surveykit.schemas.survey import Question, SavedTheme, Survey
from surveykit.routes.deps import get_asset_store, get_renderer, get_store
from surveykit.routes.respondent import load_survey
from surveykit.services.asset_store import AssetStore
from surveykit.services.question_import import parse_questions
from surveykit.services.report_renderer import ReportRenderer
from surveykit.services.results import (
    CSV_MEDIA_TYPE,
    build_results_view,
    export_csv,
    export_filename,
)
from surveykit.services.share import embed_code, results_url, share_url
from surveykit.services.survey_store import SurveyNotFoundError, SurveyStore
from surveykit.logging_config import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/api/admin", dependencies=[Depends(verify_admin_token)])


def share_links(survey_id: str) -> ShareLinksView:
    base_url = get_settings().public_base_url
    return ShareLinksView(
        survey_id=survey_id,
        share_url=share_url(base_url, survey_id),
        results_url=results_url(base_url, survey_id),
        embed_code=embed_code(base_url, survey_id),
    )


# Surveys


@router.get("/surveys", response_model=list[SurveySummaryView])
def list_surveys(store: SurveyStore = Depends(get_store)) -> list[SurveySummaryView]:
    """All surveys, newest first."""
    base_url = get_settings().public_base_url
    return [
        SurveySummaryView(
            id=survey.id,
            title=survey.title,
            privacy=survey.privacy,
            question_count=len(survey.answerable_questions()),
            created_at=survey.created_at,
            share_url=share_url(base_url, survey.id),
        )
        for survey in store.list_surveys()
    ]


@router.post("/surveys", response_model=ShareLinksView, status_code=201)
def create_survey(survey: Survey, store: SurveyStore = Depends(get_store)) -> ShareLinksView:
    """Create a survey; the store assigns its id."""
    survey_id = store.create_survey(survey)
    return share_links(survey_id)


@router.get("/surveys/{survey_id}", response_model=Survey)
def get_survey(survey_id: str, store: SurveyStore = Depends(get_store)) -> Survey:
    return load_survey(store, survey_id)


@router.put("/surveys/{survey_id}", response_model=Survey)
def update_survey(
    survey_id: str,
    survey: Survey,
    store: SurveyStore = Depends(get_store),
) -> Survey:
    """Merge the posted fields into an existing survey.

    Only fields present in the body are changed; the id comes from the path.
    """
    load_survey(store, survey_id)
    store.update_survey(survey.model_copy(update={"id": survey_id}))
    return load_survey(store, survey_id)


@router.delete("/surveys/{survey_id}", status_code=204)
def delete_survey(survey_id: str, store: SurveyStore = Depends(get_store)) -> Response:
    """Delete a survey together with all of its responses."""
    if not store.delete_survey(survey_id):
        raise SurveyNotFoundError(f"Survey '{survey_id}' not found")
    return Response(status_code=204)


@router.post("/surveys/{survey_id}/questions/import", response_model=list[Question])
def import_questions(
    survey_id: str,
    body: ImportQuestionsRequest,
    store: SurveyStore = Depends(get_store),
) -> list[Question]:
    """Append questions parsed from ``title | type | options`` lines."""
    survey = load_survey(store, survey_id)
    imported = parse_questions(body.text)
    store.update_survey(Survey(id=survey_id, questions=survey.questions + imported))
    logger.info(f"Imported {len(imported)} questions", extra={"survey_id": survey_id})
    return imported


@router.get("/surveys/{survey_id}/share", response_model=ShareLinksView)
def get_share_links(survey_id: str, store: SurveyStore = Depends(get_store)) -> ShareLinksView:
    load_survey(store, survey_id)
    return share_links(survey_id)


# Results


@router.get("/results", response_model=ResultsView)
def get_results(
    id: str = Query(..., description="Survey id"),
    store: SurveyStore = Depends(get_store),
) -> ResultsView:
    survey = load_survey(store, id)
    return build_results_view(
        survey,
        store.list_responses(id),
        now=datetime.now(timezone.utc),
        window_days=get_settings().recent_activity_days,
    )


@router.get("/results/export")
def export_results(
    id: str = Query(..., description="Survey id"),
    store: SurveyStore = Depends(get_store),
) -> Response:
    """Download every response as CSV."""
    settings = get_settings()
    survey = load_survey(store, id)
    content = export_csv(
        survey,
        store.list_responses(id),
        tz_name=settings.display_timezone,
        timestamp_format=settings.export_timestamp_format,
    )
    filename = export_filename(survey.title)
    return Response(
        content=content.encode("utf-8"),
        media_type=CSV_MEDIA_TYPE,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.get("/results/report", response_class=HTMLResponse)
def results_report(
    id: str = Query(..., description="Survey id"),
    store: SurveyStore = Depends(get_store),
    renderer: ReportRenderer = Depends(get_renderer),
) -> HTMLResponse:
    survey = load_survey(store, id)
    view = build_results_view(
        survey,
        store.list_responses(id),
        now=datetime.now(timezone.utc),
        window_days=get_settings().recent_activity_days,
    )
    return HTMLResponse(renderer.render_results(view))


# Themes


@router.get("/themes", response_model=list[SavedTheme])
def list_themes(store: SurveyStore = Depends(get_store)) -> list[SavedTheme]:
    return store.list_themes()


@router.post("/themes", response_model=CreatedView, status_code=201)
def create_theme(body: CreateThemeRequest, store: SurveyStore = Depends(get_store)) -> CreatedView:
    return CreatedView(id=store.create_theme(body.name, body.config))


@router.delete("/themes/{theme_id}", status_code=204)
def delete_theme(theme_id: str, store: SurveyStore = Depends(get_store)) -> Response:
    if not store.delete_theme(theme_id):
        raise HTTPException(status_code=404, detail="Theme not found")
    return Response(status_code=204)


# Assets


@router.post("/assets", response_model=AssetUploadView, status_code=201)
async def upload_asset(
    file: UploadFile = File(...),
    assets: AssetStore = Depends(get_asset_store),
) -> AssetUploadView:
    """Upload a banner image and return its public URL."""
    content = await file.read()
    return AssetUploadView(url=assets.upload(file.filename or "", content))
