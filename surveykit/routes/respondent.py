"""Respondent-facing endpoints: open a survey, unlock it, submit answers.

The flow for one respondent is:
1. GET /survey?id=... returns the header, the access state and, when the
   gate is open, the grouped form
2. POST /survey/access?id=... unlocks a private survey with an email
3. POST /survey/responses?id=... validates and stores the answers

Public surveys limited to one response are tracked with a
``responded_<survey_id>`` cookie; private ones by the stored email.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query, Request, Response
from fastapi.responses import HTMLResponse

from surveykit.schemas.api import (
    AccessRequest,
    SubmitResponseRequest,
    SubmitResponseResult,
    SurveyAccessView,
)
from surveykit.schemas.survey import Survey
from surveykit.routes.deps import get_renderer, get_store
from surveykit.services.access_gate import (
    ALREADY_RESPONDED_MESSAGE,
    LOCKED_MESSAGE,
    AccessGate,
    AccessState,
)
from surveykit.services.form_engine import AnswerForm, build_form_view
from surveykit.services.report_renderer import ReportRenderer
from surveykit.services.submission import SubmissionPipeline
from surveykit.services.survey_store import SurveyNotFoundError, SurveyStore
from surveykit.logging_config import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/survey")

RESPONDED_COOKIE_PREFIX = "responded_"
RESPONDED_COOKIE_MAX_AGE = 365 * 24 * 60 * 60


def responded_cookie_name(survey_id: str) -> str:
    return f"{RESPONDED_COOKIE_PREFIX}{survey_id}"


def load_survey(store: SurveyStore, survey_id: str) -> Survey:
    survey = store.get_survey(survey_id)
    if survey is None:
        raise SurveyNotFoundError(f"Survey '{survey_id}' not found")
    return survey


def open_gate(survey: Survey, store: SurveyStore, request: Request) -> AccessGate:
    marker = request.cookies.get(responded_cookie_name(survey.id)) is not None
    return AccessGate(survey, store, responded_marker=marker)


def access_view(survey: Survey, gate: AccessGate) -> SurveyAccessView:
    state = gate.check_already_responded()
    message: Optional[str] = None
    form = None
    if state == AccessState.LOCKED:
        message = LOCKED_MESSAGE
    elif state == AccessState.ALREADY_RESPONDED:
        message = ALREADY_RESPONDED_MESSAGE
    else:
        form = build_form_view(survey)

    return SurveyAccessView(
        survey_id=survey.id,
        title=survey.title,
        privacy=survey.privacy,
        state=state.value,
        message=message,
        form=form,
    )


@router.get("", response_model=SurveyAccessView)
def get_survey(
    request: Request,
    id: str = Query(..., description="Survey id"),
    store: SurveyStore = Depends(get_store),
) -> SurveyAccessView:
    """Open a survey for answering."""
    survey = load_survey(store, id)
    return access_view(survey, open_gate(survey, store, request))


@router.post("/access", response_model=SurveyAccessView)
def unlock_survey(
    body: AccessRequest,
    request: Request,
    id: str = Query(..., description="Survey id"),
    store: SurveyStore = Depends(get_store),
) -> SurveyAccessView:
    """Unlock a private survey with an email on its allow-list.

    Raises:
        AccessDeniedError: If the email is not allowed (mapped to 403)
    """
    survey = load_survey(store, id)
    gate = open_gate(survey, store, request)
    gate.unlock(body.email)
    return access_view(survey, gate)


@router.post("/responses", response_model=SubmitResponseResult, status_code=201)
def submit_response(
    body: SubmitResponseRequest,
    request: Request,
    response: Response,
    id: str = Query(..., description="Survey id"),
    store: SurveyStore = Depends(get_store),
) -> SubmitResponseResult:
    """Validate and store one set of answers.

    Private surveys re-check the email on every submission, since the
    server keeps no session between unlock and submit.
    """
    survey = load_survey(store, id)
    gate = open_gate(survey, store, request)
    if survey.is_private and body.email:
        gate.unlock(body.email)
    gate.ensure_form_access()

    form = AnswerForm.from_payload(survey, body.answers)
    answers = form.validate_for_submission()

    response_id = SubmissionPipeline(store).submit(survey.id, answers, gate.email)
    state = gate.record_submission()

    if survey.limit_one_response and not survey.is_private:
        response.set_cookie(
            responded_cookie_name(survey.id),
            "1",
            max_age=RESPONDED_COOKIE_MAX_AGE,
            httponly=True,
            samesite="lax",
        )

    return SubmitResponseResult(
        response_id=response_id,
        state=state.value,
        thank_you_message=survey.thank_you_message,
    )


@router.get("/thank-you", response_class=HTMLResponse)
def thank_you(
    id: str = Query(..., description="Survey id"),
    store: SurveyStore = Depends(get_store),
    renderer: ReportRenderer = Depends(get_renderer),
) -> HTMLResponse:
    survey = load_survey(store, id)
    return HTMLResponse(renderer.render_thank_you(survey.title, survey.thank_you_message))
