"""Survey loader for declarative YAML survey definitions.

Surveys can be written as YAML files (one survey per file, the file stem
being the survey id unless the document sets one). Loaded definitions are
validated against the Pydantic schemas, cached, and can be seeded into the
store at startup.
"""

from functools import lru_cache
from pathlib import Path
from typing import Optional

import yaml
from pydantic import ValidationError

from surveykit.schemas.survey import Survey
from surveykit.services.survey_store import SurveyNotFoundError, SurveyStore
from surveykit.logging_config import get_logger

logger = get_logger(__name__)


class SurveyValidationError(Exception):
    """Raised when a survey definition fails validation."""
    pass


def parse_survey_yaml(text: str, default_id: Optional[str] = None) -> Survey:
    """Parse and validate a YAML survey definition.

    Args:
        text: YAML document
        default_id: Id to use when the document does not set one

    Returns:
        Validated Survey object

    Raises:
        SurveyValidationError: If the YAML is malformed or fails validation
    """
    try:
        raw_data = yaml.safe_load(text)
    except yaml.YAMLError as e:
        logger.error(f"YAML parsing error: {e}")
        raise SurveyValidationError(f"Invalid YAML: {e}")

    if not isinstance(raw_data, dict):
        raise SurveyValidationError("Survey definition must be a mapping")

    if default_id and not raw_data.get("id"):
        raw_data["id"] = default_id

    try:
        return Survey.model_validate(raw_data)
    except ValidationError as e:
        logger.error(f"Validation error for survey {raw_data.get('id')}: {e}")
        raise SurveyValidationError(f"Validation failed for survey '{raw_data.get('id')}': {e}")


class SurveyLoader:
    """Service for loading and caching YAML survey definitions."""

    def __init__(self, surveys_dir: str):
        """Initialize survey loader.

        Args:
            surveys_dir: Path to directory of ``<id>.yaml`` files
        """
        self.surveys_dir = Path(surveys_dir)

        if not self.surveys_dir.exists():
            logger.warning(f"Surveys directory not found: {self.surveys_dir}")

    @lru_cache(maxsize=128)
    def load_survey(self, survey_id: str) -> Survey:
        """Load and validate a survey from its YAML file.

        Results are cached. Clear cache with clear_cache() if needed.

        Raises:
            SurveyNotFoundError: If the file doesn't exist
            SurveyValidationError: If the survey fails validation

        Example:
            >>> loader = SurveyLoader("./surveys")
            >>> survey = loader.load_survey("customer_satisfaction")
            >>> survey.title
            'Customer Satisfaction'
        """
        yaml_path = self.surveys_dir / f"{survey_id}.yaml"

        if not yaml_path.exists():
            logger.error(f"Survey file not found: {yaml_path}")
            raise SurveyNotFoundError(f"Survey '{survey_id}' not found at {yaml_path}")

        try:
            text = yaml_path.read_text(encoding="utf-8")
        except OSError as e:
            logger.error(f"Error reading survey file {yaml_path}: {e}")
            raise SurveyValidationError(f"Error reading survey '{survey_id}': {e}")

        survey = parse_survey_yaml(text, default_id=survey_id)
        logger.info(f"Successfully loaded survey: {survey.id}")
        return survey

    def list_surveys(self) -> list[str]:
        """List all available survey file ids, sorted."""
        if not self.surveys_dir.exists():
            return []

        survey_ids = [f.stem for f in self.surveys_dir.glob("*.yaml")]
        logger.debug(f"Found {len(survey_ids)} surveys: {survey_ids}")
        return sorted(survey_ids)

    def clear_cache(self):
        """Clear the survey cache."""
        self.load_survey.cache_clear()
        logger.info("Survey cache cleared")


def seed_surveys(store: SurveyStore, loader: SurveyLoader) -> list[str]:
    """Upsert every YAML definition into the store.

    Invalid files are logged and skipped so one bad file does not block
    the others.

    Returns:
        Ids of the surveys that were seeded
    """
    seeded = []
    for file_id in loader.list_surveys():
        try:
            survey = loader.load_survey(file_id)
        except SurveyValidationError as e:
            logger.error(f"Skipping survey file {file_id}: {e}")
            continue
        store.update_survey(survey)
        seeded.append(survey.id)

    logger.info(f"Seeded {len(seeded)} surveys from {loader.surveys_dir}")
    return seeded
