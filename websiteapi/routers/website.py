import json
import logging
from typing import Annotated

import databases
from fastapi import APIRouter, Depends

from websiteapi.config import GlobalConfig
from websiteapi.dependencies import get_app_config, get_database
from websiteapi.errors import DataIntegrityError, NotFoundError, UnexpectedError
from websiteapi.models.form import FormStructure
from websiteapi.models.homepage import HomepageMetadata, HomepageRecord
from websiteapi.queries import get_form_structure, get_latest_published_record

logger = logging.getLogger(__name__)
router = APIRouter()


def parse_record_data(record_data):
    """Decode the stored column text into the payload.

    A payload saved as a JSON-encoded string is decoded a second time.
    Values a driver has already decoded pass through.
    """
    try:
        if isinstance(record_data, str):
            record_data = json.loads(record_data)
        if isinstance(record_data, str):
            record_data = json.loads(record_data)
    except json.JSONDecodeError as e:
        raise DataIntegrityError(cause=e) from e
    return record_data


@router.get("/homepage", response_model=HomepageRecord, status_code=200)
async def get_homepage(
    database: Annotated[databases.Database, Depends(get_database)],
    config: Annotated[GlobalConfig, Depends(get_app_config)],
):
    try:
        record = await get_latest_published_record(
            database,
            module_name=config.HOMEPAGE_MODULE_NAME,
            form_name=config.HOMEPAGE_FORM_NAME,
            published_status=config.PUBLISHED_STATUS,
        )
    except Exception as e:
        raise UnexpectedError(cause=e) from e

    if not record:
        raise NotFoundError(
            "Homepage data not found. Ensure the form and record are set up in the database."
        )

    return HomepageRecord(
        data=parse_record_data(record.record_data),
        metadata=HomepageMetadata(
            form_id=record.form_id,
            form_name=record.form_name,
            submitted_by=record.submitted_by,
            submitted_at=record.submitted_at,
            status=record.status,
        ),
    )


@router.get("/homepage/structure", response_model=FormStructure, status_code=200)
async def get_homepage_structure(
    database: Annotated[databases.Database, Depends(get_database)],
    config: Annotated[GlobalConfig, Depends(get_app_config)],
):
    try:
        form = await get_form_structure(
            database,
            module_name=config.HOMEPAGE_MODULE_NAME,
            form_name=config.HOMEPAGE_FORM_NAME,
            published_status=config.PUBLISHED_STATUS,
        )
    except Exception as e:
        raise UnexpectedError(cause=e) from e

    if not form:
        raise NotFoundError("Form structure not found")

    logger.debug(f"Form {form.id} has {len(form.sections)} sections")
    return form
