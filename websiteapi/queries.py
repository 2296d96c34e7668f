import json
import logging
from typing import Dict, List, Optional

import databases
import sqlalchemy

from websiteapi.database import (
    module_table,
    form_table,
    section_table,
    subform_table,
    field_table,
    formrecord_table,
)
from websiteapi.models.form import (
    FormField,
    FormStructure,
    Module,
    RecordSnapshot,
    Section,
    Subform,
)

logger = logging.getLogger(__name__)

# read as text: decoding happens in the callers, where a corrupt payload is reported
stored_record_data = sqlalchemy.type_coerce(
    formrecord_table.c.record_data, sqlalchemy.Text
).label("record_data")


def load_stored_json(stored):
    """Decode a stored JSON column value once; text that is not valid JSON is returned as-is."""
    if not isinstance(stored, str):
        return stored
    try:
        return json.loads(stored)
    except json.JSONDecodeError:
        logger.warning("Stored record data is not valid JSON, returning it as text")
        return stored


async def get_latest_published_record(
    database: databases.Database,
    module_name: str,
    form_name: str,
    published_status: str = "published",
):
    """Latest published record of the published form ``form_name`` in module ``module_name``.

    Returns a row with ``record_data`` (the stored JSON text, undecoded),
    ``submitted_by``, ``submitted_at``, ``status``, ``form_id`` and
    ``form_name``, or None.
    """
    query = (
        sqlalchemy.select(
            stored_record_data,
            formrecord_table.c.submitted_by,
            formrecord_table.c.submitted_at,
            formrecord_table.c.status,
            form_table.c.id.label("form_id"),
            form_table.c.name.label("form_name"),
        )
        .select_from(
            formrecord_table
            .join(form_table, formrecord_table.c.form_id == form_table.c.id)
            .join(module_table, form_table.c.module_id == module_table.c.id)
        )
        .where(
            form_table.c.name == form_name,
            module_table.c.name == module_name,
            form_table.c.is_published == sqlalchemy.true(),
            formrecord_table.c.status == published_status,
        )
        .order_by(formrecord_table.c.submitted_at.desc(), formrecord_table.c.id.desc())
        .limit(1)
    )
    logger.debug(f"Fetching latest {published_status} record of {module_name}/{form_name}")
    return await database.fetch_one(query)


async def _get_fields(
    database: databases.Database,
    column,
    parent_ids: List[int],
    direct_only: bool = False,
) -> Dict[int, List[FormField]]:
    grouped = {pid: [] for pid in parent_ids}
    if not parent_ids:
        return grouped

    query = field_table.select().where(column.in_(parent_ids))
    if direct_only:
        query = query.where(field_table.c.subform_id.is_(None))
    query = query.order_by(field_table.c.order, field_table.c.id)

    for f in await database.fetch_all(query):
        grouped[f[column.name]].append(
            FormField(
                id=f.id,
                section_id=f.section_id,
                subform_id=f.subform_id,
                name=f.name,
                label=f.label,
                field_type=f.field_type,
                required=bool(f.required),
                options=f.options,
                order=f.order,
            )
        )
    return grouped


async def get_form_structure(
    database: databases.Database,
    module_name: str,
    form_name: str,
    published_status: str = "published",
) -> Optional[FormStructure]:
    # first match by id when several forms share the name; published flag not checked
    form_query = (
        sqlalchemy.select(
            form_table,
            module_table.c.name.label("module_name"),
            module_table.c.description.label("module_description"),
        )
        .select_from(form_table.join(module_table, form_table.c.module_id == module_table.c.id))
        .where(form_table.c.name == form_name, module_table.c.name == module_name)
        .order_by(form_table.c.id)
        .limit(1)
    )
    form = await database.fetch_one(form_query)
    if not form:
        return None

    sections_query = (
        section_table.select()
        .where(section_table.c.form_id == form.id)
        .order_by(section_table.c.order, section_table.c.id)
    )
    sections = await database.fetch_all(sections_query)
    section_ids = [s.id for s in sections]

    subforms = []
    if section_ids:
        subforms_query = (
            subform_table.select()
            .where(subform_table.c.section_id.in_(section_ids))
            .order_by(subform_table.c.order, subform_table.c.id)
        )
        subforms = await database.fetch_all(subforms_query)
    subform_ids = [sf.id for sf in subforms]

    section_fields = await _get_fields(
        database, field_table.c.section_id, section_ids, direct_only=True
    )
    subform_fields = await _get_fields(database, field_table.c.subform_id, subform_ids)

    subforms_by_section = {sid: [] for sid in section_ids}
    for sf in subforms:
        subforms_by_section[sf.section_id].append(
            Subform(
                id=sf.id,
                section_id=sf.section_id,
                name=sf.name,
                title=sf.title,
                order=sf.order,
                fields=subform_fields[sf.id],
            )
        )

    record_query = (
        sqlalchemy.select(stored_record_data)
        .where(
            formrecord_table.c.form_id == form.id,
            formrecord_table.c.status == published_status,
        )
        .order_by(formrecord_table.c.submitted_at.desc(), formrecord_table.c.id.desc())
        .limit(1)
    )
    records = await database.fetch_all(record_query)

    return FormStructure(
        id=form.id,
        name=form.name,
        is_published=bool(form.is_published),
        module_id=form.module_id,
        created_at=form.created_at,
        module=Module(
            id=form.module_id,
            name=form.module_name,
            description=form.module_description,
        ),
        sections=[
            Section(
                id=s.id,
                form_id=s.form_id,
                title=s.title,
                order=s.order,
                fields=section_fields[s.id],
                subforms=subforms_by_section[s.id],
            )
            for s in sections
        ],
        records=[RecordSnapshot(record_data=load_stored_json(r.record_data)) for r in records],
    )
