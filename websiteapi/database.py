import logging

import databases
import sqlalchemy

logger = logging.getLogger(__name__)

metadata = sqlalchemy.MetaData()


module_table = sqlalchemy.Table(
    "module",
    metadata,
    sqlalchemy.Column("id", sqlalchemy.Integer, primary_key=True),
    sqlalchemy.Column("name", sqlalchemy.String(128), nullable=False),
    sqlalchemy.Column("description", sqlalchemy.Text),
)

form_table = sqlalchemy.Table(
    "form",
    metadata,
    sqlalchemy.Column("id", sqlalchemy.Integer, primary_key=True),
    sqlalchemy.Column("name", sqlalchemy.String(128), nullable=False),
    sqlalchemy.Column("is_published", sqlalchemy.Boolean, default=False, nullable=False),
    sqlalchemy.Column("module_id", sqlalchemy.ForeignKey("module.id"), nullable=False),
    sqlalchemy.Column("created_at", sqlalchemy.DateTime, default=sqlalchemy.func.now()),
)

section_table = sqlalchemy.Table(
    "section",
    metadata,
    sqlalchemy.Column("id", sqlalchemy.Integer, primary_key=True),
    sqlalchemy.Column("form_id", sqlalchemy.ForeignKey("form.id"), nullable=False),
    sqlalchemy.Column("title", sqlalchemy.String(256)),
    sqlalchemy.Column("order", sqlalchemy.Integer, default=0, nullable=False),
)

subform_table = sqlalchemy.Table(
    "subform",
    metadata,
    sqlalchemy.Column("id", sqlalchemy.Integer, primary_key=True),
    sqlalchemy.Column("section_id", sqlalchemy.ForeignKey("section.id"), nullable=False),
    sqlalchemy.Column("name", sqlalchemy.String(128), nullable=False),
    sqlalchemy.Column("title", sqlalchemy.String(256)),
    sqlalchemy.Column("order", sqlalchemy.Integer, default=0, nullable=False),
)

# a field hangs off a section directly, or off one of the section's subforms
field_table = sqlalchemy.Table(
    "field",
    metadata,
    sqlalchemy.Column("id", sqlalchemy.Integer, primary_key=True),
    sqlalchemy.Column("section_id", sqlalchemy.ForeignKey("section.id"), nullable=True),
    sqlalchemy.Column("subform_id", sqlalchemy.ForeignKey("subform.id"), nullable=True),
    sqlalchemy.Column("name", sqlalchemy.String(64), nullable=False),
    sqlalchemy.Column("label", sqlalchemy.String(128)),
    sqlalchemy.Column("field_type", sqlalchemy.String(32), nullable=False),
    sqlalchemy.Column("required", sqlalchemy.Boolean, default=False),
    sqlalchemy.Column("options", sqlalchemy.JSON, default=list),
    sqlalchemy.Column("order", sqlalchemy.Integer, default=0, nullable=False),
)

formrecord_table = sqlalchemy.Table(
    "form_record",
    metadata,
    sqlalchemy.Column("id", sqlalchemy.Integer, primary_key=True),
    sqlalchemy.Column("form_id", sqlalchemy.ForeignKey("form.id"), nullable=False),
    sqlalchemy.Column("record_data", sqlalchemy.JSON, nullable=False), # JSON value, or a JSON-encoded string
    sqlalchemy.Column("submitted_by", sqlalchemy.String(256)),
    sqlalchemy.Column("submitted_at", sqlalchemy.DateTime, default=sqlalchemy.func.now()),
    sqlalchemy.Column("status", sqlalchemy.String(16), default="draft"), # draft, published
)


def create_database(config) -> databases.Database:
    return databases.Database(
        config.DATABASE_URL, force_rollback=config.DB_FORCE_ROLL_BACK
    )


def create_schema(database_url: str):
    """Create any missing tables. Uses a short-lived synchronous engine."""
    connect_args = {}
    if database_url.startswith("sqlite"):
        connect_args = {"check_same_thread": False}
    engine = sqlalchemy.create_engine(database_url, connect_args=connect_args)
    try:
        metadata.create_all(engine)
    finally:
        engine.dispose()
    logger.info("Database schema is ready.")
