from datetime import datetime, timezone
from pydantic import BaseModel, ConfigDict, PlainSerializer
from pydantic.alias_generators import to_camel
from typing import Annotated, List, Optional, Any


def isoformat_utc(value: datetime) -> str:
    """ISO-8601 in UTC with millisecond precision and a ``Z`` suffix; naive values are taken as UTC."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    value = value.astimezone(timezone.utc)
    return value.isoformat(timespec="milliseconds").replace("+00:00", "Z")


UTCDateTime = Annotated[datetime, PlainSerializer(isoformat_utc, return_type=str)]


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Module(CamelModel):
    id: int
    name: str
    description: Optional[str] = None


class FormField(CamelModel):
    id: int
    section_id: Optional[int] = None
    subform_id: Optional[int] = None
    name: str
    label: Optional[str] = None
    field_type: str
    required: bool = False
    options: Optional[Any] = None
    order: int = 0


class Subform(CamelModel):
    id: int
    section_id: int
    name: str
    title: Optional[str] = None
    order: int = 0
    fields: List[FormField] = []


class Section(CamelModel):
    id: int
    form_id: int
    title: Optional[str] = None
    order: int = 0
    fields: List[FormField] = []
    subforms: List[Subform] = []


class RecordSnapshot(CamelModel):
    # stored value as-is, a JSON-encoded string is not decoded here
    record_data: Any


class FormStructure(CamelModel):
    id: int
    name: str
    is_published: bool
    module_id: int
    created_at: Optional[UTCDateTime] = None
    module: Module
    sections: List[Section] = []
    records: List[RecordSnapshot] = []
