from typing import Any, Optional

from websiteapi.models.form import CamelModel, UTCDateTime


class HomepageMetadata(CamelModel):
    form_id: int
    form_name: str
    submitted_by: Optional[str] = None
    submitted_at: Optional[UTCDateTime] = None
    status: str


class HomepageRecord(CamelModel):
    data: Any
    metadata: HomepageMetadata


class Health(CamelModel):
    status: str
    timestamp: str
