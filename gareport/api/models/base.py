from typing import Any, Optional
from pydantic import BaseModel


class ColumnHeaderSchema(BaseModel):
    name: str
    column_type: str
    data_type: str


class CellSchema(BaseModel):
    name: str
    column_type: str
    value: Any


class DownloadDetailsSchema(BaseModel):
    object_id: Optional[str] = None
    bucket_id: Optional[str] = None
