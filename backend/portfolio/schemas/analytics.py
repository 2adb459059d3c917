from pydantic import BaseModel, Field
from typing import Optional

class VisitCreate(BaseModel):
    fingerprint: Optional[str] = Field(None, description="Client fingerprint; re-hashed before storage")
    path: Optional[str] = Field("/", max_length=500)
    referrer: Optional[str] = None

class VisitResponse(BaseModel):
    success: bool
    session_id: Optional[str] = Field(None, serialization_alias="sessionId")
    visit_id: Optional[int] = Field(None, serialization_alias="visitId")
    message: Optional[str] = None

class ClickCreate(BaseModel):
    session_id: Optional[str] = Field(None, alias="sessionId")
    link_url: Optional[str] = Field(None, alias="linkUrl")
    link_label: Optional[str] = Field(None, alias="linkLabel", max_length=200)
    referrer_path: Optional[str] = Field(None, alias="referrerPath", max_length=500)

    class Config:
        populate_by_name = True

class ClickResponse(BaseModel):
    success: bool
    click_id: Optional[int] = Field(None, serialization_alias="clickId")
    message: Optional[str] = None
