from pydantic import BaseModel, Field
from typing import Optional

class AdminUser(BaseModel):
    email: str
    display_name: Optional[str] = Field(None, serialization_alias="displayName")
    picture: Optional[str] = None

class AdminMe(AdminUser):
    id: str

class AuthStatus(BaseModel):
    authenticated: bool
    user: Optional[AdminUser] = None
