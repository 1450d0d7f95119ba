# storefront/schemas/user_schemas.py
from pydantic import BaseModel
from typing import Literal

class UserLogin(BaseModel):
    username: str
    password: str

class TokenResponse(BaseModel):
    access_token: str
    token_type: Literal["bearer"] = "bearer"
