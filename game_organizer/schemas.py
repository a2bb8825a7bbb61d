from typing import Optional

from pydantic import BaseModel


# Fields are optional so a missing username/password is answered with the
# same 401 as a wrong one instead of a 422.
class LoginRequest(BaseModel):
    username: Optional[str] = None
    password: Optional[str] = None


class RegisterRequest(BaseModel):
    username: Optional[str] = None
    password: Optional[str] = None


class RegisterResponse(BaseModel):
    success: bool


class CurrentUser(BaseModel):
    username: str
