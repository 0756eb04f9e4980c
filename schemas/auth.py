import re
from datetime import datetime
from typing import Annotated
from uuid import UUID

from pydantic import AfterValidator, BaseModel, ConfigDict, EmailStr, Field, SecretStr

SPECIAL_CHARS = "~`!@#$%^&*()_-+={[}]|\\:;\"'<,>.?/"

PASSWORD_REGEX = re.compile(r"^[A-Za-z0-9" + re.escape(SPECIAL_CHARS) + r"]+$")

LOGIN_PATTERN = r"^[A-Za-z0-9_.-]{3,64}$"


def validate_password(v: SecretStr) -> SecretStr:
    password = v.get_secret_value()

    if not 8 <= len(password) <= 64:
        raise ValueError("Password must be 8 to 64 characters long")

    # only English letters, digits and the listed special symbols; no spaces
    if not PASSWORD_REGEX.fullmatch(password):
        raise ValueError(
            "Password may contain only English letters, digits and special symbols"
        )

    if not any("A" <= ch <= "Z" for ch in password):
        raise ValueError("Password must contain an uppercase letter")
    if not any("a" <= ch <= "z" for ch in password):
        raise ValueError("Password must contain a lowercase letter")
    if not any(ch.isdigit() for ch in password):
        raise ValueError("Password must contain a digit")
    if not any(ch in SPECIAL_CHARS for ch in password):
        raise ValueError("Password must contain a special symbol")

    return v


ValidatePassword = Annotated[SecretStr, AfterValidator(validate_password)]
Login = Annotated[str, Field(min_length=3, max_length=64, pattern=LOGIN_PATTERN)]


class RegisterIn(BaseModel):

    email : EmailStr
    login: Login
    password: ValidatePassword

class LoginIn(BaseModel):

    login: str = Field(min_length=1, max_length=64)
    password: SecretStr


class UpdateUserIn(BaseModel):
    email: EmailStr
    login: Login


class UpdatePasswordIn(BaseModel):
    current_password: SecretStr
    new_password: ValidatePassword


class UserOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    email: str
    login: str
    created_at: datetime
