"""
vaultstage auth models.

Pydantic models for the operator session and the login form.
"""

from pydantic import BaseModel, Field


class Session(BaseModel):
    """
    An operator session against one vault.

    ``is_authenticated`` is derived from the token so the two can never
    disagree.
    """

    vault_url: str = ""
    token: str = Field(default="", repr=False)

    @property
    def is_authenticated(self) -> bool:
        return bool(self.token)

    model_config = {
        "json_schema_extra": {
            "example": {
                "vault_url": "https://pvwa.example.com/PasswordVault",
                "token": "eyJhbGciOi...",
            }
        },
    }


class LoginForm(BaseModel):
    """Credentials being typed in. The password is wiped after login."""

    vault_url: str = ""
    username: str = ""
    password: str = Field(default="", repr=False)
