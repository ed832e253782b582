"""
Pydantic schemas for database credentials.

The RDS credentials secret is a JSON document of the form::

    {
        "host": "mydb.cluster-xyz.us-east-1.rds.amazonaws.com",
        "port": 3306,
        "username": "admin",
        "password": "...",
        "database": "app"
    }

Secrets generated by RDS itself name the database ``dbname`` instead of
``database``; both keys are accepted. Every field is required: a secret with
a missing password is rejected rather than connecting with partial
credentials.
"""

from __future__ import annotations

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, SecretStr, field_validator


class CredentialSet(BaseModel):
    """Immutable connection credentials parsed from Secrets Manager."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    host: str = Field(min_length=1, description="Database endpoint hostname.")
    port: int = Field(ge=1, le=65535, description="TCP port of the database listener.")
    username: str = Field(min_length=1, description="Database user name.")
    password: SecretStr = Field(description="Database password (never logged).")
    database_name: str = Field(
        min_length=1,
        validation_alias=AliasChoices("database", "dbname", "database_name"),
        description="Default schema to select after connecting.",
    )

    @field_validator("host", "username", "database_name")
    @classmethod
    def strip_whitespace(cls, value: str) -> str:
        stripped = value.strip()
        if not stripped:
            raise ValueError("must not be blank")
        return stripped

    @field_validator("password")
    @classmethod
    def password_not_empty(cls, value: SecretStr) -> SecretStr:
        if not value.get_secret_value():
            raise ValueError("password must not be empty")
        return value

    def connect_kwargs(self) -> dict:
        """Keyword arguments for ``pymysql.connect``."""
        return {
            "host": self.host,
            "port": self.port,
            "user": self.username,
            "password": self.password.get_secret_value(),
            "database": self.database_name,
        }
