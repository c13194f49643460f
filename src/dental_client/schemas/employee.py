"""Schemas for the signed-in employee and the persisted session."""
from pydantic import model_validator

from dental_client.schemas.base import ApiModel


class Employee(ApiModel):
    """The employee a session belongs to."""

    id: int
    first_name: str
    last_name: str
    email: str
    role_id: int
    is_active: bool = True

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"


class SessionState(ApiModel):
    """
    Authentication state: Anonymous or Authenticated.

    ``is_authenticated`` is derived from ``employee`` and must agree with it;
    a persisted blob where they disagree is rejected as malformed.
    """

    employee: Employee | None = None
    is_authenticated: bool = False

    @model_validator(mode="after")
    def check_consistent(self) -> "SessionState":
        if self.is_authenticated != (self.employee is not None):
            raise ValueError("is_authenticated must be true exactly when employee is set")
        return self

    @classmethod
    def anonymous(cls) -> "SessionState":
        return cls()

    @classmethod
    def authenticated(cls, employee: Employee) -> "SessionState":
        return cls(employee=employee, is_authenticated=True)
