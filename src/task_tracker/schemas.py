"""Request body parsing using Pydantic."""

from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError


class RegisterRequest(BaseModel):
    """Registration request. Presence checks only, no format rules."""
    email: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)


class LoginRequest(BaseModel):
    """Login request."""
    email: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class TaskCreateRequest(BaseModel):
    """New task. Priority and due date are stored as given."""
    model_config = ConfigDict(populate_by_name=True)

    title: str = Field(..., min_length=1)
    description: Optional[str] = None
    completed: Optional[bool] = False
    priority: Optional[str] = 'medium'
    due_date: Optional[str] = Field(default=None, alias='dueDate')


class TaskUpdateRequest(BaseModel):
    """Partial task update: only keys present in the body are applied."""
    model_config = ConfigDict(populate_by_name=True)

    title: Optional[str] = None
    description: Optional[str] = None
    completed: Optional[bool] = None
    priority: Optional[str] = None
    due_date: Optional[str] = Field(default=None, alias='dueDate')

    def changes(self) -> Dict[str, Any]:
        """Fields that were present in the request, including falsy values."""
        return self.model_dump(exclude_unset=True)


def json_object(payload: Any) -> Dict[str, Any]:
    """Treat anything that is not a JSON object as an empty body."""
    return payload if isinstance(payload, dict) else {}


def failed_fields(error: ValidationError) -> set:
    """Names of the top-level fields that failed validation."""
    return {err['loc'][0] for err in error.errors() if err.get('loc')}
