"""Base Pydantic models for invision-auth.

Every model in the package inherits from :class:`AuthBaseModel` so that
configuration and normalized user data share the same behavior:

- Strict field validation (no extra fields allowed)
- Immutable instances, safe to share between requests

Example:
    >>> from invision_auth.models import AuthBaseModel
    >>>
    >>> class MyModel(AuthBaseModel):
    ...     name: str
    >>>
    >>> MyModel(name="test").model_dump()
    {'name': 'test'}
"""

from pydantic import BaseModel, ConfigDict


class AuthBaseModel(BaseModel):
    """Base model for all invision-auth Pydantic models.

    - extra="forbid": Rejects any fields not defined in the model
    - frozen=True: Makes instances immutable
    """

    model_config = ConfigDict(extra="forbid", frozen=True)
