"""Base Pydantic model configuration for mchpay models.

All mchpay models inherit from MchBaseModel to ensure consistent behavior:
- Immutability (frozen=True) so credentials and parameters can be shared across threads
- Strict validation (extra="forbid") to catch typos in field names
- Flexible field naming (populate_by_name=True) for alias support
"""

from pydantic import BaseModel, ConfigDict


class MchBaseModel(BaseModel):
    """Base model for all mchpay value objects.

    Example:
        >>> class MyModel(MchBaseModel):
        ...     name: str
        >>>
        >>> obj = MyModel(name="test")
        >>> obj.name = "other"  # Raises ValidationError (frozen)
        Traceback (most recent call last):
        ...
        pydantic_core._pydantic_core.ValidationError: ...
    """

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        populate_by_name=True,
        use_enum_values=False,
        validate_default=True,
    )
