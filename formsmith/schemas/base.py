"""Base schema type for formsmith models."""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class BaseFormSchema(BaseModel):
    """Shared pydantic configuration.

    Attributes are snake_case in Python and camelCase on the wire
    (``defaultValue``, ``parentFieldIds``); either spelling is accepted on
    input.  Unknown keys are ignored so stored documents with extra
    properties still load.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
        frozen=True,
    )

    def to_dict(self) -> dict:
        """JSON-ready dict with camelCase keys and unset optionals omitted."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)
