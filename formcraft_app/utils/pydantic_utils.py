from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """
    Base Pydantic model for the JSON documents shared with the frontend and the LLM.

    Attributes are snake_case in Python and camelCase on the wire:

        class Example(CamelModel):
            published_at: Optional[datetime] = None

        Example.model_validate({"publishedAt": "2024-01-01T00:00:00Z"})
        Example(published_at=None).to_json_dict()  # {}

    Unknown keys are ignored so model output with extra properties still validates.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    def to_json_dict(self) -> dict:
        """Dump with camelCase keys, dropping unset optionals."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)
