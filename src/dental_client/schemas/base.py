"""Base model for records exchanged with the REST API in camelCase."""
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class ApiModel(BaseModel):
    """Python attributes are snake_case; JSON keys are camelCase."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )

    def to_json_dict(self, **kwargs: object) -> dict:
        """Dump using the camelCase keys the API expects."""
        return self.model_dump(mode="json", by_alias=True, **kwargs)
