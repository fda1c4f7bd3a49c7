from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base schema: camelCase on the wire, snake_case in Python (both accepted on input)."""

    model_config = ConfigDict(populate_by_name=True, alias_generator=to_camel)
