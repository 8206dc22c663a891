# spotlight/schemas/common.py
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

# Placement names are short lowercase slugs, e.g. "events_banner", "home_mid".
PLACEMENT_PATTERN = r"^[a-z0-9_]{1,50}$"

DEFAULT_PLACEMENT = "events_banner"


class CamelModel(BaseModel):
    """Request body accepting camelCase keys from the web client (snake_case also works)."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)
