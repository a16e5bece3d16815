from pydantic import BaseModel
from pydantic.alias_generators import to_camel

EMAIL_PATTERN = r"^[^\s@]+@[^\s@]+\.[^\s@]+$"
PHONE_PATTERN = r"^\+?\d{10,14}$"

class CamelModel(BaseModel):
    """Request body accepting camelCase keys (snake_case also works)"""

    class Config:
        alias_generator = to_camel
        populate_by_name = True
