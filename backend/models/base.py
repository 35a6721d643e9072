"""
Base model shared by request and response models
"""

from pydantic import BaseModel as PydanticBaseModel
from pydantic import ConfigDict


class BaseModel(PydanticBaseModel):
    """Application-wide pydantic base model"""

    model_config = ConfigDict(from_attributes=True, populate_by_name=True)
