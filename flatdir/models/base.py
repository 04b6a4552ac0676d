"""Module for model base classes."""

from dataclasses import dataclass

from mashumaro.config import BaseConfig
from mashumaro.mixins.json import DataClassJSONMixin


@dataclass
class BaseModel(DataClassJSONMixin):
    """Base class for serialized models.

    Fields are written under their camelCase aliases and unset optional
    fields are left out.
    """

    class Config(BaseConfig):
        serialize_by_alias = True
        omit_none = True
