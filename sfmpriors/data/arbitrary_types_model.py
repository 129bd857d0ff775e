from pydantic import BaseModel, ConfigDict


class FrozenArrayModel(BaseModel):
    """Immutable model that may hold numpy arrays."""
    model_config = ConfigDict(arbitrary_types_allowed=True, frozen=True)
