from pydantic import BaseModel, ConfigDict, Field, ValidationError

MAX_SUGGESTIONS = 10


class SettingsSchema(BaseModel):
    model_config = ConfigDict(coerce_numbers_to_str=True)

    suggestion_limit: int = Field(MAX_SUGGESTIONS, ge=1, le=MAX_SUGGESTIONS)
    rest_day_label: str = "Rest"
    weight_unit: str = "kg"
    log_level: str = "INFO"


def default_settings() -> dict:
    return SettingsSchema().model_dump()


def normalize_settings(data: dict) -> dict:
    """Return ``data`` converted to the declared field types.

    Only keys present in ``data`` are returned; unknown keys are dropped.
    """
    try:
        model = SettingsSchema(**data)
    except ValidationError as e:
        raise ValueError(str(e))
    return model.model_dump(include=set(data))


def validate_settings(data: dict) -> None:
    normalize_settings(data)
