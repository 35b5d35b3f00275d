from datetime import datetime
from typing import Annotated, Any, Dict, List, Mapping, Optional, Union

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, StrictFloat, StrictInt, StrictStr, ValidationError

from core.errors import BookingValidationError

EMPTY_BODY_MESSAGE = "Empty request body. Please send JSON with Content-Type: application/json"
INVALID_FIELDS_MESSAGE = (
    "Missing or invalid fields. Required: packagePrice(Number), numPersons(Number), "
    "carType(String), total(Number)"
)

# BSON stores integers as signed 64 bit
MAX_INT64 = 2**63 - 1

# Strict so that "5000" or true are rejected instead of coerced
NonNegativeNumber = Union[
    Annotated[StrictInt, Field(ge=0, le=MAX_INT64)],
    Annotated[StrictFloat, Field(ge=0, allow_inf_nan=False)],
]


def _integral_float_to_int(value: Any) -> Any:
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return value


PersonCount = Annotated[StrictInt, Field(gt=0, le=MAX_INT64), BeforeValidator(_integral_float_to_int)]


class BookingBase(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    package_price: Union[int, float] = Field(alias="packagePrice")
    num_persons: int = Field(alias="numPersons")
    car_type: str = Field(alias="carType")
    total: Union[int, float]


class BookingCreate(BookingBase):
    package_price: NonNegativeNumber = Field(alias="packagePrice")
    num_persons: PersonCount = Field(alias="numPersons")
    car_type: Annotated[StrictStr, Field(min_length=1)] = Field(alias="carType")
    total: NonNegativeNumber
    date: Optional[StrictStr] = None


class Booking(BookingBase):
    id: str
    date: str
    created_at: datetime = Field(alias="createdAt")

    @classmethod
    def from_document(cls, document: Mapping[str, Any]) -> "Booking":
        data = dict(document)
        data["id"] = str(data.pop("_id"))
        return cls.model_validate(data)


def _describe(exc: ValidationError) -> List[Dict[str, str]]:
    # Union members report one error each, keep the first per field
    problems: Dict[str, str] = {}
    for error in exc.errors():
        field = str(error["loc"][0]) if error["loc"] else "body"
        problems.setdefault(field, error["msg"])
    return [{"field": field, "message": message} for field, message in problems.items()]


def validate_booking(fields: Any) -> BookingCreate:
    """
    Build a BookingCreate from a decoded JSON body.

    Raises BookingValidationError when the body is empty, is not an object,
    or any required field is missing or has the wrong type.
    """
    if fields is None or (isinstance(fields, (dict, list, str, bytes)) and not fields):
        raise BookingValidationError(EMPTY_BODY_MESSAGE)
    if not isinstance(fields, dict):
        raise BookingValidationError("Request body must be a JSON object")

    try:
        return BookingCreate.model_validate(fields)
    except ValidationError as exc:
        raise BookingValidationError(INVALID_FIELDS_MESSAGE, errors=_describe(exc)) from exc
