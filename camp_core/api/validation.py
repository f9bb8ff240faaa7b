"""Request validation decorator for Flask views.

@validate_request parses the request into the view's Pydantic model
parameter and passes it in as a keyword argument:

    @auth_bp.post("/login")
    @validate_request
    def login(data: LoginRequest):
        ...

Bodies are read from JSON (or form data for HTML forms); GET requests
are read from the query string. Path parameters and parameters that are
not Pydantic models are passed through unchanged.
"""

import inspect
import typing
from functools import wraps

from flask import request
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from ..exceptions import ValidationError


def _model_parameter(f) -> tuple[str, type[BaseModel]]:
    """Find the name and model class of the view's Pydantic parameter.

    Raises:
        TypeError: If the view has no parameters, an unannotated parameter,
            or no parameter annotated with a BaseModel subclass
    """
    params = list(inspect.signature(f).parameters.values())
    if not params:
        raise TypeError(f"{f.__name__} has no parameters to validate")

    hints = typing.get_type_hints(f)
    for param in params:
        if param.name not in hints:
            raise TypeError(
                f"Parameter '{param.name}' of {f.__name__} lacks a type annotation"
            )

    for param in params:
        annotation = hints[param.name]
        if inspect.isclass(annotation) and issubclass(annotation, BaseModel):
            return param.name, annotation

    raise TypeError(f"{f.__name__} has no Pydantic model parameter to validate")


def _request_payload() -> dict:
    if request.method == "GET":
        return request.args.to_dict()
    if request.is_json:
        return request.get_json(silent=True) or {}
    if request.form:
        return request.form.to_dict()
    return request.get_json(silent=True) or {}


def _format_errors(e: PydanticValidationError) -> list[dict]:
    return [
        {
            "field": ".".join(str(part) for part in err["loc"]),
            "message": err["msg"],
            "expected_type": err["type"],
        }
        for err in e.errors()
    ]


def validate_request(f):
    """Validate the request against the view's Pydantic model parameter.

    Raises:
        TypeError: At decoration time if the view has no model parameter
        ValidationError: At request time if the payload does not validate
    """
    name, model = _model_parameter(f)

    @wraps(f)
    def wrapper(*args, **kwargs):
        payload = _request_payload()
        if not isinstance(payload, dict):
            raise ValidationError(
                "Request body must be a JSON object",
                {"model": model.__name__}
            )

        try:
            kwargs[name] = model.model_validate(payload)
        except PydanticValidationError as e:
            # Never echo submitted passwords back to the client
            received = {
                k: ("***" if "password" in k else v) for k, v in payload.items()
            }
            raise ValidationError(
                "Invalid request data",
                {
                    "model": model.__name__,
                    "received": received,
                    "errors": _format_errors(e),
                }
            )

        return f(*args, **kwargs)

    return wrapper
