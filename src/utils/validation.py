"""
Input validation utilities.

Field types shared by the tool parameter models, and the single entry point
that turns raw tool arguments into a typed params model.
"""
from typing import Annotated, Any, Dict, List, Mapping, Optional, Type, TypeVar

from pydantic import BaseModel, Field, ValidationError

from utils.error_handler import ToolValidationError

T = TypeVar("T", bound=BaseModel)

SYS_ID_PATTERN = r"^[a-fA-F0-9]{32}$"

TableName = Annotated[
    str,
    Field(
        min_length=1,
        pattern=r"^[a-zA-Z0-9_]+$",
        description='ServiceNow table name (e.g., "incident", "sys_user", "change_request")',
    ),
]

SysId = Annotated[
    str,
    Field(
        min_length=32,
        max_length=32,
        pattern=SYS_ID_PATTERN,
        description="32-character hexadecimal sys_id",
    ),
]

# Optional fields: declare with "= None" on the model.
FieldList = Optional[
    Annotated[
        str,
        Field(
            pattern=r"^[a-zA-Z0-9_,.]+$",
            description="Comma-separated list of fields to return. Returns all fields if not specified.",
        ),
    ]
]

QueryString = Optional[
    Annotated[str, Field(description='Encoded query string (e.g., "active=true^priority=1")')]
]

Limit = Annotated[
    int,
    Field(default=100, ge=1, le=1000, strict=True, description="Maximum number of records to return (1-1000)"),
]

Offset = Annotated[
    int,
    Field(default=0, ge=0, strict=True, description="Number of records to skip for pagination"),
]

RecordData = Dict[str, Any]


def _format_issue(error: Dict[str, Any]) -> str:
    path = ".".join(str(part) for part in error.get("loc", ())) or "(root)"
    return f"{path}: {error.get('msg', 'invalid value')}"


def validate_params(tool_name: str, model_cls: Type[T], arguments: Optional[Mapping[str, Any]]) -> T:
    """
    Parse raw tool arguments into the tool's params model.

    Args:
        tool_name: Tool being invoked, used in the error message
        model_cls: Params model declaring the tool's input contract
        arguments: Raw arguments as received from the client

    Returns:
        Validated params model instance

    Raises:
        ToolValidationError: With one issue per violated constraint.
    """
    if arguments is None:
        arguments = {}
    if not isinstance(arguments, Mapping):
        raise ToolValidationError(tool_name, ["(root): arguments must be an object"])
    try:
        return model_cls.model_validate(dict(arguments))
    except ValidationError as e:
        issues: List[str] = [_format_issue(err) for err in e.errors()]
        raise ToolValidationError(tool_name, issues) from e


def is_sys_id(value: str) -> bool:
    """Whether value looks like a 32-character hex sys_id."""
    return len(value) == 32 and all(c in "0123456789abcdefABCDEF" for c in value)
