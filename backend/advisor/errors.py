"""Error codes and structured errors for API responses."""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional


class ErrorCode(Enum):
    """Error codes returned alongside API responses."""
    SUCCESS = "SUCCESS"
    ERR_MISSING_FIELD = "ERR_MISSING_FIELD"
    ERR_INVALID_DATE = "ERR_INVALID_DATE"
    ERR_INVALID_PAYLOAD = "ERR_INVALID_PAYLOAD"


@dataclass
class ValidationError:
    """Structured validation error with code and details."""
    code: ErrorCode
    message: str
    field: Optional[str] = None

    def to_dict(self) -> Dict:
        result = {
            'error_code': self.code.value,
            'message': self.message
        }
        if self.field:
            result['field'] = self.field
        return result


def error_code_for(errors: Dict) -> ErrorCode:
    """Pick the most specific error code for a set of serializer errors."""
    if 'deadline' in errors:
        return ErrorCode.ERR_INVALID_DATE
    for messages in errors.values():
        for message in messages if isinstance(messages, list) else [messages]:
            if getattr(message, 'code', None) in ('required', 'null'):
                return ErrorCode.ERR_MISSING_FIELD
    return ErrorCode.ERR_INVALID_PAYLOAD


def validation_errors(errors: Dict) -> list:
    """Flatten serializer errors into ValidationError entries."""
    code = error_code_for(errors)
    result = []
    for field_name, messages in errors.items():
        for message in messages if isinstance(messages, list) else [messages]:
            result.append(ValidationError(code=code, message=str(message), field=field_name))
    return result
