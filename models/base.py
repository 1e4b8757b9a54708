from pydantic import BaseModel, ConfigDict, ValidationError
from typing import Any, Dict, Optional


class BaseGolfModel(BaseModel):
    """Shared configuration for tournament models.

    Assignments are validated, so a correction that breaks a field
    constraint is rejected and the previous value is kept.
    """
    model_config = ConfigDict(validate_assignment=True)

    def update_field(self, field_name: str, value: Any) -> Optional[str]:
        """Apply one correction. Returns the validation message instead of raising."""
        try:
            setattr(self, field_name, value)
            return None
        except ValidationError as e:
            return e.errors()[0]['msg']

    def update_fields(self, changes: Dict[str, Any]) -> Dict[str, str]:
        """Apply several corrections; returns field -> message for the rejected ones."""
        errors = {}
        for field_name, value in changes.items():
            message = self.update_field(field_name, value)
            if message:
                errors[field_name] = message
        return errors
