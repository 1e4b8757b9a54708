from pydantic import BaseModel, ConfigDict
from typing import Optional


class SessionContext(BaseModel):
    """Who is calling, passed explicitly into every engine call."""
    model_config = ConfigDict(frozen=True)

    player_id: Optional[str] = None
    tournament_id: Optional[str] = None
    is_admin: bool = False
