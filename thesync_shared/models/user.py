from uuid import UUID

from pydantic import BaseModel, ConfigDict

from thesync_shared.constants import Role


class CurrentUser(BaseModel):
    """Principal context from a verified access token; used by all services."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    id: UUID
    role: Role
