from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from shared.constants import Role


class CurrentUser(BaseModel):
    """Caller context from the identity layer's JWT; used by all services."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    id: UUID
    username: str = ""
    roles: list[Role] = Field(default_factory=list)

    @property
    def is_admin(self) -> bool:
        return Role.ADMIN in self.roles
