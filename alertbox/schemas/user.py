"""User and actor schemas."""
from pydantic import BaseModel, ConfigDict


class Actor(BaseModel):
    """The user on whose behalf an operation runs.

    Passed explicitly into every alert service call.
    """

    user_id: int
    is_superuser: bool = False
    email: str | None = None
    first_name: str | None = None
    last_name: str | None = None

    model_config = ConfigDict(frozen=True)

    @classmethod
    def from_user(cls, user) -> "Actor":
        return cls(
            user_id=user.id,
            is_superuser=user.is_superuser,
            email=user.email,
            first_name=user.first_name,
            last_name=user.last_name,
        )

    @property
    def common_name(self) -> str:
        names = [part for part in (self.first_name, self.last_name) if part]
        return " ".join(names) if names else (self.email or f"user {self.user_id}")
