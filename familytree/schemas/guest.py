from pydantic import BaseModel, Field


class GuestSessionOut(BaseModel):
    guest_session_id: str


class ClaimIn(BaseModel):
    guest_session_id: str = Field(min_length=1)


class ClaimOut(BaseModel):
    message: str = "Tree claimed successfully."
    tree_ids: list[str]
    tree_names: list[str]
