from pydantic import BaseModel


class IdentityClaims(BaseModel):
    """The subset of a verified identity token the API relies on."""

    uid: str
    email: str | None = None
    name: str
