# app/schemas/upload.py
from pydantic import model_validator
from sqlmodel import SQLModel


class ImageUpload(SQLModel):
    """
    An image received from a client, not yet validated.

    `size` is the declared size; it defaults to the length of `data`
    when the transport does not report one.
    """

    filename: str
    content_type: str
    data: bytes
    size: int | None = None

    @model_validator(mode="after")
    def default_size(self) -> "ImageUpload":
        if self.size is None:
            self.size = len(self.data)
        return self
