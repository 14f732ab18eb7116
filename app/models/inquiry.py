from pydantic import BaseModel, EmailStr, Field, field_validator
from typing import ClassVar, Literal, Optional

from app.models.common import StoredRecord, normalize_email, trim

InquiryStatus = Literal["new", "in_progress", "responded", "closed"]


class InquirySubmission(BaseModel):
    """Fields a visitor submits through the contact form."""

    firstName: str = Field(..., min_length=1, max_length=50)
    lastName: str = Field(..., min_length=1, max_length=50)
    email: EmailStr
    phone: str = Field(..., min_length=1, max_length=20)
    country: str = Field(..., min_length=1, max_length=50)
    program: Optional[str] = Field(None, max_length=100)
    message: str = Field(..., min_length=10, max_length=1000)

    @field_validator("firstName", "lastName", "phone", "country", "program", "message", mode="before")
    @classmethod
    def _trim(cls, value):
        return trim(value)

    @field_validator("email", mode="before")
    @classmethod
    def _normalize_email(cls, value):
        return normalize_email(value)


class Inquiry(InquirySubmission, StoredRecord):
    """
    A stored contact inquiry.
    Collection name: "contact_forms"

    status and adminNotes are only ever changed by an operator.
    """

    collection_name: ClassVar[str] = "contact_forms"

    status: InquiryStatus = "new"
    adminNotes: Optional[str] = Field(None, max_length=500)

    @field_validator("adminNotes", mode="before")
    @classmethod
    def _trim_notes(cls, value):
        return trim(value)

    @property
    def fullName(self) -> str:
        return f"{self.firstName} {self.lastName}"
