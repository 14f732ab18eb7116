"""
Study-abroad application schemas.

The submission is grouped into personalInfo / academic / program /
documents / additional sub-objects, mirroring the frontend form. Each
sub-object lists the string fields it trims and the email field it
normalizes.
"""

from pydantic import BaseModel, EmailStr, Field, field_validator
from typing import ClassVar, Literal, Optional
from datetime import date, datetime

from app.models.common import StoredRecord, normalize_email, trim

DegreeLevel = Literal["bachelors", "masters", "phd", "mbbs", "diploma", "certificate"]
ScholarshipInterest = Literal["yes", "no", "maybe"]
DestinationCountry = Literal["china", "hungary", "italy"]
ApplicationStatus = Literal["submitted", "under_review", "accepted", "rejected", "on_hold"]


class PersonalInfo(BaseModel):
    firstName: str = Field(..., min_length=1, max_length=50)
    lastName: str = Field(..., min_length=1, max_length=50)
    email: EmailStr
    phone: str = Field(..., min_length=1, max_length=20)
    nationality: str = Field(..., min_length=1, max_length=50)
    dateOfBirth: date

    @field_validator("firstName", "lastName", "phone", "nationality", mode="before")
    @classmethod
    def _trim(cls, value):
        return trim(value)

    @field_validator("email", mode="before")
    @classmethod
    def _normalize_email(cls, value):
        return normalize_email(value)

    @field_validator("dateOfBirth", mode="before")
    @classmethod
    def _date_only(cls, value):
        # Stored documents come back from Mongo as midnight datetimes
        if isinstance(value, datetime):
            return value.date()
        value = trim(value)
        # Full ISO-8601 timestamps from date pickers: keep the calendar date
        if isinstance(value, str) and "T" in value:
            text = value[:-1] + "+00:00" if value.endswith("Z") else value
            try:
                return datetime.fromisoformat(text).date()
            except ValueError:
                return value
        return value


class AcademicInfo(BaseModel):
    currentEducation: str = Field(..., min_length=1, max_length=100)
    institution: Optional[str] = Field(None, max_length=200)
    gpa: Optional[str] = Field(None, max_length=10)
    graduationYear: Optional[str] = Field(None, max_length=4)
    fieldOfStudy: Optional[str] = Field(None, max_length=100)

    @field_validator("currentEducation", "institution", "gpa", "graduationYear", "fieldOfStudy", mode="before")
    @classmethod
    def _trim(cls, value):
        return trim(value)


class ProgramChoice(BaseModel):
    degreeLevel: DegreeLevel
    preferredProgram: str = Field(..., min_length=1, max_length=100)
    preferredUniversity: Optional[str] = Field(None, max_length=200)
    startDate: str = Field(..., min_length=1, max_length=100)
    country: Optional[DestinationCountry] = None

    @field_validator("degreeLevel", "preferredProgram", "preferredUniversity", "startDate", "country", mode="before")
    @classmethod
    def _trim(cls, value):
        return trim(value)


class DocumentChecklist(BaseModel):
    transcript: bool = False
    passport: bool = False
    languageTest: bool = False
    recommendation: bool = False


class AdditionalInfo(BaseModel):
    scholarshipInterest: Optional[ScholarshipInterest] = None
    personalStatement: Optional[str] = Field(None, max_length=2000)
    previousExperience: Optional[str] = Field(None, max_length=1000)

    @field_validator("scholarshipInterest", "personalStatement", "previousExperience", mode="before")
    @classmethod
    def _trim(cls, value):
        return trim(value)


class ApplicationSubmission(BaseModel):
    """Fields a visitor submits through the application form."""

    personalInfo: PersonalInfo
    academic: AcademicInfo
    program: ProgramChoice
    documents: DocumentChecklist = Field(default_factory=DocumentChecklist)
    additional: AdditionalInfo = Field(default_factory=AdditionalInfo)


class Application(ApplicationSubmission, StoredRecord):
    """
    A stored program application.
    Collection name: "application_forms"

    Only status and adminNotes change after submission, and only by an
    operator.
    """

    collection_name: ClassVar[str] = "application_forms"

    status: ApplicationStatus = "submitted"
    adminNotes: Optional[str] = Field(None, max_length=1000)

    @field_validator("adminNotes", mode="before")
    @classmethod
    def _trim_notes(cls, value):
        return trim(value)

    @property
    def fullName(self) -> str:
        return f"{self.personalInfo.firstName} {self.personalInfo.lastName}"

    @property
    def age(self) -> int:
        return self.age_on(date.today())

    def age_on(self, today: date) -> int:
        """Whole years between dateOfBirth and ``today``."""
        birth = self.personalInfo.dateOfBirth
        age = today.year - birth.year
        if (today.month, today.day) < (birth.month, birth.day):
            age -= 1
        return age
