from datetime import date, datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


class RegistryModel(BaseModel):
    """Base for registry value objects; instances are immutable."""

    model_config = ConfigDict(frozen=True)


class CompanyStatus(str, Enum):
    ACTIVE = "active"
    DISSOLVED = "dissolved"
    LIQUIDATION = "liquidation"
    ADMINISTRATION = "administration"
    OTHER = "other"

    @classmethod
    def from_raw(cls, value: Optional[str]) -> "CompanyStatus":
        try:
            return cls((value or "").strip().lower())
        except ValueError:
            return cls.OTHER


class Tenure(str, Enum):
    FREEHOLD = "freehold"
    LEASEHOLD = "leasehold"
    OTHER = "other"

    @classmethod
    def from_raw(cls, value: Optional[str]) -> "Tenure":
        """Map Land Registry tenure codes (F/L) or words to a Tenure."""
        cleaned = (value or "").strip().lower()
        if cleaned in ("f", "freehold"):
            return cls.FREEHOLD
        if cleaned in ("l", "leasehold"):
            return cls.LEASEHOLD
        return cls.OTHER


class Address(RegistryModel):
    """Structured postal address as returned by Companies House."""

    line1: str = ""
    line2: Optional[str] = None
    locality: str = ""
    region: Optional[str] = None
    postal_code: str = ""
    country: str = ""


class SicCode(RegistryModel):
    code: str
    description: str


class CompanyRecord(RegistryModel):
    """Companies House company profile."""

    company_number: str
    company_name: str = ""
    status: CompanyStatus = CompanyStatus.OTHER
    # Registry status string exactly as received
    status_raw: str = ""
    company_type: str = ""
    date_of_creation: Optional[date] = None
    date_of_cessation: Optional[date] = None
    registered_office_address: Address = Address()
    sic_codes: tuple[SicCode, ...] = ()
    accounts_next_due: Optional[date] = None
    accounts_last_made_up: Optional[date] = None
    confirmation_statement_next_due: Optional[date] = None
    confirmation_statement_last_made_up: Optional[date] = None


class CompanySummary(RegistryModel):
    """Company search hit."""

    company_number: str
    title: str = ""
    company_status: str = ""
    company_type: str = ""
    date_of_creation: Optional[date] = None
    address_snippet: str = ""
    postal_code: str = ""
    description: str = ""


class Officer(RegistryModel):
    """Company officer. The registry never exposes the day of birth."""

    name: str = ""
    officer_role: str = ""
    birth_year: Optional[int] = None
    birth_month: Optional[int] = None
    nationality: str = ""
    country_of_residence: str = ""
    occupation: str = ""
    appointed_on: Optional[date] = None
    resigned_on: Optional[date] = None
    address: Address = Address()


class FilingEntry(RegistryModel):
    transaction_id: str = ""
    type: str = ""
    description: str = ""
    filing_date: Optional[date] = None
    category: str = ""
    subcategory: Optional[str] = None


class ComplianceVerdict(RegistryModel):
    """Result of a company compliance check. Not persisted."""

    is_active: bool
    is_in_good_standing: bool
    status_label: str
    issues: tuple[str, ...] = ()

    @model_validator(mode="after")
    def check_good_standing(self) -> "ComplianceVerdict":
        expected = self.is_active and not self.issues
        if self.is_in_good_standing != expected:
            raise ValueError(
                "is_in_good_standing must be true only for an active company with no issues"
            )
        return self


class PriceObservation(RegistryModel):
    """Price Paid record for a single sale, in whole pounds."""

    postcode: str = ""
    address: str = ""
    sale_date: Optional[date] = None
    price: int = Field(gt=0)
    property_type: str = ""
    new_build: bool = False
    tenure: Tenure = Tenure.OTHER
    paon: str = ""
    saon: str = ""
    street: str = ""
    locality: str = ""
    town: str = ""
    district: str = ""
    county: str = ""


class Proprietor(RegistryModel):
    name: str = ""
    address: str = ""


class Charge(RegistryModel):
    type: str = ""
    date: str = ""
    details: str = ""


class Restriction(RegistryModel):
    type: str = ""
    details: str = ""


class TitleRecord(RegistryModel):
    """Land Registry register entry for a title."""

    title_number: str = ""
    address: str = ""
    tenure: Tenure = Tenure.OTHER
    proprietors: tuple[Proprietor, ...] = ()
    charges: tuple[Charge, ...] = ()
    restrictions: tuple[Restriction, ...] = ()
    price_history: tuple[PriceObservation, ...] = ()


class PriceRange(RegistryModel):
    min: int = 0
    max: int = 0


class PriceStatistics(RegistryModel):
    """Descriptive statistics for sale prices in an area.

    A zero sample size means every figure is 0.
    """

    average_price: int = 0
    median_price: int = 0
    price_range: PriceRange = PriceRange()
    sample_size: int = Field(default=0, ge=0)
    computed_at: datetime


class PersonAssociation(RegistryModel):
    is_associated: bool
    roles: tuple[str, ...] = ()
    confidence: int = 0


class OwnershipCheck(RegistryModel):
    is_valid: bool
    confidence: int = 0
    details: str = ""


class CompanyRiskAssessment(RegistryModel):
    """Legitimacy screen for a company. ``company_age`` is in whole years."""

    is_active: bool
    is_legitimate: bool
    risk_score: int = Field(default=0, ge=0, le=100)
    risk_factors: tuple[str, ...] = ()
    company_age: Optional[int] = None
    last_filing_date: Optional[date] = None
