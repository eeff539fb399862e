from datetime import date
from typing import Dict, List, Optional

from pydantic import BaseModel, EmailStr, Field, field_validator

from posapp.schemas.common import FormModel, OptionItem

GSTIN_LENGTH = 15
MAX_CREDIT_PERIOD_DAYS = 3650


class PartyForm(FormModel):
    party_name: str = Field(..., min_length=1, max_length=200, description="Party name (required)")
    mobile_number: Optional[str] = Field(None, max_length=20, description="Digits only")
    email: Optional[EmailStr] = Field(None, description="E-mail (optional)")
    opening_balance: Optional[float] = Field(None, description="Opening balance")
    gstin: Optional[str] = Field(None, max_length=GSTIN_LENGTH, description="GSTIN, exactly 15 characters")
    pan_number: Optional[str] = Field(None, max_length=20, description="PAN")
    party_type_id: int = Field(1, gt=0, description="Customer / Vendor / Both")
    party_category_id: int = Field(1, gt=0, description="Retail / Wholesale / Distributor / Other")

    billing_address: Optional[str] = Field(None, max_length=500)
    shipping_address: Optional[str] = Field(None, max_length=500)
    same_as_billing: bool = Field(False, description="Copy the billing address to shipping")
    credit_period_days: Optional[int] = Field(None, description="Credit period in days")
    credit_limit: Optional[float] = Field(None, ge=0)

    contact_person_name: Optional[str] = Field(None, max_length=150)
    date_of_birth: Optional[date] = None

    bank_account_number: Optional[str] = Field(None, max_length=50)
    re_enter_account_number: Optional[str] = Field(None, max_length=50)
    ifsc_code: Optional[str] = Field(None, max_length=20)
    branch_name: Optional[str] = Field(None, max_length=150)
    account_holder_name: Optional[str] = Field(None, max_length=150)
    upi_id: Optional[str] = Field(None, max_length=100)

    submit_action: Optional[str] = Field(None, description="'save-new' returns to an empty form")

    @field_validator("party_name")
    @classmethod
    def validate_not_empty(cls, v: str, info) -> str:
        if not v or not v.strip():
            raise ValueError(f"{info.field_name} cannot be empty or whitespace only")
        return v.strip()

    @field_validator("mobile_number")
    @classmethod
    def validate_mobile(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not v.strip().isdigit():
            raise ValueError("Mobile number must contain digits only.")
        return v.strip() if v else v

    @field_validator("credit_period_days")
    @classmethod
    def validate_credit_period(cls, v: Optional[int]) -> Optional[int]:
        if v is not None and not 0 <= v <= MAX_CREDIT_PERIOD_DAYS:
            raise ValueError(f"Credit period must be between 0 and {MAX_CREDIT_PERIOD_DAYS} days.")
        return v

    def cross_field_errors(self) -> Dict[str, List[str]]:
        """Rules spanning several inputs, reported against the field to fix."""
        errors: Dict[str, List[str]] = {}
        if self.gstin and len(self.gstin.strip()) != GSTIN_LENGTH:
            errors.setdefault("gstin", []).append("GSTIN must be exactly 15 characters.")

        account = self.bank_account_number.strip() if self.bank_account_number else None
        reenter = self.re_enter_account_number.strip() if self.re_enter_account_number else None
        if account:
            if not reenter:
                errors.setdefault("re_enter_account_number", []).append("Please re-enter the account number.")
            elif account != reenter:
                errors.setdefault("re_enter_account_number", []).append("Account numbers do not match.")
        elif reenter:
            errors.setdefault("bank_account_number", []).append("Enter the account number first.")
        return errors

    @property
    def effective_shipping_address(self) -> Optional[str]:
        if self.same_as_billing:
            return self.billing_address
        return self.shipping_address


class PartyOptions(BaseModel):
    party_types: List[OptionItem]
    party_categories: List[OptionItem]


class PartyResponse(BaseModel):
    id: int
    party_name: str
    mobile_number: Optional[str] = None
    email: Optional[str] = None
    opening_balance: Optional[float] = None
    gstin: Optional[str] = None
    pan_number: Optional[str] = None
    party_type_id: int
    party_type_name: Optional[str] = None
    party_category_id: int
    party_category_name: Optional[str] = None
    billing_address: Optional[str] = None
    shipping_address: Optional[str] = None
    credit_period_days: Optional[int] = None
    credit_limit: Optional[float] = None
    contact_person_name: Optional[str] = None
    date_of_birth: Optional[date] = None
    bank_account_number: Optional[str] = None
    ifsc_code: Optional[str] = None
    branch_name: Optional[str] = None
    account_holder_name: Optional[str] = None
    upi_id: Optional[str] = None

    class Config:
        from_attributes = True
