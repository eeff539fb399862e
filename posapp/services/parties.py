import logging
from typing import List, Optional

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from posapp.schemas.common import OptionItem
from posapp.schemas.parties import PartyForm, PartyOptions, PartyResponse
from posapp.storage.base import StorageAdapter

logger = logging.getLogger(__name__)

BILLING = "Billing"
SHIPPING = "Shipping"

# Child rows are at most one per kind in practice; MIN keeps one row per party.
PARTY_SELECT = """
    SELECT p.[PartyId] AS id,
           p.[PartyName] AS party_name,
           p.[MobileNumber] AS mobile_number,
           p.[Email] AS email,
           p.[OpeningBalance] AS opening_balance,
           p.[GSTIN] AS gstin,
           p.[PANNumber] AS pan_number,
           p.[PartyTypeId] AS party_type_id,
           pt.[PartyTypeName] AS party_type_name,
           p.[PartyCategoryId] AS party_category_id,
           pc.[PartyCategoryName] AS party_category_name,
           (SELECT MIN(a.[Address]) FROM [PartyAddresses] a
             WHERE a.[PartyId] = p.[PartyId] AND a.[AddressType] = 'Billing') AS billing_address,
           (SELECT MIN(a.[Address]) FROM [PartyAddresses] a
             WHERE a.[PartyId] = p.[PartyId] AND a.[AddressType] = 'Shipping') AS shipping_address,
           (SELECT MIN(a.[CreditPeriod]) FROM [PartyAddresses] a
             WHERE a.[PartyId] = p.[PartyId] AND a.[AddressType] = 'Billing') AS credit_period_days,
           (SELECT MIN(a.[CreditLimit]) FROM [PartyAddresses] a
             WHERE a.[PartyId] = p.[PartyId] AND a.[AddressType] = 'Billing') AS credit_limit,
           (SELECT MIN(c.[ContactPersonName]) FROM [PartyContacts] c
             WHERE c.[PartyId] = p.[PartyId]) AS contact_person_name,
           (SELECT MIN(c.[DateOfBirth]) FROM [PartyContacts] c
             WHERE c.[PartyId] = p.[PartyId]) AS date_of_birth,
           b.[AccountNumber] AS bank_account_number,
           b.[IFSC] AS ifsc_code,
           b.[BranchName] AS branch_name,
           b.[AccountHolderName] AS account_holder_name,
           b.[UPI] AS upi_id
    FROM [Parties] p
    LEFT JOIN [PartyTypes] pt ON pt.[PartyTypeId] = p.[PartyTypeId]
    LEFT JOIN [PartyCategories] pc ON pc.[PartyCategoryId] = p.[PartyCategoryId]
    LEFT JOIN [PartyBankDetails] b ON b.[PartyBankDetailId] = (
        SELECT MIN(b2.[PartyBankDetailId]) FROM [PartyBankDetails] b2 WHERE b2.[PartyId] = p.[PartyId]
    )
"""


def _clean(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    return value or None


class PartyService:
    def __init__(self, storage: StorageAdapter):
        self.storage = storage

    def options(self) -> PartyOptions:
        with self.storage.connect() as conn:
            party_types = conn.execute(text(
                "SELECT [PartyTypeId] AS id, [PartyTypeName] AS name FROM [PartyTypes] ORDER BY [PartyTypeName]"
            )).mappings().all()
            party_categories = conn.execute(text(
                "SELECT [PartyCategoryId] AS id, [PartyCategoryName] AS name FROM [PartyCategories] "
                "ORDER BY [PartyCategoryName]"
            )).mappings().all()
        return PartyOptions(
            party_types=[OptionItem(**row) for row in party_types],
            party_categories=[OptionItem(**row) for row in party_categories],
        )

    def list(self) -> List[PartyResponse]:
        query = text(PARTY_SELECT + " ORDER BY p.[PartyId] DESC")
        with self.storage.connect() as conn:
            rows = conn.execute(query).mappings().all()
        return [PartyResponse(**row) for row in rows]

    def get_by_id(self, party_id: int) -> Optional[PartyResponse]:
        query = text(PARTY_SELECT + " WHERE p.[PartyId] = :id")
        with self.storage.connect() as conn:
            row = conn.execute(query, {"id": party_id}).mappings().first()
        return PartyResponse(**row) if row else None

    def create(self, form: PartyForm, actor_id: int) -> int:
        """
        Insert the party and whichever address, contact and bank rows were
        filled in. Everything commits together or not at all.
        """
        sql = self.storage.sql
        insert_party = text(sql.insert_returning(
            "[Parties]",
            ["[PartyName]", "[MobileNumber]", "[Email]", "[OpeningBalance]", "[GSTIN]", "[PANNumber]",
             "[PartyTypeId]", "[PartyCategoryId]", "[CreatedBy]", "[CreatedOn]"],
            [":party_name", ":mobile_number", ":email", ":opening_balance", ":gstin", ":pan_number",
             ":party_type_id", ":party_category_id", ":actor_id", sql.now_sql],
            "[PartyId]",
        ))
        insert_address = text("""
            INSERT INTO [PartyAddresses] ([PartyId], [AddressType], [Address], [CreditPeriod], [CreditLimit])
            VALUES (:party_id, :address_type, :address, :credit_period, :credit_limit)
        """)
        insert_contact = text("""
            INSERT INTO [PartyContacts] ([PartyId], [ContactPersonName], [DateOfBirth])
            VALUES (:party_id, :contact_person_name, :date_of_birth)
        """)
        insert_bank = text("""
            INSERT INTO [PartyBankDetails] ([PartyId], [AccountNumber], [IFSC], [BranchName], [AccountHolderName], [UPI])
            VALUES (:party_id, :account_number, :ifsc, :branch_name, :account_holder_name, :upi)
        """)

        billing_address = _clean(form.billing_address)
        shipping_address = _clean(form.effective_shipping_address)
        contact_person_name = _clean(form.contact_person_name)
        bank = {
            "account_number": _clean(form.bank_account_number),
            "ifsc": _clean(form.ifsc_code),
            "branch_name": _clean(form.branch_name),
            "account_holder_name": _clean(form.account_holder_name),
            "upi": _clean(form.upi_id),
        }

        try:
            with self.storage.transaction() as conn:
                party_id = conn.execute(insert_party, {
                    "party_name": form.party_name.strip(),
                    "mobile_number": _clean(form.mobile_number),
                    "email": _clean(str(form.email)) if form.email else None,
                    "opening_balance": form.opening_balance,
                    "gstin": _clean(form.gstin),
                    "pan_number": _clean(form.pan_number),
                    "party_type_id": form.party_type_id,
                    "party_category_id": form.party_category_id,
                    "actor_id": actor_id,
                }).scalar_one()

                if billing_address or form.credit_period_days is not None or form.credit_limit is not None:
                    conn.execute(insert_address, {
                        "party_id": party_id,
                        "address_type": BILLING,
                        "address": billing_address,
                        "credit_period": form.credit_period_days,
                        "credit_limit": form.credit_limit,
                    })

                if shipping_address:
                    conn.execute(insert_address, {
                        "party_id": party_id,
                        "address_type": SHIPPING,
                        "address": shipping_address,
                        "credit_period": None,
                        "credit_limit": None,
                    })

                if contact_person_name or form.date_of_birth:
                    conn.execute(insert_contact, {
                        "party_id": party_id,
                        "contact_person_name": contact_person_name,
                        "date_of_birth": form.date_of_birth.isoformat() if form.date_of_birth else None,
                    })

                if any(bank.values()):
                    conn.execute(insert_bank, {"party_id": party_id, **bank})
        except SQLAlchemyError as e:
            logger.error(f"Error creating party: {str(e)}", exc_info=True)
            raise

        logger.info(f"Party {party_id} created by user {actor_id}")
        return party_id
