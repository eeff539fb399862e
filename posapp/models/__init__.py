# Import all models so they are registered on Base.metadata
from posapp.models.lookups import BusinessType, IndustryType, RegistrationType, State, Category
from posapp.models.users import Role, User, UserAuth, UserRole
from posapp.models.products import ProductType, Unit, GstRate, Product, ProductPricing, ProductStock
from posapp.models.parties import PartyType, PartyCategory, Party, PartyAddress, PartyContact, PartyBankDetail
from posapp.models.business import Business, BusinessAddress, BusinessBusinessType
from posapp.models.sales import Sale

__all__ = [
    "BusinessType",
    "IndustryType",
    "RegistrationType",
    "State",
    "Category",
    "Role",
    "User",
    "UserAuth",
    "UserRole",
    "ProductType",
    "Unit",
    "GstRate",
    "Product",
    "ProductPricing",
    "ProductStock",
    "PartyType",
    "PartyCategory",
    "Party",
    "PartyAddress",
    "PartyContact",
    "PartyBankDetail",
    "Business",
    "BusinessAddress",
    "BusinessBusinessType",
    "Sale",
]
