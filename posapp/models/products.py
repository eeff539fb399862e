from sqlalchemy import Boolean, Column, Date, ForeignKey, Integer, Numeric, String, Text, text

from posapp.database import Base
from posapp.models.audit import AuditColumns


class ProductType(Base):
    __tablename__ = "ProductTypes"

    id = Column("ProductTypeId", Integer, primary_key=True, autoincrement=True)
    name = Column("ProductTypeName", String(100), unique=True, nullable=False)  # Goods / Service
    is_active = Column("IsActive", Boolean, nullable=False, server_default=text("1"))


class Unit(Base):
    __tablename__ = "Units"

    id = Column("UnitId", Integer, primary_key=True, autoincrement=True)
    name = Column("UnitName", String(100), unique=True, nullable=False)
    code = Column("UnitCode", String(20), nullable=True)  # PCS, KG, LTR
    is_active = Column("IsActive", Boolean, nullable=False, server_default=text("1"))


class GstRate(Base):
    __tablename__ = "GstRates"

    id = Column("GstRateId", Integer, primary_key=True, autoincrement=True)
    rate = Column("Rate", Numeric(5, 2), unique=True, nullable=False)
    description = Column("Description", String(100), nullable=True)
    is_active = Column("IsActive", Boolean, nullable=False, server_default=text("1"))


class Product(AuditColumns, Base):
    __tablename__ = "Products"

    id = Column("ProductId", Integer, primary_key=True, autoincrement=True)
    product_type_id = Column("ProductTypeId", Integer, ForeignKey("ProductTypes.ProductTypeId"), nullable=False)
    category_id = Column("CategoryId", Integer, ForeignKey("Categories.CategoryId"), nullable=True)
    item_name = Column("ItemName", String(200), nullable=False)
    item_code = Column("ItemCode", String(100), unique=True, nullable=True)  # NULLs do not collide
    hsn_code = Column("HSNCode", String(50), nullable=True)
    description = Column("Description", Text, nullable=True)
    is_active = Column("IsActive", Boolean, nullable=False, server_default=text("1"))


class ProductPricing(Base):
    __tablename__ = "ProductPricing"

    id = Column("PricingId", Integer, primary_key=True, autoincrement=True)
    product_id = Column("ProductId", Integer, ForeignKey("Products.ProductId"), unique=True, nullable=False)
    sales_price = Column("SalesPrice", Numeric(12, 2), nullable=True)
    purchase_price = Column("PurchasePrice", Numeric(12, 2), nullable=True)
    mrp = Column("MRP", Numeric(12, 2), nullable=True)
    gst_rate_id = Column("GstRateId", Integer, ForeignKey("GstRates.GstRateId"), nullable=True)


class ProductStock(Base):
    __tablename__ = "ProductStock"

    id = Column("StockId", Integer, primary_key=True, autoincrement=True)
    product_id = Column("ProductId", Integer, ForeignKey("Products.ProductId"), unique=True, nullable=False)
    opening_stock = Column("OpeningStock", Numeric(12, 3), nullable=True)
    current_stock = Column("CurrentStock", Numeric(12, 3), nullable=True)
    unit_id = Column("UnitId", Integer, ForeignKey("Units.UnitId"), nullable=True)
    as_of_date = Column("AsOfDate", Date, nullable=True)
