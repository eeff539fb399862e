from sqlalchemy import Column, DateTime, Integer, Numeric, String
from sqlalchemy.sql import func

from posapp.database import Base


class Sale(Base):
    """Receipt header; only read here, by the dashboard."""

    __tablename__ = "Sales"

    id = Column("SaleId", Integer, primary_key=True, autoincrement=True)
    receipt_number = Column("ReceiptNumber", String(50), unique=True, nullable=False)
    sub_total = Column("SubTotal", Numeric(14, 2), nullable=False, default=0)
    tax = Column("Tax", Numeric(14, 2), nullable=False, default=0)
    discount = Column("Discount", Numeric(14, 2), nullable=False, default=0)
    grand_total = Column("GrandTotal", Numeric(14, 2), nullable=False)
    status = Column("Status", String(20), nullable=False, default="Completed")
    created_at = Column("CreatedAt", DateTime, server_default=func.now(), nullable=False)
