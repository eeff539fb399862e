from sqlalchemy import Column, DateTime, Integer
from sqlalchemy.sql import func


class AuditColumns:
    """CreatedBy/CreatedOn/UpdatedBy/UpdatedOn, shared by every master-data table."""

    created_by = Column("CreatedBy", Integer, nullable=True)
    created_on = Column("CreatedOn", DateTime, server_default=func.now(), nullable=False)
    updated_by = Column("UpdatedBy", Integer, nullable=True)
    updated_on = Column("UpdatedOn", DateTime, nullable=True)
