import logging
from datetime import date
from typing import List, Optional

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from posapp.exceptions import DuplicateValueError
from posapp.schemas.common import OptionItem
from posapp.schemas.products import GstRateOption, ItemForm, ItemOptions, ItemResponse, UnitOption
from posapp.storage.base import StorageAdapter

logger = logging.getLogger(__name__)

ITEM_SELECT = """
    SELECT p.[ProductId] AS id,
           p.[ProductTypeId] AS product_type_id,
           pt.[ProductTypeName] AS product_type_name,
           p.[CategoryId] AS category_id,
           c.[CategoryName] AS category_name,
           p.[ItemName] AS item_name,
           p.[ItemCode] AS item_code,
           p.[HSNCode] AS hsn_code,
           p.[Description] AS description,
           p.[IsActive] AS is_active,
           pp.[SalesPrice] AS sales_price,
           pp.[PurchasePrice] AS purchase_price,
           pp.[MRP] AS mrp,
           pp.[GstRateId] AS gst_rate_id,
           gr.[Rate] AS gst_rate,
           ps.[OpeningStock] AS opening_stock,
           ps.[CurrentStock] AS current_stock,
           ps.[UnitId] AS unit_id,
           un.[UnitName] AS unit_name,
           ps.[AsOfDate] AS as_of_date,
           p.[CreatedOn] AS created_on
    FROM [Products] p
    LEFT JOIN [ProductTypes] pt ON pt.[ProductTypeId] = p.[ProductTypeId]
    LEFT JOIN [Categories] c ON c.[CategoryId] = p.[CategoryId]
    LEFT JOIN [ProductPricing] pp ON pp.[ProductId] = p.[ProductId]
    LEFT JOIN [GstRates] gr ON gr.[GstRateId] = pp.[GstRateId]
    LEFT JOIN [ProductStock] ps ON ps.[ProductId] = p.[ProductId]
    LEFT JOIN [Units] un ON un.[UnitId] = ps.[UnitId]
"""


class ProductService:
    def __init__(self, storage: StorageAdapter):
        self.storage = storage

    def options(self) -> ItemOptions:
        """Active product types, categories, units and GST rates for the item form."""
        with self.storage.connect() as conn:
            product_types = conn.execute(text(
                "SELECT [ProductTypeId] AS id, [ProductTypeName] AS name FROM [ProductTypes] "
                "WHERE [IsActive] = 1 ORDER BY [ProductTypeName]"
            )).mappings().all()
            categories = conn.execute(text(
                "SELECT [CategoryId] AS id, [CategoryName] AS name FROM [Categories] "
                "WHERE [IsActive] = 1 ORDER BY [CategoryName]"
            )).mappings().all()
            units = conn.execute(text(
                "SELECT [UnitId] AS id, [UnitName] AS name, [UnitCode] AS code FROM [Units] "
                "WHERE [IsActive] = 1 ORDER BY [UnitName]"
            )).mappings().all()
            gst_rates = conn.execute(text(
                "SELECT [GstRateId] AS id, [Rate] AS rate, [Description] AS description FROM [GstRates] "
                "WHERE [IsActive] = 1 ORDER BY [Rate]"
            )).mappings().all()

        return ItemOptions(
            product_types=[OptionItem(**row) for row in product_types],
            categories=[OptionItem(**row) for row in categories],
            units=[UnitOption(**row) for row in units],
            gst_rates=[GstRateOption(**row) for row in gst_rates],
        )

    def list(self) -> List[ItemResponse]:
        query = text(ITEM_SELECT + " ORDER BY p.[CreatedOn] DESC, p.[ProductId] DESC")
        with self.storage.connect() as conn:
            rows = conn.execute(query).mappings().all()
        return [ItemResponse(**row) for row in rows]

    def get_by_id(self, product_id: int) -> Optional[ItemResponse]:
        query = text(ITEM_SELECT + " WHERE p.[ProductId] = :id")
        with self.storage.connect() as conn:
            row = conn.execute(query, {"id": product_id}).mappings().first()
        return ItemResponse(**row) if row else None

    def create(self, form: ItemForm, actor_id: int, today: Optional[date] = None) -> int:
        """
        Insert the product with its pricing and stock rows in one transaction.
        Pricing and stock rows are only written when one of their fields is set.
        """
        sql = self.storage.sql
        insert_product = text(sql.insert_returning(
            "[Products]",
            ["[ProductTypeId]", "[CategoryId]", "[ItemName]", "[ItemCode]", "[HSNCode]",
             "[Description]", "[IsActive]", "[CreatedBy]", "[CreatedOn]"],
            [":product_type_id", ":category_id", ":item_name", ":item_code", ":hsn_code",
             ":description", ":is_active", ":actor_id", sql.now_sql],
            "[ProductId]",
        ))
        insert_pricing = text("""
            INSERT INTO [ProductPricing] ([ProductId], [SalesPrice], [PurchasePrice], [MRP], [GstRateId])
            VALUES (:product_id, :sales_price, :purchase_price, :mrp, :gst_rate_id)
        """)
        insert_stock = text("""
            INSERT INTO [ProductStock] ([ProductId], [OpeningStock], [CurrentStock], [UnitId], [AsOfDate])
            VALUES (:product_id, :opening_stock, :current_stock, :unit_id, :as_of_date)
        """)

        item_code = form.item_code.strip() if form.item_code else None
        try:
            with self.storage.transaction() as conn:
                product_id = conn.execute(insert_product, {
                    "product_type_id": form.product_type_id,
                    "category_id": form.category_id,
                    "item_name": form.item_name.strip(),
                    "item_code": item_code,
                    "hsn_code": form.hsn_code,
                    "description": form.description,
                    "is_active": 1 if form.is_active else 0,
                    "actor_id": actor_id,
                }).scalar_one()

                if form.has_pricing:
                    conn.execute(insert_pricing, {
                        "product_id": product_id,
                        "sales_price": form.sales_price,
                        "purchase_price": form.purchase_price,
                        "mrp": form.mrp,
                        "gst_rate_id": form.gst_rate_id,
                    })

                if form.has_stock:
                    as_of_date = form.as_of_date or today or date.today()
                    conn.execute(insert_stock, {
                        "product_id": product_id,
                        "opening_stock": form.opening_stock,
                        "current_stock": form.current_stock if form.current_stock is not None else form.opening_stock,
                        "unit_id": form.unit_id,
                        "as_of_date": as_of_date.isoformat(),
                    })
        except SQLAlchemyError as e:
            if self.storage.is_unique_violation(e):
                logger.warning(f"Item code '{item_code}' already exists")
                raise DuplicateValueError("item_code", "An item with this code already exists.") from e
            logger.error(f"Error creating item: {str(e)}", exc_info=True)
            raise

        logger.info(f"Item {product_id} created by user {actor_id}")
        return product_id

    def set_active(self, product_id: int, active: bool, actor_id: int) -> bool:
        statement = text(f"""
            UPDATE [Products]
            SET [IsActive] = :active, [UpdatedBy] = :actor_id, [UpdatedOn] = {self.storage.sql.now_sql}
            WHERE [ProductId] = :id
        """)
        with self.storage.transaction() as conn:
            affected = conn.execute(
                statement, {"id": product_id, "active": 1 if active else 0, "actor_id": actor_id}
            ).rowcount
        if affected:
            logger.info(f"Item {product_id} {'activated' if active else 'deactivated'} by user {actor_id}")
        return affected > 0
