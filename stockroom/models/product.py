from stockroom.extensions import db
from stockroom.stock import stock_status, needs_restock
from datetime import datetime


class Product(db.Model):
    __tablename__ = "products"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(100), nullable=False)
    current_stock = db.Column(db.Integer, nullable=False, default=0)
    min_quantity = db.Column(db.Integer, nullable=False, default=0)
    max_quantity = db.Column(db.Integer, nullable=True)
    case_quantity = db.Column(db.Integer, nullable=True)
    case_price = db.Column(db.Float, nullable=True)
    order_unit = db.Column(db.String(30), nullable=True)
    expiration = db.Column(db.Date, nullable=True)
    category_id = db.Column(db.Integer, db.ForeignKey("categories.id"), nullable=True)
    supplier_id = db.Column(db.Integer, db.ForeignKey("suppliers.id"), nullable=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True)  # Admin who created it
    is_active = db.Column(db.Boolean, nullable=False, default=True)
    date_added = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)

    supplier = db.relationship("Supplier", back_populates="products")
    order_lines = db.relationship("OrderDetail", back_populates="product", lazy=True)

    def __repr__(self):
        return f"Product('{self.name}', stock={self.current_stock})"

    @property
    def stock_status(self):
        return stock_status(self.current_stock, self.min_quantity)

    @property
    def needs_restock(self):
        return needs_restock(self.current_stock, self.min_quantity)

    def to_dict(self, latest_unit_price=None):
        return {
            "id": self.id,
            "name": self.name,
            "current_stock": self.current_stock,
            "min_quantity": self.min_quantity,
            "max_quantity": self.max_quantity,
            "case_quantity": self.case_quantity,
            "case_price": self.case_price,
            "order_unit": self.order_unit,
            "expiration": self.expiration.isoformat() if self.expiration else None,
            "category_id": self.category_id,
            "category_name": self.category.name if self.category else None,
            "supplier_id": self.supplier_id,
            "supplier_name": self.supplier.name if self.supplier else None,
            "is_active": self.is_active,
            "stock_status": self.stock_status,
            "latest_unit_price": latest_unit_price,
        }
