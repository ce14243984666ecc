from stockroom.extensions import db
from datetime import date

ORDER_PENDING = "pending"
ORDER_PROCESSING = "processing"
ORDER_DELIVERED = "delivered"
ORDER_STATUSES = (ORDER_PENDING, ORDER_PROCESSING, ORDER_DELIVERED)

# Allowed moves; delivered is terminal
ORDER_TRANSITIONS = {
    ORDER_PENDING: (ORDER_PROCESSING, ORDER_DELIVERED),
    ORDER_PROCESSING: (ORDER_DELIVERED,),
    ORDER_DELIVERED: (),
}


class Order(db.Model):
    __tablename__ = "orders"

    id = db.Column(db.Integer, primary_key=True)
    order_date = db.Column(db.Date, nullable=False, default=date.today)
    delivered_date = db.Column(db.Date, nullable=True)
    status = db.Column(db.String(20), nullable=False, default=ORDER_PENDING)
    total_amount = db.Column(db.Float, nullable=False, default=0.0)
    supplier_id = db.Column(db.Integer, db.ForeignKey("suppliers.id"), nullable=False)
    # Nulled when the placing user is deleted
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True)

    details = db.relationship("OrderDetail", back_populates="order", lazy=True, cascade="all, delete-orphan")
    supplier = db.relationship("Supplier", lazy=True)
    placer = db.relationship("User", backref="orders_placed", lazy=True)

    def __repr__(self):
        return f"Order({self.id}, '{self.status}', {self.total_amount})"

    def can_move_to(self, status):
        return status in ORDER_TRANSITIONS.get(self.status, ())

    def recompute_total(self):
        self.total_amount = sum(line.line_total for line in self.details)
        return self.total_amount

    def to_dict(self, include_details=False):
        data = {
            "id": self.id,
            "order_date": self.order_date.isoformat() if self.order_date else None,
            "delivered_date": self.delivered_date.isoformat() if self.delivered_date else None,
            "status": self.status,
            "total_amount": self.total_amount,
            "supplier_id": self.supplier_id,
            "supplier_name": self.supplier.name if self.supplier else None,
            "user_id": self.user_id,
        }
        if include_details:
            data["details"] = [line.to_dict() for line in self.details]
        return data


class OrderDetail(db.Model):
    __tablename__ = "order_detail"

    id = db.Column(db.Integer, primary_key=True)
    order_id = db.Column(db.Integer, db.ForeignKey("orders.id"), nullable=False)
    product_id = db.Column(db.Integer, db.ForeignKey("products.id"), nullable=False)
    supplier_id = db.Column(db.Integer, db.ForeignKey("suppliers.id"), nullable=True)
    requested_quantity = db.Column(db.Integer, nullable=False)
    unit_price = db.Column(db.Float, nullable=False)
    order_unit = db.Column(db.String(30), nullable=True)
    received_quantity = db.Column(db.Integer, nullable=True)
    received_date = db.Column(db.Date, nullable=True)

    order = db.relationship("Order", back_populates="details")
    product = db.relationship("Product", back_populates="order_lines")
    supplier = db.relationship("Supplier", lazy=True)

    def __repr__(self):
        return f"OrderDetail(Order ID: {self.order_id}, Product ID: {self.product_id}, Qty: {self.requested_quantity})"

    @property
    def line_total(self):
        return (self.requested_quantity or 0) * (self.unit_price or 0)

    def to_dict(self):
        return {
            "id": self.id,
            "order_id": self.order_id,
            "product_id": self.product_id,
            "product_name": self.product.name if self.product else "Unknown",
            "supplier_id": self.supplier_id,
            "supplier_name": self.supplier.name if self.supplier else "Unknown",
            "requested_quantity": self.requested_quantity,
            "unit_price": self.unit_price,
            "order_unit": self.order_unit,
            "line_total": self.line_total,
            "received_quantity": self.received_quantity,
            "received_date": self.received_date.isoformat() if self.received_date else None,
        }
