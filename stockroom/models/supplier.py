from stockroom.extensions import db
from datetime import datetime


class Supplier(db.Model):
    __tablename__ = "suppliers"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(100), nullable=False)
    contact = db.Column(db.String(100), nullable=False)
    email = db.Column(db.String(120), nullable=False)
    address = db.Column(db.String(200), nullable=False)
    date_added = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)

    products = db.relationship("Product", back_populates="supplier", lazy=True)

    def __repr__(self):
        return f'Supplier(name="{self.name}", email="{self.email}")'

    @classmethod
    def find_by_name(cls, name):
        """Suppliers are unique by name, ignoring case."""
        return cls.query.filter(db.func.lower(cls.name) == name.strip().lower()).first()

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "contact": self.contact,
            "email": self.email,
            "address": self.address,
        }
