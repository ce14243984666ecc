from stockroom.extensions import db


class Category(db.Model):
    __tablename__ = "categories"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(100), unique=True, nullable=False)
    description = db.Column(db.Text, nullable=True)

    # Adds a 'category' attribute to Product instances
    products = db.relationship("Product", backref="category", lazy="dynamic")

    def __repr__(self):
        return f"<Category {self.id}: {self.name}>"

    def to_dict(self):
        return {"id": self.id, "name": self.name, "description": self.description}
