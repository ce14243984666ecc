from datetime import date

from stockroom.main import create_app
from stockroom.extensions import db
from stockroom.capabilities import ROLE_ADMIN, ROLE_USER
from stockroom.models.user import User
from stockroom.models.supplier import Supplier
from stockroom.models.category import Category
from stockroom.models.product import Product
from stockroom.models.order import Order, OrderDetail, ORDER_DELIVERED, ORDER_PENDING


def seed_database():
    app = create_app()
    with app.app_context():
        db.create_all()
        print("Checking if database needs seeding...")

        if Supplier.query.first() is not None:
            print("Database already contains data. Skipping seeding.")
            return

        print("Seeding database with initial data...")

        admin = User(username="admin", email="admin@stockroom.io", role=ROLE_ADMIN)
        admin.set_password("admin123")
        clerk = User(username="clerk", email="clerk@stockroom.io", role=ROLE_USER)
        clerk.set_password("clerk123")
        db.session.add_all([admin, clerk])

        produce = Category(name="Produce", description="Fresh fruit and vegetables")
        dry_goods = Category(name="Dry Goods", description="Flour, rice, pasta")
        db.session.add_all([produce, dry_goods])

        farm = Supplier(name="Green Valley Farms", contact="Ana Ruiz", email="orders@greenvalley.io", address="12 Orchard Rd")
        mill = Supplier(name="Stone Mill Co.", contact="Tom Berg", email="sales@stonemill.io", address="4 River St")
        db.session.add_all([farm, mill])
        db.session.flush()

        apples = Product(name="Apples", current_stock=40, min_quantity=20, max_quantity=120, case_quantity=40,
                         case_price=18.5, order_unit="case", category=produce, supplier_id=farm.id, user_id=admin.id)
        lettuce = Product(name="Lettuce", current_stock=3, min_quantity=10, max_quantity=40, case_quantity=24,
                          case_price=21.0, order_unit="case", category=produce, supplier_id=farm.id, user_id=admin.id)
        flour = Product(name="Flour", current_stock=0, min_quantity=5, max_quantity=30, case_quantity=1,
                        case_price=32.0, order_unit="bag", category=dry_goods, supplier_id=mill.id, user_id=admin.id)
        db.session.add_all([apples, lettuce, flour])
        db.session.flush()

        delivered = Order(supplier_id=farm.id, user_id=admin.id, order_date=date(2025, 3, 3),
                          delivered_date=date(2025, 3, 6), status=ORDER_DELIVERED)
        delivered.details = [
            OrderDetail(product_id=apples.id, supplier_id=farm.id, requested_quantity=2, unit_price=18.5,
                        order_unit="case", received_quantity=2, received_date=date(2025, 3, 6)),
            OrderDetail(product_id=lettuce.id, supplier_id=farm.id, requested_quantity=1, unit_price=21.0,
                        order_unit="case", received_quantity=1, received_date=date(2025, 3, 6)),
        ]
        delivered.recompute_total()

        pending = Order(supplier_id=mill.id, user_id=clerk.id, order_date=date.today(), status=ORDER_PENDING)
        pending.details = [
            OrderDetail(product_id=flour.id, supplier_id=mill.id, requested_quantity=5, unit_price=32.0, order_unit="bag"),
        ]
        pending.recompute_total()
        db.session.add_all([delivered, pending])

        try:
            db.session.commit()
            print("Database seeded successfully!")
        except Exception as e:
            db.session.rollback()
            print(f"Error seeding database: {e}")
            raise


if __name__ == "__main__":
    seed_database()
