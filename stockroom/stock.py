OUT_OF_STOCK = "Out of Stock"
LOW_STOCK = "Low Stock"
IN_STOCK = "In Stock"

STOCK_STATUSES = [OUT_OF_STOCK, LOW_STOCK, IN_STOCK]


def stock_status(current_stock, min_quantity):
    """Derive the display status of a product from its stock and minimum.

    Missing values count as zero, so a product without a minimum is in stock
    whenever it has any stock at all.
    """
    current_stock = current_stock or 0
    min_quantity = min_quantity or 0
    if current_stock <= 0:
        return OUT_OF_STOCK
    if current_stock < min_quantity:
        return LOW_STOCK
    return IN_STOCK


def needs_restock(current_stock, min_quantity):
    return (current_stock or 0) < (min_quantity or 0)
