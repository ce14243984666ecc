from flask_wtf import FlaskForm
from werkzeug.datastructures import MultiDict
from wtforms import StringField, EmailField, FloatField, IntegerField, PasswordField, BooleanField, DateField, TextAreaField
from wtforms.validators import DataRequired, Email, Length, Optional, NumberRange, AnyOf, StopValidation

from stockroom.capabilities import ROLES
from stockroom.models.order import ORDER_STATUSES


def json_formdata(payload):
    """Flatten a JSON object into form data WTForms can coerce.

    Nulls are treated as absent and nested values are skipped; callers handle
    nested lists (such as order items) themselves.
    """
    items = []
    for key, value in (payload or {}).items():
        if value is None or isinstance(value, (list, dict)):
            continue
        if isinstance(value, bool):
            value = "true" if value else "false"
        items.append((key, str(value)))
    return MultiDict(items)


def first_error(form):
    for field_name, messages in form.errors.items():
        if messages:
            return f"{field_name}: {messages[0]}"
    return "Invalid request data"


def value_required(form, field):
    """Like DataRequired, but lets through falsy values such as 0."""
    if not field.raw_data or field.raw_data[0] in (None, ""):
        raise StopValidation("This field is required.")


class ApiForm(FlaskForm):
    class Meta:
        csrf = False


class RegistrationForm(ApiForm):
    username = StringField("Username", validators=[DataRequired(), Length(min=2, max=50)])
    email = EmailField("Email", validators=[DataRequired(), Email(), Length(max=120)])
    password = PasswordField("Password", validators=[DataRequired(), Length(min=6)])


class LoginForm(ApiForm):
    email = EmailField("Email", validators=[DataRequired(), Email()])
    password = PasswordField("Password", validators=[DataRequired()])


class RoleForm(ApiForm):
    role = StringField("Role", validators=[DataRequired(), AnyOf(ROLES, message="Invalid role specified")])


class SupplierForm(ApiForm):
    name = StringField("Supplier Name", validators=[DataRequired(), Length(min=2, max=100)])
    contact = StringField("Contact", validators=[DataRequired(), Length(max=100)])
    email = EmailField("Email", validators=[DataRequired(), Email(), Length(max=120)])
    address = TextAreaField("Address", validators=[DataRequired(), Length(max=200)])


class CategoryForm(ApiForm):
    name = StringField("Category Name", validators=[DataRequired(), Length(min=2, max=100)])
    description = TextAreaField("Description", validators=[Optional()])


class ProductUpdateForm(ApiForm):
    name = StringField("Product Name", validators=[Optional(), Length(min=1, max=100)])
    current_stock = IntegerField("Current Stock", validators=[Optional()])
    min_quantity = IntegerField("Minimum Quantity", validators=[Optional(), NumberRange(min=0)])
    max_quantity = IntegerField("Maximum Quantity", validators=[Optional(), NumberRange(min=0)])
    case_quantity = IntegerField("Case Quantity", validators=[Optional(), NumberRange(min=0)])
    case_price = FloatField("Case Price", validators=[Optional(), NumberRange(min=0)])
    order_unit = StringField("Order Unit", validators=[Optional(), Length(max=30)])
    expiration = DateField("Expiration", validators=[Optional()])
    category_id = IntegerField("Category", validators=[Optional()])
    supplier_id = IntegerField("Supplier", validators=[Optional()])
    is_active = BooleanField("Active", validators=[Optional()])

    def validate(self, extra_validators=None):
        if not super().validate(extra_validators):
            return False
        if (self.min_quantity.data is not None and self.max_quantity.data is not None
                and self.max_quantity.data < self.min_quantity.data):
            self.max_quantity.errors.append("Maximum quantity cannot be below the minimum quantity.")
            return False
        return True


class ProductForm(ProductUpdateForm):
    name = StringField("Product Name", validators=[DataRequired(), Length(min=1, max=100)])


class AddStockForm(ApiForm):
    quantity = IntegerField("Quantity", validators=[value_required])


class OrderForm(ApiForm):
    supplier_id = IntegerField("Supplier", validators=[value_required])
    order_date = DateField("Order Date", validators=[Optional()])


class OrderItemForm(ApiForm):
    product_id = IntegerField("Product", validators=[value_required])
    supplier_id = IntegerField("Supplier", validators=[Optional()])
    requested_quantity = IntegerField("Quantity", validators=[value_required, NumberRange(min=1)])
    unit_price = FloatField("Unit Price", validators=[value_required, NumberRange(min=0)])
    order_unit = StringField("Order Unit", validators=[Optional(), Length(max=30)])


class OrderStatusForm(ApiForm):
    status = StringField("Order Status", validators=[DataRequired(), AnyOf(ORDER_STATUSES, message="Invalid order status")])
