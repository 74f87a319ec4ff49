from marshmallow import Schema, fields, validate


class ProductSchema(Schema):
    id = fields.Str(required=True, data_key="_id", validate=validate.Length(min=1))
    name = fields.Str(required=True)
    # Kept raw: lines with a non-numeric price are stored but left out of the subtotal
    price = fields.Raw(required=True, allow_none=True)
    image = fields.Str(load_default=None, allow_none=True)
    category = fields.Str(load_default=None, allow_none=True)
    sizes = fields.List(fields.Str(), load_default=list)
    colors = fields.List(fields.Str(), load_default=list)


class AddCartItemSchema(Schema):
    product = fields.Nested(ProductSchema, required=True)
    quantity = fields.Int(required=True, strict=True)
    size = fields.Str(load_default="")
    color = fields.Str(load_default="")


class CartLineSchema(Schema):
    product_id = fields.Str(required=True, validate=validate.Length(min=1))
    size = fields.Str(load_default="")
    color = fields.Str(load_default="")


class UpdateCartItemSchema(CartLineSchema):
    quantity = fields.Int(required=True, strict=True)


class ApplyCouponSchema(Schema):
    code = fields.Str(required=True)


class PlaceOrderSchema(Schema):
    shipping_address = fields.Raw(required=True)
    payment_method = fields.Str(
        required=True, validate=validate.OneOf(["cod", "online", "razorpay"])
    )
    payment_reference = fields.Str(load_default=None, allow_none=True)
