"""
Costing Errors

Exceptions raised by the costing, pricing and stock services. Each carries
the offending values so callers can show them to the user.
"""


class CostingError(Exception):
    """Base class for costing and stock errors."""

    def __init__(self, message, **details):
        super().__init__(message)
        self.message = message
        self.details = details

    def to_dict(self):
        return {'error': type(self).__name__, 'message': self.message, **self.details}


class InvalidUnit(CostingError):
    """Raised when a unit string is not one of kg, g, l, ml, un."""

    def __init__(self, unit):
        super().__init__(f'Invalid unit: {unit!r}', unit=unit)
        self.unit = unit


class DimensionMismatch(CostingError):
    """Raised when converting between units of different physical dimensions."""

    def __init__(self, from_unit, to_unit):
        super().__init__(
            f'Cannot convert {from_unit} to {to_unit}',
            from_unit=str(from_unit), to_unit=str(to_unit),
        )
        self.from_unit = from_unit
        self.to_unit = to_unit


class InvalidYield(CostingError):
    """Raised when an ingredient's yield is not within (0, 100]."""

    def __init__(self, ingredient_id, yield_percent):
        super().__init__(
            f'Invalid yield {yield_percent}% for ingredient {ingredient_id}',
            ingredient_id=ingredient_id, yield_percent=yield_percent,
        )


class InvalidPackageSize(CostingError):
    """Raised when an ingredient's purchase quantity is not positive."""

    def __init__(self, ingredient_id, purchase_quantity):
        super().__init__(
            f'Invalid package size {purchase_quantity} for ingredient {ingredient_id}',
            ingredient_id=ingredient_id, purchase_quantity=purchase_quantity,
        )


class UnknownIngredient(CostingError):
    """Raised when a recipe references an ingredient that does not exist."""

    def __init__(self, ingredient_id):
        super().__init__(f'Unknown ingredient {ingredient_id}', ingredient_id=ingredient_id)
        self.ingredient_id = ingredient_id


class MissingRecipe(CostingError):
    """Raised when a sold product has no recipe rows."""

    def __init__(self, product_id):
        super().__init__(f'Product {product_id} has no recipe', product_id=product_id)
        self.product_id = product_id


class PricingInfeasible(CostingError):
    """Raised when even the floor margin leaves no room for a price."""

    def __init__(self, fixed_cost_percent, tax_and_loss_percent, target_margin,
                 margin_used, deduction_percent, clamped):
        super().__init__(
            f'Deductions of {deduction_percent:.1f}% leave no room for a price',
            fixed_cost_percent=fixed_cost_percent,
            tax_and_loss_percent=tax_and_loss_percent,
            target_margin=target_margin,
            margin_used=margin_used,
            deduction_percent=deduction_percent,
            clamped=clamped,
        )
        self.deduction_percent = deduction_percent
        self.margin_used = margin_used
        self.clamped = clamped


class PersistenceFailure(CostingError):
    """Raised when a stock value could not be written."""

    def __init__(self, ingredient_id, reason):
        super().__init__(
            f'Could not write stock for ingredient {ingredient_id}: {reason}',
            ingredient_id=ingredient_id, reason=str(reason),
        )
        self.ingredient_id = ingredient_id


class InvalidStockAdjustment(CostingError):
    """Raised when a manual stock adjustment is malformed."""

    def __init__(self, message, **details):
        super().__init__(message, **details)
