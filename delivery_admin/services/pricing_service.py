"""
Order pricing.

Resolves each (product, quantity) line to the admin price charged to the
client and the driver price paid to the assigned driver, and totals both.
"""

import logging
from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, List, Mapping, Optional, Sequence

from pydantic import BaseModel, Field, ConfigDict
from pydantic import ValidationError as PydanticValidationError

from delivery_admin.extensions import db
from delivery_admin.models.driver import Driver
from delivery_admin.models.driver_product_price import DriverProductPrice
from delivery_admin.models.product import Product
from delivery_admin.services.errors import ServiceError, ValidationError

CENT = Decimal("0.01")


def to_money(value) -> Decimal:
    return Decimal(str(value)).quantize(CENT, rounding=ROUND_HALF_UP)


class OrderLine(BaseModel):
    product_id: int
    quantity: int = Field(ge=1)


class PricedLine(BaseModel):
    model_config = ConfigDict(arbitrary_types_allowed=True)
    product_id: int
    quantity: int = Field(ge=1)
    admin_price: Decimal = Field(ge=0, decimal_places=2)
    driver_price: Decimal = Field(ge=0, decimal_places=2)

    @property
    def line_admin_total(self) -> Decimal:
        return self.admin_price * self.quantity

    @property
    def line_driver_total(self) -> Decimal:
        return self.driver_price * self.quantity


class PriceSnapshot(BaseModel):
    model_config = ConfigDict(arbitrary_types_allowed=True)
    driver_id: Optional[int] = None
    lines: List[PricedLine] = Field(min_length=1)

    @property
    def total_amount(self) -> Decimal:
        return sum((line.line_admin_total for line in self.lines), Decimal("0.00"))

    @property
    def driver_amount(self) -> Decimal:
        return sum((line.line_driver_total for line in self.lines), Decimal("0.00"))

    def to_dict(self) -> dict:
        return {
            'driver_id': self.driver_id,
            'items': [
                {
                    'product_id': line.product_id,
                    'quantity': line.quantity,
                    'admin_price': float(line.admin_price),
                    'driver_price': float(line.driver_price),
                    'line_admin_total': float(line.line_admin_total),
                    'line_driver_total': float(line.line_driver_total),
                }
                for line in self.lines
            ],
            'total_amount': float(self.total_amount),
            'driver_amount': float(self.driver_amount),
        }


def parse_lines(raw_lines) -> List[OrderLine]:
    """Validate raw ``{product_id, quantity}`` dicts into OrderLine objects."""
    if not isinstance(raw_lines, (list, tuple)) or not raw_lines:
        raise ValidationError("At least one product line is required.")
    lines = []
    for index, raw in enumerate(raw_lines):
        if isinstance(raw, OrderLine):
            lines.append(raw)
            continue
        if not isinstance(raw, Mapping):
            raise ValidationError(f"Line {index + 1} must be an object with product_id and quantity.")
        try:
            lines.append(OrderLine(**raw))
        except PydanticValidationError as e:
            fields = ', '.join(str(err['loc'][0]) for err in e.errors() if err.get('loc'))
            raise ValidationError(f"Line {index + 1} is invalid: {fields or 'bad value'}.")
    return lines


def compute_snapshot(catalog: Mapping[int, Decimal],
                     overrides: Mapping[int, Decimal],
                     lines: Sequence[OrderLine],
                     driver_id: Optional[int] = None) -> PriceSnapshot:
    """
    Price a list of lines against the catalogue.

    Args:
        catalog: product id -> admin price, for usable products only
        overrides: product id -> driver price for the assigned driver
        lines: requested lines, in order
        driver_id: carried through to the snapshot

    Raises:
        ValidationError: no lines, or a line names a product not in the catalogue
    """
    if not lines:
        raise ValidationError("At least one product line is required.")

    priced = []
    for line in lines:
        if line.product_id not in catalog:
            raise ValidationError(f"Product {line.product_id} does not exist.")
        admin_price = to_money(catalog[line.product_id])
        override = overrides.get(line.product_id)
        # No override means the driver is paid the admin price
        driver_price = to_money(override) if override is not None else admin_price
        priced.append(PricedLine(
            product_id=line.product_id,
            quantity=line.quantity,
            admin_price=admin_price,
            driver_price=driver_price,
        ))
    return PriceSnapshot(driver_id=driver_id, lines=priced)


class PricingService:
    @staticmethod
    def load_catalog(product_ids) -> Dict[int, Decimal]:
        products = Product.query_active().filter(Product.id.in_(set(product_ids))).all()
        return {product.id: product.admin_price for product in products}

    @staticmethod
    def load_overrides(driver_id, product_ids) -> Dict[int, Decimal]:
        if driver_id is None:
            return {}
        rows = DriverProductPrice.query.filter(
            DriverProductPrice.driver_id == driver_id,
            DriverProductPrice.product_id.in_(set(product_ids)),
        ).all()
        return {row.product_id: row.driver_price for row in rows}

    @staticmethod
    def snapshot(driver_id, raw_lines) -> PriceSnapshot:
        """Price lines for ``driver_id`` (or unassigned) without persisting anything."""
        lines = parse_lines(raw_lines)
        try:
            if driver_id is not None:
                driver = Driver.query_active().filter_by(id=driver_id).first()
                if not driver:
                    raise ValidationError(f"Driver {driver_id} does not exist.")
            product_ids = [line.product_id for line in lines]
            catalog = PricingService.load_catalog(product_ids)
            overrides = PricingService.load_overrides(driver_id, product_ids)
        except ServiceError:
            raise
        except Exception as e:
            logging.error(f"Error loading prices: {e}", exc_info=True)
            raise ServiceError("Could not load product prices. Please try again later.")
        return compute_snapshot(catalog, overrides, lines, driver_id=driver_id)
