import logging
from decimal import Decimal, InvalidOperation
from delivery_admin.extensions import db
from delivery_admin.models.driver import Driver, DriverStatus
from delivery_admin.models.driver_payment import DriverPayment
from delivery_admin.models.driver_product_price import DriverProductPrice
from delivery_admin.models.product import Product
from delivery_admin.services.errors import ServiceError, ValidationError

class DriverService:
    @staticmethod
    def get_all():
        try:
            return Driver.query_active().order_by(Driver.created_at.desc(), Driver.id.desc()).all()
        except Exception as e:
            logging.error(f"Error fetching drivers: {e}", exc_info=True)
            raise ServiceError("Could not fetch drivers. Please try again later.")

    @staticmethod
    def get_available():
        try:
            return (Driver.query_active()
                    .filter_by(status=DriverStatus.AVAILABLE.value)
                    .order_by(Driver.full_name.asc())
                    .all())
        except Exception as e:
            logging.error(f"Error fetching available drivers: {e}", exc_info=True)
            raise ServiceError("Could not fetch available drivers. Please try again later.")

    @staticmethod
    def get_by_id(driver_id):
        try:
            return Driver.query_active().filter_by(id=driver_id).first()
        except Exception as e:
            logging.error(f"Error fetching driver: {e}", exc_info=True)
            raise ServiceError("Could not fetch driver. Please try again later.")

    @staticmethod
    def require_available(driver_id):
        """Return the driver if it can take a new order, else raise ValidationError."""
        driver = Driver.query_active().filter_by(id=driver_id).first()
        if not driver:
            raise ValidationError(f"Driver {driver_id} does not exist.")
        if not driver.is_available:
            raise ValidationError(f"Driver {driver.full_name} is not available.")
        return driver

    @staticmethod
    def _build_price_rows(price_entries):
        """
        Turn ``[{product_id, driver_price}]`` into DriverProductPrice rows.

        Entries with a non-positive price are dropped; a later entry for the
        same product replaces an earlier one.
        """
        prices = {}
        for entry in price_entries or []:
            try:
                product_id = int(entry['product_id'])
                driver_price = Decimal(str(entry['driver_price']))
            except (KeyError, TypeError, ValueError, InvalidOperation):
                raise ValidationError("Each product price needs a product_id and a numeric driver_price.")
            if driver_price > 0:
                prices[product_id] = driver_price
            else:
                prices.pop(product_id, None)

        if prices:
            known = {
                row.id for row in
                Product.query_active().filter(Product.id.in_(list(prices))).all()
            }
            missing = sorted(set(prices) - known)
            if missing:
                raise ValidationError(f"Unknown products: {', '.join(str(m) for m in missing)}.")

        return [
            DriverProductPrice(product_id=product_id, driver_price=price)
            for product_id, price in prices.items()
        ]

    @staticmethod
    def create(data, product_prices=None):
        """Create a driver together with its zeroed payment row and price overrides."""
        try:
            driver = Driver(**data)
            driver.payment = DriverPayment(pending_amount=Decimal('0'), paid_amount=Decimal('0'))
            driver.product_prices = DriverService._build_price_rows(product_prices)
            db.session.add(driver)
            db.session.commit()
            logging.info(f"Created driver {driver.id} with {len(driver.product_prices)} price overrides")
            return driver
        except ServiceError:
            db.session.rollback()
            raise
        except Exception as e:
            db.session.rollback()
            logging.error(f"Error creating driver: {e}", exc_info=True)
            raise ServiceError("Could not create driver. Please try again later.")

    @staticmethod
    def update(driver_id, data):
        try:
            driver = Driver.query_active().filter_by(id=driver_id).first()
            if not driver:
                return None
            for key, value in data.items():
                setattr(driver, key, value)
            db.session.commit()
            return driver
        except Exception as e:
            db.session.rollback()
            logging.error(f"Error updating driver: {e}", exc_info=True)
            raise ServiceError("Could not update driver. Please try again later.")

    @staticmethod
    def delete(driver_id):
        try:
            driver = Driver.query_active().filter_by(id=driver_id).first()
            if not driver:
                return False
            driver.is_deleted = True
            db.session.commit()
            return True
        except Exception as e:
            db.session.rollback()
            logging.error(f"Error deleting driver: {e}", exc_info=True)
            raise ServiceError("Could not delete driver. Please try again later.")

    @staticmethod
    def get_product_prices(driver_id):
        try:
            driver = Driver.query_active().filter_by(id=driver_id).first()
            if not driver:
                return None
            return (DriverProductPrice.query
                    .filter_by(driver_id=driver_id)
                    .order_by(DriverProductPrice.product_id.asc())
                    .all())
        except Exception as e:
            logging.error(f"Error fetching driver product prices: {e}", exc_info=True)
            raise ServiceError("Could not fetch driver product prices. Please try again later.")

    @staticmethod
    def replace_product_prices(driver_id, price_entries):
        """Swap the driver's overrides for ``price_entries`` in one transaction."""
        try:
            driver = Driver.query_active().filter_by(id=driver_id).first()
            if not driver:
                return None
            rows = DriverService._build_price_rows(price_entries)
            DriverProductPrice.query.filter_by(driver_id=driver_id).delete(synchronize_session=False)
            for row in rows:
                row.driver_id = driver_id
                db.session.add(row)
            db.session.commit()
            return (DriverProductPrice.query
                    .filter_by(driver_id=driver_id)
                    .order_by(DriverProductPrice.product_id.asc())
                    .all())
        except ServiceError:
            db.session.rollback()
            raise
        except Exception as e:
            db.session.rollback()
            logging.error(f"Error replacing driver product prices: {e}", exc_info=True)
            raise ServiceError("Could not update driver product prices. Please try again later.")
