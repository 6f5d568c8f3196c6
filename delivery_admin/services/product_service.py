import logging
from delivery_admin.extensions import db
from delivery_admin.models.product import Product
from delivery_admin.services.errors import ServiceError

class ProductService:
    @staticmethod
    def get_all():
        try:
            return Product.query_active().order_by(Product.created_at.desc(), Product.id.desc()).all()
        except Exception as e:
            logging.error(f"Error fetching products: {e}", exc_info=True)
            raise ServiceError("Could not fetch products. Please try again later.")

    @staticmethod
    def get_by_id(product_id):
        try:
            return Product.query_active().filter_by(id=product_id).first()
        except Exception as e:
            logging.error(f"Error fetching product: {e}", exc_info=True)
            raise ServiceError("Could not fetch product. Please try again later.")

    @staticmethod
    def create(data):
        try:
            product = Product(**data)
            db.session.add(product)
            db.session.commit()
            return product
        except Exception as e:
            db.session.rollback()
            logging.error(f"Error creating product: {e}", exc_info=True)
            raise ServiceError("Could not create product. Please try again later.")

    @staticmethod
    def update(product_id, data):
        try:
            product = Product.query_active().filter_by(id=product_id).first()
            if not product:
                return None
            # Only future orders see the new price; existing items keep their snapshot
            for key, value in data.items():
                setattr(product, key, value)
            db.session.commit()
            return product
        except Exception as e:
            db.session.rollback()
            logging.error(f"Error updating product: {e}", exc_info=True)
            raise ServiceError("Could not update product. Please try again later.")

    @staticmethod
    def delete(product_id):
        try:
            product = Product.query_active().filter_by(id=product_id).first()
            if not product:
                return False
            product.is_deleted = True
            db.session.commit()
            return True
        except Exception as e:
            db.session.rollback()
            logging.error(f"Error deleting product: {e}", exc_info=True)
            raise ServiceError("Could not delete product. Please try again later.")
