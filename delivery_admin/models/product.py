from delivery_admin.extensions import db
from sqlalchemy import Numeric, false

class Product(db.Model):
    __tablename__ = 'product'
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(128), nullable=False)
    # Catalog price charged to clients for one unit
    admin_price = db.Column(Numeric(precision=12, scale=2), nullable=False)
    profit_amount = db.Column(Numeric(precision=12, scale=2), nullable=True)
    note = db.Column(db.Text, nullable=True)
    photo_url = db.Column(db.String(512), nullable=True)
    is_deleted = db.Column(db.Boolean, default=False, nullable=False, server_default=false())
    created_at = db.Column(db.DateTime, default=db.func.current_timestamp())
    updated_at = db.Column(db.DateTime, default=db.func.current_timestamp(), onupdate=db.func.current_timestamp())

    __table_args__ = (
        db.CheckConstraint('admin_price >= 0', name='check_product_admin_price'),
    )

    @classmethod
    def query_active(cls):
        """Query active (non-deleted) records only"""
        return cls.query.filter_by(is_deleted=False)

    @classmethod
    def query_all(cls):
        """Query all records including deleted ones"""
        return cls.query
