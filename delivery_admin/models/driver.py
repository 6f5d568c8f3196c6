from delivery_admin.extensions import db
from sqlalchemy import false
from enum import Enum

class DriverStatus(Enum):
    AVAILABLE = "available"
    IN_DELIVERY = "in_delivery"
    OFFLINE = "offline"

class Driver(db.Model):
    __tablename__ = 'driver'
    id = db.Column(db.Integer, primary_key=True)
    full_name = db.Column(db.String(128), nullable=False)
    car_type = db.Column(db.String(64), nullable=False)
    car_image_url = db.Column(db.String(512), nullable=True)
    location = db.Column(db.String(128), nullable=False)
    phone_number = db.Column(db.String(32), nullable=False)
    status = db.Column(db.String(32), default=DriverStatus.AVAILABLE.value, nullable=False, index=True)
    is_deleted = db.Column(db.Boolean, default=False, nullable=False, server_default=false())
    created_at = db.Column(db.DateTime, default=db.func.current_timestamp())
    updated_at = db.Column(db.DateTime, default=db.func.current_timestamp(), onupdate=db.func.current_timestamp())

    product_prices = db.relationship('DriverProductPrice', back_populates='driver', cascade='all, delete-orphan', lazy='select')
    payment = db.relationship('DriverPayment', back_populates='driver', uselist=False, cascade='all, delete-orphan', lazy='select')

    __table_args__ = (
        db.CheckConstraint(
            f"status IN ({', '.join([repr(status.value) for status in DriverStatus])})",
            name='check_driver_status'
        ),
    )

    @classmethod
    def query_active(cls):
        """Query active (non-deleted) records only"""
        return cls.query.filter_by(is_deleted=False)

    @classmethod
    def query_all(cls):
        """Query all records including deleted ones"""
        return cls.query

    @property
    def is_available(self):
        return self.status == DriverStatus.AVAILABLE.value
