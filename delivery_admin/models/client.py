from delivery_admin.extensions import db
from sqlalchemy import false

class Client(db.Model):
    __tablename__ = 'client'

    id = db.Column(db.Integer, primary_key=True, index=True)
    full_name = db.Column(db.String(128), nullable=False)
    location = db.Column(db.String(128), nullable=False)
    phone_number = db.Column(db.String(32), nullable=False)
    house_image_url = db.Column(db.String(512), nullable=True)
    is_deleted = db.Column(db.Boolean, default=False, nullable=False, server_default=false())
    created_at = db.Column(db.DateTime, default=db.func.current_timestamp())
    updated_at = db.Column(db.DateTime, default=db.func.current_timestamp(), onupdate=db.func.current_timestamp())

    @classmethod
    def query_active(cls):
        """Query active (non-deleted) records only"""
        return cls.query.filter_by(is_deleted=False)

    @classmethod
    def query_all(cls):
        """Query all records including deleted ones"""
        return cls.query
