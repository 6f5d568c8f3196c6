from delivery_admin.extensions import db

class Location(db.Model):
    __tablename__ = 'location'
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(128), unique=True, nullable=False)
    address = db.Column(db.String(256), nullable=True)
    created_at = db.Column(db.DateTime, default=db.func.current_timestamp())
    updated_at = db.Column(db.DateTime, default=db.func.current_timestamp(), onupdate=db.func.current_timestamp())

    @classmethod
    def name_exists(cls, name):
        """Whether `name` belongs to the reference set of locations"""
        if not name:
            return False
        return db.session.query(cls.id).filter_by(name=name).first() is not None

    def __repr__(self):
        return f'<Location {self.id}: {self.name}>'
