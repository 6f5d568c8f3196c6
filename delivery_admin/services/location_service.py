import logging
from delivery_admin.extensions import db
from delivery_admin.models.location import Location
from delivery_admin.services.errors import ServiceError, ValidationError

class LocationService:
    @staticmethod
    def get_all():
        try:
            return Location.query.order_by(Location.name.asc()).all()
        except Exception as e:
            logging.error(f"Error fetching locations: {e}", exc_info=True)
            raise ServiceError("Could not fetch locations. Please try again later.")

    @staticmethod
    def get_by_id(location_id):
        try:
            return db.session.get(Location, location_id)
        except Exception as e:
            logging.error(f"Error fetching location: {e}", exc_info=True)
            raise ServiceError("Could not fetch location. Please try again later.")

    @staticmethod
    def require_name(name):
        """Raise ValidationError unless ``name`` is one of the configured locations."""
        if not name or not Location.name_exists(name):
            raise ValidationError(f"Unknown location: {name!r}.")

    @staticmethod
    def create(data):
        try:
            if Location.name_exists(data.get('name')):
                raise ValidationError("A location with this name already exists.")
            location = Location(**data)
            db.session.add(location)
            db.session.commit()
            return location
        except ServiceError:
            db.session.rollback()
            raise
        except Exception as e:
            db.session.rollback()
            logging.error(f"Error creating location: {e}", exc_info=True)
            raise ServiceError("Could not create location. Please try again later.")

    @staticmethod
    def update(location_id, data):
        try:
            location = db.session.get(Location, location_id)
            if not location:
                return None
            new_name = data.get('name')
            if new_name and new_name != location.name and Location.name_exists(new_name):
                raise ValidationError("A location with this name already exists.")
            for key, value in data.items():
                setattr(location, key, value)
            db.session.commit()
            return location
        except ServiceError:
            db.session.rollback()
            raise
        except Exception as e:
            db.session.rollback()
            logging.error(f"Error updating location: {e}", exc_info=True)
            raise ServiceError("Could not update location. Please try again later.")

    @staticmethod
    def delete(location_id):
        try:
            location = db.session.get(Location, location_id)
            if not location:
                return False
            db.session.delete(location)
            db.session.commit()
            return True
        except Exception as e:
            db.session.rollback()
            logging.error(f"Error deleting location: {e}", exc_info=True)
            raise ServiceError("Could not delete location. Please try again later.")
