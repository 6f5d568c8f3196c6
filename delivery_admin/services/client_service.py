import logging
from delivery_admin.extensions import db
from delivery_admin.models.client import Client
from delivery_admin.services.errors import ServiceError

class ClientService:
    @staticmethod
    def get_all():
        try:
            return Client.query_active().order_by(Client.created_at.desc(), Client.id.desc()).all()
        except Exception as e:
            logging.error(f"Error fetching clients: {e}", exc_info=True)
            raise ServiceError("Could not fetch clients. Please try again later.")

    @staticmethod
    def get_by_id(client_id):
        try:
            return Client.query_active().filter_by(id=client_id).first()
        except Exception as e:
            logging.error(f"Error fetching client: {e}", exc_info=True)
            raise ServiceError("Could not fetch client. Please try again later.")

    @staticmethod
    def create(data):
        try:
            client = Client(**data)
            db.session.add(client)
            db.session.commit()
            return client
        except Exception as e:
            db.session.rollback()
            logging.error(f"Error creating client: {e}", exc_info=True)
            raise ServiceError("Could not create client. Please try again later.")

    @staticmethod
    def update(client_id, data):
        try:
            client = Client.query_active().filter_by(id=client_id).first()
            if not client:
                return None
            for key, value in data.items():
                setattr(client, key, value)
            db.session.commit()
            return client
        except Exception as e:
            db.session.rollback()
            logging.error(f"Error updating client: {e}", exc_info=True)
            raise ServiceError("Could not update client. Please try again later.")

    @staticmethod
    def delete(client_id):
        try:
            client = Client.query_active().filter_by(id=client_id).first()
            if not client:
                return False
            # Soft delete so existing orders keep their client
            client.is_deleted = True
            db.session.commit()
            return True
        except Exception as e:
            db.session.rollback()
            logging.error(f"Error deleting client: {e}", exc_info=True)
            raise ServiceError("Could not delete client. Please try again later.")
