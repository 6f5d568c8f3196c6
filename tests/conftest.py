import pytest
from decimal import Decimal
from delivery_admin.config import TestConfig
from delivery_admin.extensions import db
from delivery_admin.server import create_app
from delivery_admin.models.admin import Admin, AdminRole
from delivery_admin.models.client import Client
from delivery_admin.models.location import Location
from delivery_admin.models.product import Product
from delivery_admin.services.driver_service import DriverService


@pytest.fixture
def app():
    app = create_app(TestConfig)
    ctx = app.app_context()
    ctx.push()
    db.create_all()
    yield app
    db.session.remove()
    db.drop_all()
    ctx.pop()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def make_location(app):
    def _make(name='Riyadh North', address=None):
        location = Location(name=name, address=address)
        db.session.add(location)
        db.session.commit()
        return location
    return _make


@pytest.fixture
def make_product(app):
    def _make(name='Water 20L', admin_price='10.00', **kwargs):
        product = Product(name=name, admin_price=Decimal(admin_price), **kwargs)
        db.session.add(product)
        db.session.commit()
        return product
    return _make


@pytest.fixture
def make_client(app):
    def _make(full_name='Sara Client', location='Riyadh North', phone_number='0500000001'):
        client = Client(full_name=full_name, location=location, phone_number=phone_number)
        db.session.add(client)
        db.session.commit()
        return client
    return _make


@pytest.fixture
def make_driver(app):
    def _make(full_name='Omar Driver', status='available', product_prices=None):
        return DriverService.create({
            'full_name': full_name,
            'car_type': 'Van',
            'location': 'Riyadh North',
            'phone_number': '0550000002',
            'status': status,
        }, product_prices=product_prices)
    return _make


@pytest.fixture
def make_admin(app):
    def _make(email='root@example.com', full_name='Root Admin', role=AdminRole.SUPER_ADMIN.value):
        admin = Admin(email=email, full_name=full_name, role=role)
        db.session.add(admin)
        db.session.commit()
        return admin
    return _make


@pytest.fixture
def order_setup(make_location, make_product, make_client, make_driver):
    """A location, a client, a product at 10.00 and a driver overriding it at 7.50."""
    location = make_location()
    product = make_product()
    client = make_client()
    driver = make_driver(product_prices=[{'product_id': product.id, 'driver_price': '7.50'}])
    return {
        'location': location,
        'product': product,
        'client': client,
        'driver': driver,
    }


@pytest.fixture
def order_data(order_setup):
    return {
        'client_id': order_setup['client'].id,
        'driver_id': order_setup['driver'].id,
        'location': order_setup['location'].name,
        'items': [{'product_id': order_setup['product'].id, 'quantity': 2}],
    }
