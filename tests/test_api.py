from decimal import Decimal
from delivery_admin.extensions import db
from delivery_admin.models.driver_payment import DriverPayment
from delivery_admin.models.order import Order
from delivery_admin.models.scheduled_order import ScheduledOrder
from delivery_admin.utils.timezone_utils import convert_reference_to_utc


def test_health_check(client):
    response = client.get('/api/health-check')
    assert response.status_code == 200
    body = response.get_json()
    assert body['database'] == 'ok'
    assert 'checked_out' in body['pool']


def test_unknown_api_path_is_json_404(client):
    response = client.get('/api/does-not-exist')
    assert response.status_code == 404
    assert response.get_json()['error'] == 'API endpoint not found'


def test_wrong_method_is_json_405(client):
    response = client.patch('/api/orders')
    assert response.status_code == 405
    assert 'error' in response.get_json()


class TestCatalogApi:

    def test_product_crud_with_soft_delete(self, client):
        response = client.post('/api/products', json={'name': 'Ice 5kg', 'admin_price': 12.5})
        assert response.status_code == 201
        product = response.get_json()
        assert product['admin_price'] == 12.5

        response = client.put(f"/api/products/{product['id']}", json={'admin_price': 13})
        assert response.get_json()['admin_price'] == 13.0

        assert client.delete(f"/api/products/{product['id']}").status_code == 200
        assert client.get(f"/api/products/{product['id']}").status_code == 404
        assert client.get('/api/products').get_json() == []

    def test_negative_price_is_field_error(self, client):
        response = client.post('/api/products', json={'name': 'Bad', 'admin_price': -1})
        assert response.status_code == 400
        assert 'admin_price' in response.get_json()

    def test_duplicate_location_rejected(self, client):
        assert client.post('/api/locations', json={'name': 'Olaya'}).status_code == 201
        response = client.post('/api/locations', json={'name': 'Olaya'})
        assert response.status_code == 400
        assert 'already exists' in response.get_json()['error']

    def test_locations_sorted_and_searchable(self, client):
        client.post('/api/locations', json={'name': 'Malaz'})
        client.post('/api/locations', json={'name': 'Diriyah'})
        names = [loc['name'] for loc in client.get('/api/locations').get_json()]
        assert names == ['Diriyah', 'Malaz']
        assert [loc['name'] for loc in client.get('/api/locations?q=mal').get_json()] == ['Malaz']


class TestDriverApi:

    def test_create_driver_opens_ledger_and_keeps_positive_prices(self, client, make_product):
        water = make_product()
        ice = make_product(name='Ice', admin_price='4.00')
        response = client.post('/api/drivers', json={
            'full_name': 'Faisal',
            'car_type': 'Pickup',
            'location': 'Riyadh North',
            'phone_number': '0551112222',
            'product_prices': [
                {'product_id': water.id, 'driver_price': 8},
                {'product_id': ice.id, 'driver_price': 0},
            ],
        })
        assert response.status_code == 201
        body = response.get_json()
        assert [p['product_id'] for p in body['product_prices']] == [water.id]
        assert DriverPayment.query.filter_by(driver_id=body['id']).count() == 1

    def test_replace_prices(self, client, order_setup, make_product):
        other = make_product(name='Juice', admin_price='3.00')
        driver_id = order_setup['driver'].id
        response = client.put(f'/api/drivers/{driver_id}/product-prices',
                              json=[{'product_id': other.id, 'driver_price': 2.5}])
        assert response.status_code == 200
        prices = client.get(f'/api/drivers/{driver_id}/product-prices').get_json()
        assert [(p['product_id'], p['driver_price']) for p in prices] == [(other.id, 2.5)]

    def test_available_drivers(self, client, make_driver):
        make_driver(full_name='Free')
        make_driver(full_name='Away', status='offline')
        names = [d['full_name'] for d in client.get('/api/drivers/available').get_json()]
        assert names == ['Free']


class TestOrderApi:

    def test_quote_does_not_persist(self, client, order_data):
        response = client.post('/api/pricing/quote', json={
            'driver_id': order_data['driver_id'], 'items': order_data['items']})
        assert response.status_code == 200
        body = response.get_json()
        assert body['total_amount'] == 20.0
        assert body['driver_amount'] == 15.0
        assert Order.query.count() == 0

    def test_create_and_fetch_order(self, client, order_data):
        response = client.post('/api/orders', json=order_data)
        assert response.status_code == 201
        order = response.get_json()
        assert order['total_amount'] == 20.0
        assert order['client_name'] == 'Sara Client'
        assert order['items'][0]['product_name'] == 'Water 20L'

        detail = client.get(f"/api/orders/{order['id']}").get_json()
        assert detail['status_history'][0]['new_status'] == 'new'

    def test_missing_items_is_field_error(self, client, order_data):
        order_data['items'] = []
        response = client.post('/api/orders', json=order_data)
        assert response.status_code == 400
        assert 'items' in response.get_json()

    def test_unknown_product_is_400(self, client, order_data):
        order_data['items'] = [{'product_id': 999, 'quantity': 1}]
        response = client.post('/api/orders', json=order_data)
        assert response.status_code == 400
        assert 'error' in response.get_json()

    def test_stale_expected_status_is_409(self, client, order_data):
        order_id = client.post('/api/orders', json=order_data).get_json()['id']
        client.put(f'/api/orders/{order_id}/status', json={'status': 'in_progress'})
        response = client.put(f'/api/orders/{order_id}/status',
                              json={'status': 'completed', 'expected_status': 'new'})
        assert response.status_code == 409

    def test_status_on_missing_order_is_404(self, client, app):
        response = client.put('/api/orders/31337/status', json={'status': 'completed'})
        assert response.status_code == 404

    def test_completion_shows_in_dashboard(self, client, order_data):
        order_id = client.post('/api/orders', json=order_data).get_json()['id']
        client.put(f'/api/orders/{order_id}/status', json={'status': 'completed'})
        stats = client.get('/api/dashboard/stats').get_json()
        assert stats['total_orders'] == 1
        assert stats['completed_orders'] == 1
        assert stats['total_revenue'] == 20.0
        assert stats['pending_payments'] == 15.0
        assert stats['available_drivers'] == 1


class TestScheduledOrderApi:

    def test_create_renders_riyadh_time(self, client, order_data):
        order_data['scheduled_datetime'] = '2099-01-01T09:00:00'
        response = client.post('/api/scheduled-orders', json=order_data)
        assert response.status_code == 201
        body = response.get_json()
        assert body['scheduled_datetime'] == '2099-01-01T09:00:00+03:00'
        assert body['scheduled_datetime_utc'] == '2099-01-01T06:00:00+00:00'
        assert body['status'] == 'scheduled'

    def test_past_time_is_400(self, client, order_data):
        order_data['scheduled_datetime'] = '2000-01-01T09:00:00'
        assert client.post('/api/scheduled-orders', json=order_data).status_code == 400

    def test_activate_due_endpoint(self, client, order_data):
        order_data['scheduled_datetime'] = '2099-01-01T09:00:00'
        scheduled_id = client.post('/api/scheduled-orders', json=order_data).get_json()['id']
        # Pull the due time into the past
        row = db.session.get(ScheduledOrder, scheduled_id)
        row.scheduled_datetime = convert_reference_to_utc('2000-01-01T09:00:00')
        db.session.commit()

        response = client.post('/api/scheduled-orders/activate-due')
        assert response.status_code == 200
        body = response.get_json()
        assert body['count'] == 1
        assert body['activated'][0]['scheduled_order_id'] == scheduled_id

        again = client.post('/api/scheduled-orders/activate-due').get_json()
        assert again['count'] == 0

        cancel = client.put(f'/api/scheduled-orders/{scheduled_id}/cancel')
        assert cancel.status_code == 409


class TestPaymentApi:

    def test_pay_and_withdraw(self, client, make_driver):
        driver = make_driver()
        payment = DriverPayment.query.filter_by(driver_id=driver.id).one()
        payment.pending_amount = Decimal('100.00')
        payment.paid_amount = Decimal('20.00')
        db.session.commit()

        response = client.post(f'/api/payments/drivers/{driver.id}/pay', json={'amount': 60})
        assert response.status_code == 201
        assert response.get_json()['payment']['pending_amount'] == 40.0

        response = client.post(f'/api/payments/drivers/{driver.id}/withdraw', json={'amount': 50, 'notes': 'cash'})
        assert response.status_code == 201
        assert response.get_json()['payment']['paid_amount'] == 30.0

        response = client.post(f'/api/payments/drivers/{driver.id}/withdraw', json={'amount': 50})
        assert response.status_code == 400

        ledger = client.get(f'/api/payments/drivers/{driver.id}').get_json()
        assert ledger['total_withdrawn'] == 50.0
        assert len(ledger['transactions']) == 2
        assert len(ledger['withdrawals']) == 1

    def test_amount_must_be_number(self, client, make_driver):
        driver = make_driver()
        response = client.post(f'/api/payments/drivers/{driver.id}/pay', json={'amount': 'lots'})
        assert response.status_code == 400
        assert 'amount' in response.get_json()

    def test_balances_list(self, client, make_driver):
        make_driver()
        balances = client.get('/api/payments/balances').get_json()
        assert balances[0]['pending_amount'] == 0.0
        assert balances[0]['has_ledger'] is True

    def test_malformed_driver_filter_is_400(self, client, make_driver):
        make_driver()
        for path in ('/api/payments/transactions', '/api/payments/withdrawals'):
            response = client.get(f'{path}?driver_id=abc')
            assert response.status_code == 400
            assert 'driver_id' in response.get_json()['error']

    def test_driver_filter(self, client, make_driver):
        driver = make_driver()
        response = client.get(f'/api/payments/transactions?driver_id={driver.id}')
        assert response.status_code == 200
        assert response.get_json() == []


class TestAdminApi:

    def test_role_gating_over_http(self, client, make_admin):
        root = make_admin()
        helper = make_admin(email='helper@example.com', full_name='Helper', role='sub_admin')

        response = client.post('/api/admins', json={'email': 'a@example.com', 'full_name': 'A'},
                               headers={'X-Admin-Id': str(helper.id)})
        assert response.status_code == 403

        response = client.post('/api/admins', json={'email': 'a@example.com', 'full_name': 'A'},
                               headers={'X-Admin-Id': str(root.id)})
        assert response.status_code == 201
        assert response.get_json()['role'] == 'sub_admin'

        response = client.delete(f'/api/admins/{root.id}', headers={'X-Admin-Id': str(root.id)})
        assert response.status_code == 403

        assert len(client.get('/api/admins').get_json()) == 3
