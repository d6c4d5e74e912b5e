"""
Customer tests.

Verifies:
- soft delete: hidden from listings, still readable by id with is_active = 0
- duplicate emails rejected with 400, including past the pre-insert check
- update keeps stored values for omitted optional fields
- search, types, top/inactive customers, stats and purchase history
"""

import pytest

from bricopos.models import Customer, Sale
from helpers import customer_payload, days_back, sale_payload


def _create(client, **overrides):
    resp = client.post('/api/customers', json=customer_payload(**overrides))
    assert resp.status_code == 201, resp.json
    return resp.json


def _sale(client, customer_id, **overrides):
    resp = client.post('/api/sales', json=sale_payload(customer_id=customer_id, **overrides))
    assert resp.status_code == 201, resp.json
    return resp.json


# =============================================================================
# CRUD
# =============================================================================


class TestCustomerCrud:

    def test_create_returns_id_merged_with_payload(self, client):
        created = _create(client)
        assert created['id'] > 0
        assert created['name'] == 'Atelier Benali'
        assert created['customer_type'] == 'wholesale'
        assert created['credit_limit'] == 5000.0
        assert 'is_active' not in created

        row = client.get(f"/api/customers/{created['id']}").json
        assert row['id'] == created['id']
        assert row['is_active'] == 1

    def test_defaults(self, client):
        created = _create(client, customer_type=None, credit_limit=None, email=None)
        row = client.get(f"/api/customers/{created['id']}").json
        assert row['customer_type'] == 'retail'
        assert row['credit_limit'] == 0

    def test_name_required(self, client):
        resp = client.post('/api/customers', json={'email': 'x@example.com'})
        assert resp.status_code == 400
        assert resp.json['error'] == 'Missing required field: name'

    def test_invalid_type_and_negative_credit(self, client):
        resp = client.post('/api/customers', json=customer_payload(customer_type='vip'))
        assert resp.status_code == 400
        assert 'customer_type' in resp.json['error']

        resp = client.post('/api/customers', json=customer_payload(credit_limit=-1))
        assert resp.status_code == 400
        assert 'credit_limit' in resp.json['error']

    def test_unknown_customer_is_404(self, client):
        assert client.get('/api/customers/77').status_code == 404
        assert client.put('/api/customers/77', json=customer_payload()).status_code == 404
        assert client.delete('/api/customers/77').status_code == 404

    def test_update_keeps_omitted_fields(self, client):
        created = _create(client)
        resp = client.put(f"/api/customers/{created['id']}", json={'name': 'Atelier Benali & Fils'})
        assert resp.status_code == 200

        row = client.get(f"/api/customers/{created['id']}").json
        assert row['name'] == 'Atelier Benali & Fils'
        assert row['email'] == 'contact@benali.ma'
        assert row['city'] == 'Casablanca'
        assert row['customer_type'] == 'wholesale'
        assert row['credit_limit'] == 5000
        assert row['is_active'] == 1

    def test_non_object_body_is_400(self, client):
        resp = client.post('/api/customers', json=[1, 2])
        assert resp.status_code == 400
        assert resp.json == {'error': 'Request body must be a JSON object'}

        created = _create(client)
        resp = client.put(f"/api/customers/{created['id']}", json=[1, 2])
        assert resp.status_code == 400
        assert client.get(f"/api/customers/{created['id']}").json['name'] == 'Atelier Benali'

    def test_update_can_clear_a_field(self, client):
        created = _create(client)
        client.put(f"/api/customers/{created['id']}", json={'name': 'Benali', 'phone': None})
        assert client.get(f"/api/customers/{created['id']}").json['phone'] is None


class TestSoftDelete:

    def test_deleted_customer_hidden_but_readable(self, client):
        keep = _create(client, name='Keep', email='keep@example.com')
        gone = _create(client, name='Gone', email='gone@example.com')

        resp = client.delete(f"/api/customers/{gone['id']}")
        assert resp.status_code == 200
        assert resp.json == {'message': 'Customer deleted successfully'}

        listed = client.get('/api/customers').json
        assert [c['id'] for c in listed] == [keep['id']]

        row = client.get(f"/api/customers/{gone['id']}").json
        assert row['is_active'] == 0

    def test_delete_missing_id_is_false(self, database):
        assert Customer(database).delete(404) is False


class TestDuplicateEmail:

    def test_duplicate_email_is_400(self, client):
        _create(client)
        resp = client.post('/api/customers', json=customer_payload(name='Other'))
        assert resp.status_code == 400
        assert resp.json['error'] == 'Customer with this email already exists'

    def test_unique_constraint_closes_check_then_insert_race(self, client, database):
        # First writer lands directly, as if it won the race after our check passed
        Customer(database).create(customer_payload())
        # A soft-deleted owner is invisible to get_by_email, so only the table can object
        database.run("UPDATE customers SET is_active = 0")

        resp = client.post('/api/customers', json=customer_payload(name='Second'))
        assert resp.status_code == 400
        assert resp.json['error'] == 'Customer with this email already exists'

    def test_update_to_taken_email_is_400(self, client):
        _create(client, email='a@example.com')
        second = _create(client, name='B', email='b@example.com')

        resp = client.put(f"/api/customers/{second['id']}", json={'name': 'B', 'email': 'a@example.com'})
        assert resp.status_code == 400

    def test_update_keeping_own_email_is_fine(self, client):
        created = _create(client)
        resp = client.put(
            f"/api/customers/{created['id']}",
            json={'name': 'Renamed', 'email': 'contact@benali.ma'},
        )
        assert resp.status_code == 200


# =============================================================================
# LISTING / SEARCH
# =============================================================================


class TestListCustomers:

    def test_ordered_by_name_with_pagination(self, client):
        for name in ('Charlie', 'alpha', 'Bravo', 'Delta'):
            _create(client, name=name, email=f'{name.lower()}@example.com')

        names = [c['name'] for c in client.get('/api/customers').json]
        assert names == sorted(names)

        limited = client.get('/api/customers?limit=2').json
        assert len(limited) == 2
        offset = client.get('/api/customers?limit=2&offset=2').json
        assert [c['name'] for c in limited + offset] == names

    def test_filters(self, client):
        _create(client, name='Rabat Shop', email='r@example.com', city='Rabat', customer_type='retail')
        _create(client, name='Casa Depot', email='c@example.com', city='Casablanca', customer_type='commercial')

        assert [c['name'] for c in client.get('/api/customers?city=Rabat').json] == ['Rabat Shop']
        assert [c['name'] for c in client.get('/api/customers?customer_type=commercial').json] == ['Casa Depot']
        assert [c['name'] for c in client.get('/api/customers?search=depot').json] == ['Casa Depot']
        assert [c['name'] for c in client.get('/api/customers?search=r@ex').json] == ['Rabat Shop']

    def test_search_requires_two_characters(self, client):
        resp = client.get('/api/customers/search?q=a')
        assert resp.status_code == 400
        assert resp.json['error'] == 'Search term must be at least 2 characters long'

    def test_search(self, client):
        _create(client, name='Karim', email='karim@example.com', phone='0611')
        gone = _create(client, name='Karima', email='karima@example.com', phone='0622')
        client.delete(f"/api/customers/{gone['id']}")

        results = client.get('/api/customers/search?q=kar').json
        assert [c['name'] for c in results] == ['Karim']

        by_phone = client.get('/api/customers/search?q=0611').json
        assert [c['name'] for c in by_phone] == ['Karim']

    def test_types(self, client):
        _create(client, name='A', email='a@example.com', customer_type='retail')
        _create(client, name='B', email='b@example.com', customer_type='retail')
        _create(client, name='C', email='c@example.com', customer_type='wholesale')

        assert client.get('/api/customers/types').json == [
            {'customer_type': 'retail', 'count': 2},
            {'customer_type': 'wholesale', 'count': 1},
        ]


# =============================================================================
# REPORTS
# =============================================================================


class TestCustomerReports:

    def test_stats_and_history(self, client):
        customer = _create(client)
        _sale(client, customer['id'], date='2024-01-01', price=50, quantity=2)
        _sale(client, customer['id'], date='2024-02-01', price=10, quantity=3)
        _sale(client, None, date='2024-03-01', price=99, quantity=1)

        stats = client.get(f"/api/customers/{customer['id']}/stats").json
        assert stats == {
            'totalSales': 2,
            'totalRevenue': 130.0,
            'averageSale': 65.0,
            'lastSaleDate': '2024-02-01',
            'lastSaleAmount': 30.0,
        }

        history = client.get(f"/api/customers/{customer['id']}/history?limit=1").json
        assert len(history) == 1
        assert history[0]['date'] == '2024-02-01'

    def test_stats_without_sales_are_zero(self, client):
        customer = _create(client)
        stats = client.get(f"/api/customers/{customer['id']}/stats").json
        assert stats['totalSales'] == 0
        assert stats['totalRevenue'] == 0.0
        assert stats['lastSaleDate'] is None

    def test_history_includes_product_name(self, client, database):
        customer = _create(client)
        product = client.post('/api/products', json={
            'name': 'Marteau', 'category': 'Outils', 'price': 50,
        }).json
        _sale(client, customer['id'], product_id=product['id'])

        history = Customer(database).get_purchase_history(customer['id'])
        assert history[0]['product_name'] == 'Marteau'

    def test_top_customers(self, client):
        big = _create(client, name='Big', email='big@example.com')
        small = _create(client, name='Small', email='small@example.com')
        _create(client, name='None', email='none@example.com')
        _sale(client, big['id'], price=500, quantity=2)
        _sale(client, big['id'], price=100, quantity=1)
        _sale(client, small['id'], price=10, quantity=1)

        top = client.get('/api/customers/top').json
        assert [c['name'] for c in top] == ['Big', 'Small']
        assert top[0]['total_orders'] == 2
        assert top[0]['total_revenue'] == 1100.0
        assert top[0]['avg_order_value'] == 550.0

        assert len(client.get('/api/customers/top?limit=1').json) == 1

    def test_inactive_customers(self, client, database):
        recent = _create(client, name='Recent', email='recent@example.com')
        stale = _create(client, name='Stale', email='stale@example.com')
        _create(client, name='Never', email='never@example.com')
        _sale(client, recent['id'], date=days_back(5))
        _sale(client, stale['id'], date=days_back(200))

        names = [c['name'] for c in client.get('/api/customers/inactive').json]
        assert names == ['Never', 'Stale']

        wider = Customer(database).get_inactive_customers(days_inactive=1)
        assert {c['name'] for c in wider} == {'Never', 'Stale', 'Recent'}

    @pytest.mark.parametrize("path", ['/top', '/inactive', '/types'])
    def test_reports_on_empty_store(self, client, path):
        resp = client.get(f'/api/customers{path}')
        assert resp.status_code == 200
        assert resp.json == []

    def test_sales_without_customer_do_not_count(self, database):
        Sale(database).create({
            'date': '2024-01-01', 'productName': 'X', 'price': 1, 'quantity': 1,
            'category': 'X', 'totalPrice': 1,
        })
        assert Customer(database).get_top_customers() == []
