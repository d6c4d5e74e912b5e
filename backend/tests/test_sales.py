"""
Sales tests.

Verifies:
- totalPrice = price * quantity, non-positive price/quantity rejected
- create then get agree on the id
- unknown customer_id / product_id and non-object bodies answer 400
- update keeps optional fields the body leaves out
- hard delete, and 404 for unknown ids
- listing order, filters, limit and offset
- dashboard aggregates and the trailing daily revenue window
"""

import pytest

from bricopos.models import Sale
from helpers import customer_payload, days_back, product_payload, sale_payload


def _create(client, **overrides):
    resp = client.post('/api/sales', json=sale_payload(**overrides))
    assert resp.status_code == 201, resp.json
    return resp.json


# =============================================================================
# CREATE / READ
# =============================================================================


class TestCreateSale:

    def test_total_is_price_times_quantity(self, client):
        created = _create(client)
        assert created['totalPrice'] == 100

        resp = client.get(f"/api/sales/{created['id']}")
        assert resp.status_code == 200
        assert resp.json['id'] == created['id']
        assert resp.json['totalPrice'] == 100
        assert resp.json['date'] == '2024-01-01'
        assert resp.json['productName'] == 'Hammer'

    def test_decimal_price(self, client):
        created = _create(client, price='12.25', quantity='4')
        assert created['price'] == 12.25
        assert created['quantity'] == 4
        assert created['totalPrice'] == 49.0

    def test_text_fields_are_trimmed(self, client):
        created = _create(client, productName='  Hammer  ', category=' Outils ')
        assert created['productName'] == 'Hammer'
        assert created['category'] == 'Outils'

    @pytest.mark.parametrize("missing", ['date', 'productName', 'price', 'quantity', 'category'])
    def test_missing_field_is_400(self, client, missing):
        payload = sale_payload()
        del payload[missing]
        resp = client.post('/api/sales', json=payload)
        assert resp.status_code == 400
        assert 'Missing required fields' in resp.json['error']

    @pytest.mark.parametrize("field,value", [('price', -5), ('quantity', -1)])
    def test_non_positive_values_are_400(self, client, field, value):
        resp = client.post('/api/sales', json=sale_payload(**{field: value}))
        assert resp.status_code == 400
        assert resp.json['error'] == 'Price and quantity must be greater than 0'

    def test_zero_price_is_400(self, client):
        resp = client.post('/api/sales', json=sale_payload(price=0))
        assert resp.status_code == 400

    def test_invalid_date_is_400(self, client):
        resp = client.post('/api/sales', json=sale_payload(date='01/02/2024'))
        assert resp.status_code == 400
        assert 'date' in resp.json['error']

    def test_unknown_payment_method_is_400(self, client):
        resp = client.post('/api/sales', json=sale_payload(payment_method='bitcoin'))
        assert resp.status_code == 400
        assert 'payment_method' in resp.json['error']

    def test_optional_fields_are_stored(self, client):
        created = _create(client, payment_method='credit', discount=5, tax_amount=20, notes='VIP')
        row = client.get(f"/api/sales/{created['id']}").json
        assert row['payment_method'] == 'credit'
        assert row['discount'] == 5
        assert row['tax_amount'] == 20
        assert row['notes'] == 'VIP'

    @pytest.mark.parametrize("field", ['customer_id', 'product_id'])
    def test_unknown_reference_is_400(self, client, field):
        resp = client.post('/api/sales', json=sale_payload(**{field: 999}))
        assert resp.status_code == 400
        assert resp.json['error'].startswith(f'{field} 999 does not match')
        assert client.get('/api/sales').json == []

    def test_unknown_reference_on_update_is_400(self, client):
        created = _create(client)
        resp = client.put(f"/api/sales/{created['id']}", json=sale_payload(customer_id=999))
        assert resp.status_code == 400
        assert 'customer_id' in resp.json['error']

    def test_duplicate_sale_number_is_400(self, client):
        _create(client, sale_number='V-0001')
        resp = client.post('/api/sales', json=sale_payload(sale_number='V-0001'))
        assert resp.status_code == 400
        assert 'sale_number' in resp.json['error']

    @pytest.mark.parametrize("body", [[1, 2], 'text', 5])
    def test_non_object_body_is_400(self, client, body):
        resp = client.post('/api/sales', json=body)
        assert resp.status_code == 400
        assert resp.json == {'error': 'Request body must be a JSON object'}

        created = _create(client)
        resp = client.put(f"/api/sales/{created['id']}", json=body)
        assert resp.status_code == 400
        assert resp.json == {'error': 'Request body must be a JSON object'}

    def test_unknown_sale_is_404(self, client):
        resp = client.get('/api/sales/999')
        assert resp.status_code == 404
        assert resp.json['error'] == 'Sale not found'


# =============================================================================
# UPDATE / DELETE
# =============================================================================


class TestUpdateDeleteSale:

    def test_update_recomputes_total(self, client):
        created = _create(client)
        resp = client.put(f"/api/sales/{created['id']}", json=sale_payload(price=10, quantity=3))
        assert resp.status_code == 200
        assert resp.json['totalPrice'] == 30

        row = client.get(f"/api/sales/{created['id']}").json
        assert row['totalPrice'] == 30
        assert row['quantity'] == 3

    def test_update_unknown_sale_is_404(self, client):
        resp = client.put('/api/sales/42', json=sale_payload())
        assert resp.status_code == 404

    def test_update_validates_payload(self, client):
        created = _create(client)
        resp = client.put(f"/api/sales/{created['id']}", json=sale_payload(quantity=-2))
        assert resp.status_code == 400

    def test_update_keeps_omitted_optional_fields(self, client):
        customer = client.post('/api/customers', json=customer_payload()).json
        product = client.post('/api/products', json=product_payload()).json
        created = _create(
            client, customer_id=customer['id'], product_id=product['id'],
            payment_method='credit', discount=5, tax_amount=20,
            sale_number='V-0001', notes='VIP',
        )

        resp = client.put(f"/api/sales/{created['id']}", json=sale_payload(quantity=3))
        assert resp.status_code == 200

        row = client.get(f"/api/sales/{created['id']}").json
        assert row['quantity'] == 3
        assert row['customer_id'] == customer['id']
        assert row['product_id'] == product['id']
        assert row['payment_method'] == 'credit'
        assert row['discount'] == 5
        assert row['tax_amount'] == 20
        assert row['sale_number'] == 'V-0001'
        assert row['notes'] == 'VIP'

    def test_update_can_clear_an_optional_field(self, client):
        created = _create(client, notes='VIP')
        resp = client.put(f"/api/sales/{created['id']}", json=sale_payload(notes=None))
        assert resp.status_code == 200
        assert client.get(f"/api/sales/{created['id']}").json['notes'] is None

    def test_delete_removes_row(self, client):
        created = _create(client)

        resp = client.delete(f"/api/sales/{created['id']}")
        assert resp.status_code == 200
        assert resp.json == {'message': 'Sale deleted successfully'}

        assert client.get(f"/api/sales/{created['id']}").status_code == 404
        assert client.delete(f"/api/sales/{created['id']}").status_code == 404

    def test_delete_unknown_sale_is_not_found_signal(self, database):
        assert Sale(database).delete(12345) is False


# =============================================================================
# LISTING
# =============================================================================


class TestListSales:

    def test_most_recent_date_first(self, client):
        _create(client, date='2024-01-02', productName='B')
        _create(client, date='2024-01-03', productName='C')
        _create(client, date='2024-01-01', productName='A')

        rows = client.get('/api/sales').json
        assert [r['productName'] for r in rows] == ['C', 'B', 'A']

    def test_limit_and_offset(self, client):
        for day in range(1, 6):
            _create(client, date=f'2024-01-0{day}', productName=f'P{day}')

        limited = client.get('/api/sales?limit=2').json
        assert [r['productName'] for r in limited] == ['P5', 'P4']

        paged = client.get('/api/sales?limit=2&offset=2').json
        assert [r['productName'] for r in paged] == ['P3', 'P2']

        skipped = client.get('/api/sales?offset=3').json
        assert [r['productName'] for r in skipped] == ['P2', 'P1']

        for query in ('limit=0', 'limit=-1', 'offset=-2'):
            rows = client.get(f'/api/sales?{query}').json
            assert [r['productName'] for r in rows] == ['P5', 'P4', 'P3', 'P2', 'P1']

    def test_filters(self, client):
        _create(client, date='2024-01-01', productName='Hammer', category='Outils manuels')
        _create(client, date='2024-01-15', productName='Drill', category='Outillage électrique')
        _create(client, date='2024-02-01', productName='Claw hammer', category='Outils manuels')

        by_category = client.get('/api/sales', query_string={'category': 'Outils manuels'}).json
        assert {r['productName'] for r in by_category} == {'Hammer', 'Claw hammer'}

        by_date = client.get('/api/sales?date=2024-01-15').json
        assert [r['productName'] for r in by_date] == ['Drill']

        in_range = client.get('/api/sales?startDate=2024-01-01&endDate=2024-01-31').json
        assert {r['productName'] for r in in_range} == {'Hammer', 'Drill'}

        open_range = client.get('/api/sales?startDate=2024-01-20').json
        assert len(open_range) == 3

        searched = client.get('/api/sales?search=HAMMER').json
        assert {r['productName'] for r in searched} == {'Hammer', 'Claw hammer'}

    def test_categories_are_distinct_and_sorted(self, client):
        _create(client, category='Quincaillerie')
        _create(client, category='Outils manuels')
        _create(client, category='Quincaillerie')

        assert client.get('/api/sales/categories').json == ['Outils manuels', 'Quincaillerie']


# =============================================================================
# DASHBOARD
# =============================================================================


class TestSalesStats:

    def test_empty_store_has_zeroed_stats(self, client):
        stats = client.get('/api/sales/stats').json
        assert stats['totalSales'] == 0
        assert stats['totalRevenue'] == 0.0
        assert stats['averageSale'] == 0.0
        assert stats['topCategories'] == []
        assert stats['recentSales'] == []
        assert stats['dailyRevenue'] == []

    def test_stats(self, client):
        _create(client, price=50, quantity=2, category='Outils manuels')
        _create(client, price=10, quantity=5, category='Quincaillerie')
        _create(client, price=25, quantity=2, category='Outils manuels')

        stats = client.get('/api/sales/stats').json
        assert stats['totalSales'] == 3
        assert stats['totalRevenue'] == 200.0
        assert stats['totalProducts'] == 9
        assert stats['averageSale'] == pytest.approx(66.666, rel=1e-3)
        assert stats['topCategories'][0] == {'name': 'Outils manuels', 'sales': 2, 'revenue': 150.0}
        assert len(stats['recentSales']) == 3

    def test_recent_sales_newest_first(self, database):
        sales = Sale(database)
        for index in range(7):
            sales.create({
                'date': '2024-01-01', 'productName': f'P{index}', 'price': 1,
                'quantity': 1, 'category': 'X', 'totalPrice': 1,
            })

        recent = sales.get_recent_sales(5)
        assert [r['productName'] for r in recent] == ['P6', 'P5', 'P4', 'P3', 'P2']
        assert all(isinstance(r['totalPrice'], float) for r in recent)

    def test_daily_revenue_window(self, client, database):
        _create(client, date=days_back(0), price=10, quantity=1)
        _create(client, date=days_back(0), price=5, quantity=2)
        _create(client, date=days_back(3), price=7, quantity=1)
        _create(client, date=days_back(6), price=1, quantity=1)
        _create(client, date=days_back(7), price=100, quantity=1)
        _create(client, date=days_back(30), price=100, quantity=1)

        revenue = Sale(database).get_daily_revenue(7)
        assert len(revenue) <= 7
        assert revenue == [
            {'date': days_back(6), 'revenue': 1.0},
            {'date': days_back(3), 'revenue': 7.0},
            {'date': days_back(0), 'revenue': 20.0},
        ]

    def test_daily_revenue_never_exceeds_window(self, client, database):
        for day in range(14):
            _create(client, date=days_back(day), price=1, quantity=1)

        revenue = Sale(database).get_daily_revenue(7)
        assert len(revenue) == 7
        assert revenue[0]['date'] == days_back(6)
