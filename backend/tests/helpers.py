"""Shared payload builders for the API tests."""

from datetime import timedelta

from bricopos.time_utils import today


def days_back(days: int) -> str:
    """ISO date `days` before today."""
    return (today() - timedelta(days=days)).isoformat()


def sale_payload(**overrides) -> dict:
    payload = {
        'date': '2024-01-01',
        'productName': 'Hammer',
        'price': 50,
        'quantity': 2,
        'category': 'Outils manuels',
    }
    payload.update(overrides)
    return payload


def customer_payload(**overrides) -> dict:
    payload = {
        'name': 'Atelier Benali',
        'email': 'contact@benali.ma',
        'phone': '0522000000',
        'city': 'Casablanca',
        'customer_type': 'wholesale',
        'credit_limit': 5000,
    }
    payload.update(overrides)
    return payload


def product_payload(**overrides) -> dict:
    payload = {
        'name': 'Marteau 500g',
        'sku': 'MAR-500',
        'barcode': '6111000000017',
        'category': 'Outils manuels',
        'price': 50,
        'cost': 32,
        'stock_quantity': 10,
    }
    payload.update(overrides)
    return payload
