"""Bakery storefront package.

Organized by feature modules (users, products, orders, storefront, dashboard)
with a thin Flask controller layer over service/repository layers.
"""
