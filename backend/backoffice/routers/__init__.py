# API Routers
from backoffice.routers import auth, products, permissions, roles, suppliers, orders, users

__all__ = ['auth', 'products', 'permissions', 'roles', 'suppliers', 'orders', 'users']
