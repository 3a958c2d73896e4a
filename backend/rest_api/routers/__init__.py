"""
API routers.

- public: health checks
- catalog: establishments, categories, products, offers
- orders: order creation and status
- payments: payment intents, remote orders, provider webhooks
- admin: login, dashboard, product management
"""
