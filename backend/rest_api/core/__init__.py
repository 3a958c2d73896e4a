"""
Application wiring: lifespan, middlewares, CORS and admin auth.
"""
