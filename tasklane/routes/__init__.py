"""
Routes Package

FastAPI routers, registered by tasklane.app_factory.register_routers.
"""
