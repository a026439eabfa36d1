"""
catalog_http_api.routers
------------------------

FastAPI routers, mounted by ``create_app`` under the API prefix.
"""
