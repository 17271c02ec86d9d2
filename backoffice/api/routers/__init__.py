"""
FastAPI routers for the master-data administration API.

Catalog and geography routers sit on top of the generic record engine in
``backoffice.domain``; auth and admin_users cover the operator accounts.
"""
