"""
Todo API package.

Owner-scoped todo service (FastAPI) plus a small HTTP client and list
controller for consuming it. The ASGI application lives at todo_api.main:app.
"""
