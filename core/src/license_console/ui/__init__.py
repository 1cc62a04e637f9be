"""Server-rendered operator console.

This UI is intentionally lightweight:
- served by the console FastAPI service
- every screen is rendered from the licensing backend API
- uses simple HTML forms + redirects

Auth: the backend bearer token lives in an HttpOnly cookie.
"""
