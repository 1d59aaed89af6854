"""
auth — User authentication module.

Provides:
  • JWT creation & verification (python-jose, HS256)
  • Password hashing (bcrypt)
  • Signup / Login / Me API routes
  • ``get_current_user_id`` FastAPI dependency
"""
