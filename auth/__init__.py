"""
auth — User authentication module.

Provides:
  • HMAC-signed bearer token creation & verification
  • Password hashing (bcrypt)
  • Signup / Login / Protected API routes
  • ``get_current_claims`` FastAPI dependency
"""
