"""
auth — User authentication module.

Provides:
  • Signed bearer token creation & verification
  • Password hashing (bcrypt)
  • Register / Login / Forgot-password API routes
  • ``get_current_identity`` FastAPI dependency
"""
