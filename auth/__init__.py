"""
auth — User authentication module.

Provides:
  • Signed, expiring bearer tokens (HMAC-SHA256)
  • Password hashing (bcrypt, per-call salt)
  • Register / Login API routes
  • ``get_current_user_id`` FastAPI dependency
"""
