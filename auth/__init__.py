"""
auth — credential and session-token handling.

Provides:
  • bcrypt password hashing (``PasswordHasher``)
  • HMAC-signed session tokens (``TokenIssuer``)
  • Register / sign-in API routes
  • The authorization gate and ``get_current_user_id`` FastAPI dependency
"""
