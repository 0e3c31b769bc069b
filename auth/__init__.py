"""
auth: user authentication module.

Provides:
  • Password hashing (bcrypt)
  • JWT creation & verification
  • Google Sign-In via Firebase ID tokens
  • Register / login / google-signin API routes
  • ``get_current_user_id`` FastAPI dependency
"""
