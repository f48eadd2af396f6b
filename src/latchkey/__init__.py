"""Latchkey - authentication and session core.

Registration, login, access/refresh token issuance and rotation,
revocation, and single-use password reset tokens.
"""

__version__ = "0.1.0"
