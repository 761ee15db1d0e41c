"""Authentication and authorization.

Learn: Every role (admin, supervisor, student) signs in with
email/password and gets a JWT access/refresh pair:

- tokens.py   → issue/verify tokens (explicit TokenConfig, two secrets)
- password.py → bcrypt hashing
- stores.py   → one credential store per role table
- gate.py     → FastAPI dependencies: authenticate, then check the role
- cookies.py  → HTTP-only cookie policy for both tokens
"""
