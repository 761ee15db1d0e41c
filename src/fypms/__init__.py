"""FYPMS — final-year project management backend.

Admins manage supervisors, supervisors manage their students, and
students submit proposals and projects for review. Every role signs in
with email/password and receives an access/refresh token pair.
"""

__version__ = "0.1.0"
