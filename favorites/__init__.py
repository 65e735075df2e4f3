"""favorites/ -- Per-user favorite movies backed by the OMDb catalog cache.

Layer rule: favorites/ may import from core/, cache/ and auth.store (for the
users table its foreign key references). It does NOT import from api/.
"""
