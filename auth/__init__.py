"""auth/ -- Accounts, password hashing and session tokens for the Movies API.

Layer rule: auth/ imports only stdlib, third-party libraries and core/.
It does NOT import from api/, favorites/, or cache/.
api/ imports from auth/, not the other way around.
"""
