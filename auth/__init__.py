"""auth/ -- Credential primitives for PermaHub: password hashing, tokens, bearer dependency.

Layer rule: auth/ imports only stdlib, third-party libraries, and core/.
It does NOT import from api/ or accounts/.
api/ and accounts/ import from auth/, not the other way around.
"""
