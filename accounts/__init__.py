"""accounts/ -- User accounts: domain model, persistence, mail, and workflows.

Layer rule: accounts/ may import from core/ and auth/.
It does NOT import from api/. api/ imports from accounts/, not the other way around.
"""
