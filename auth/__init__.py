"""auth/ -- User registry, credential checks and sessions for the auth directory.

Layer rule: auth/ imports only stdlib, third-party libraries and core/.
It does NOT import from main. main imports from auth/, not the other way around.
"""
