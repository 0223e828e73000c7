"""
Cluster Console backend.

Role-based access control for a multi-tenant messaging cluster and GitHub
login for its management console.
"""
