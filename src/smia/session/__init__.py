"""
Session handling for SMIA.

- store:      the local SessionStore
- reconciler: seeds the store from the server's authoritative session
- auth:       interactive login / logout
"""
