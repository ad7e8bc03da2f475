"""HTTP API layer (FastAPI).

IMPORT RULES:
- CAN import from: application, domain, bootstrap
- Infrastructure is reached only through bootstrap wiring
"""
