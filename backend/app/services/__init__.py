"""
Todo Cards Backend — Services Layer
=====================================

Service Inventory:
    - UserService: registration, login/logout, token authentication
    - CardService: card create/list/update/delete rules
    - run_in_transaction: commit-or-rollback wrapper shared by both
"""
