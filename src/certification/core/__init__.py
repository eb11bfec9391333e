"""Core business logic module.

Modules:
- roles: Admin/Evaluator role registry
- address_set: insertion-ordered address set with index-0 sentinel
- inventory: course records, places and evaluators
- enrollment: place purchases and per-student course index
- evaluation: append-only marks and pass tally
- certificates: post-exam finalization
- treasury: fee custody and withdrawals
- ledger: ownership ledger collaborator
- events: notifications emitted by operations
- platform: facade running each operation in a transaction
"""

__all__ = [
    "roles",
    "address_set",
    "inventory",
    "enrollment",
    "evaluation",
    "certificates",
    "treasury",
    "ledger",
    "events",
    "platform",
    "errors",
    "models",
]
