"""Core normalization and money maths for the bet ledger.

This package contains pure building blocks:

- ``taxonomy``   — closed reference sets (bookmakers, bet types, markets, ...)
- ``validation`` — Accepted / Defaulted / Rejected field results
- ``odds``       — decimal ⇄ fractional odds conversion and formatting
- ``normalizer`` — raw field canonicalization and keyword inference
- ``profit``     — profit / loss and potential return
- ``record``     — the canonical BetRecord and its build/merge rules
- ``repair``     — idempotent reclassification of persisted bets

Nothing in this package imports from ``ledger.services`` or ``ledger.models``.
All modules are side-effect-free and unit-testable in isolation.
"""
