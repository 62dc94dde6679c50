"""Per-conversation ledgers — history, to-dos and remembered facts.

Layout:
    ~/.stark/data/
    ├── conversations.json     # chat_id → [{role, content}, ...]  (bounded window)
    ├── todos.json             # chat_id → [{id, text, done, addedBy, date}, ...]
    └── memory.json            # chat_id → ["fact", ...]            (append-only)

Each ledger owns one table of a shared JsonStore. There is no cross-ledger
transaction: every ledger saves its own document after each mutation.
"""
