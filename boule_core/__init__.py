"""
Boule core Python package.

This package holds the rules engine and state lifecycle of the ball-sorting
puzzle. The Flask surface (app.py) and the terminal front end (cli.py) only
translate input into calls on these modules.
Modules:
- board.py: Slot, BoardState
- intent.py: versioned move intents
- session.py: GameSession state machine
- ledger.py: HistoryLedger of best results per configuration
- snapshot.py, db.py, persistence.py: what is saved and how it is stored
"""
