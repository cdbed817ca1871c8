"""State layer.

The ledger is the single owner of notification ids; the monitor state
holds the latest device counts and per-loop failure bookkeeping. Both are
safe to read from a presentation thread while the event loop writes.
"""
