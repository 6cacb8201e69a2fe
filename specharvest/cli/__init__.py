"""Command-line tools for specharvest.

- ``specharvest run`` -- harvest new items from the configured categories.
- ``specharvest status`` -- ledger size per category and budget settings.
- ``specharvest rebuild-ledger`` -- rebuild the ledger from the JSON output.
- ``specharvest load-sql`` -- bulk-load the JSON output into SQLite.

Heavy imports are deferred inside the handlers so ``--help`` stays fast.
"""
