"""Command-line tools for resumeVault.

- ``python -m src.cli.ingest resume --file X.pdf`` ingests one PDF résumé.
- ``python -m src.cli.ingest check --summary TEXT`` runs the duplicate check.
- ``python -m src.cli.ingest stats`` shows the record store size.

Heavy imports (LLM SDKs, chromadb) are deferred inside the handlers so
``--help`` stays fast.
"""
