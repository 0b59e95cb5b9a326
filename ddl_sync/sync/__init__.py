"""Two-schema diff engines and the sync orchestrator."""
