"""Pipeline stages and the batch orchestrator."""
