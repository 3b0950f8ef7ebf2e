"""Record services: repository client, record store, edit session, orchestration."""
