"""Storage collaborator: batch INSERT helper (db.batch_insert) and the guest store (db.guest_store)."""
