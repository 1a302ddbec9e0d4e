"""Manager/worker execution over a message-passing transport."""
