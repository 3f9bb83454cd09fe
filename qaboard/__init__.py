"""Question/answer board with keyword search across threads."""
