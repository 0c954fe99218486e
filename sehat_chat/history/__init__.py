"""In-memory conversation history for the active chat session."""
