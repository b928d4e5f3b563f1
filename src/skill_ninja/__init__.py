"""skill-ninja - keep AI assistant instruction documents in sync with workspace skills."""
