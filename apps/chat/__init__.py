"""Chat app: one-to-one direct messages between users."""
