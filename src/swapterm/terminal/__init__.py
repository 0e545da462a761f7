"""Command interpreter, command table and output messages."""
