"""Commands loaded by default. Each public module exports ``COMMAND``."""
