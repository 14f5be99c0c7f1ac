"""Domain logic: pure helpers over loaded records plus the audit side effects."""
