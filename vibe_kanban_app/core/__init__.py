"""Core domain types and pure gating logic (no I/O)."""
