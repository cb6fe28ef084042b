"""Key-value store backed coordination primitives."""
