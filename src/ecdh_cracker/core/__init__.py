"""Field, curve and key-exchange primitives."""
