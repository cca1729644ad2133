"""Per-visit pricing for technician service days."""
