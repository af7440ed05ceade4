"""Application layer: scope resolution, admission decisions, and logger façades."""
