"""Application layer - the stateful core components."""
