"""Directory semantics on top of a flat object store."""
