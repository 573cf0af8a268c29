"""Domain layer: entities, state machines, policies and ports. No I/O."""
