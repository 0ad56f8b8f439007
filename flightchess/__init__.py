"""Flight chess rules: board generation, turn state machine, local play."""
