"""Business services: movement recording, propagation, snapshot upkeep."""
