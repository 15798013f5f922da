"""Drawing for the wheel composition."""
