"""Core image helpers shared by the map generators and the compositor."""
