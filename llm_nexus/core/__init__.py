"""Core building blocks: configuration, logging, exceptions, interfaces, background work."""
