"""Launcher plugin host: discovery, process channels and the JSON line protocol."""
