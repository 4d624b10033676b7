"""
PoE power driver for bare-metal machines.

This package provides:
- UniFi controller API client (live and in-memory)
- Mapping of machine system ids to switch ports
- Power status / power on / power off by toggling the port's PoE mode
- A small Flask app exposing those operations to MAAS
"""
