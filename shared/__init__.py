"""
Shared Kernel

Building blocks used by every TrailHub app: domain events and the message
bus, status transition tables, value objects, the error taxonomy, the
response envelope and reference code generation.
"""
