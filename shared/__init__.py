"""
Shared Kernel

Domain base classes, the unit of work and the message bus used by the
guest-house booking apps.
"""
