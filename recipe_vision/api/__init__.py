"""Recipe Vision adapter package.

Architectural role:
- Defines the external interaction boundary for HTTP and CLI interfaces.
- Performs transport-level validation and response shaping.
- Delegates selection, instruction, and submission work to the core layer.
"""
