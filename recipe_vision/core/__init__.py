"""Core pipeline package.

Architectural role:
    Holds the session state and the submit pipeline that sit between the
    API/CLI adapters and the lower-level encoder and generation adapters.

Composition:
    - `catalog`: static catalog source.
    - `selection`: active catalog reference and its load error.
    - `state`: submission lifecycle values.
    - `errors`: failure taxonomy and user-visible error rendering.
    - `formatter`: display formatting of generated text.
    - `orchestrator`: guarded submit pipeline and session accessors.

Determinism and side effects:
    Package import itself is side-effect free.
"""
