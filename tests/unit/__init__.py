"""Unit tests for individual components in isolation.

Coverage:
    - streaming/: Frame splitting, event decoding and turn state
    - tasks/: Registry, polling and notification views
    - config: Environment loading and validation

Time-dependent code runs on a virtual clock, so no test sleeps.
"""
