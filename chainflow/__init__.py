"""
chainflow

Builds declarative state machine definitions out of composable chains of
states, and compiles them into a serializable definition plus the
permission statements the states require.
"""

__version__ = "1.0.0"
