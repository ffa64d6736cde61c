"""
convoflow - graph state and linearization engine for branching conversation flows.

Nodes reference content records, edges connect nodes, and the engine derives a
single deterministic playback order that is pushed to a preview surface over
an injectable message channel.
"""

__version__ = "0.1.0"
