"""
Parliament Session - live chamber state and weighted vote tally service.

Tracks which members are seated, arbitrates the speaking and objection
queue, sequences proposals, collects votes, and closes each voting cycle
with a weighted tally that redistributes the voting power of absent
members within their affiliation group.
"""

__version__ = "0.1.0"
__all__ = ["__version__"]
