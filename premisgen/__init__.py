"""premisgen: PREMIS v3 preservation records for SIP directory trees.

The builder synthesizes schema-binding instances through runtime capability
probing, so it keeps working when the generated binding shape shifts between
schema-compiler runs.
"""

__version__ = "0.3.0"
