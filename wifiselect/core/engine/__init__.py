"""Core network selection engine.

Responsibilities:
  - Provide the NetworkSelector that orchestrates filtering, nomination,
    scoring and connect-choice resolution per scan.
  - Must not perform association or radio control; decisions only.
"""
