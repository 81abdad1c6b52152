"""
Mystery Room - puzzle progression engine for the interactive mystery room exhibit.

Sub-packages:
- `models/`: Pydantic models for room configuration, progress and events
- `engine/`: Solvers, room controller, scheduler and room loading
- `api/`: FastAPI routes consumed by the presentation layer
"""

__version__ = "0.1.0"
