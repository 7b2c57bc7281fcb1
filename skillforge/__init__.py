"""
Skillforge - Skill-Line DSL Engine

A deterministic engine for the skill-line scripting format used to describe
mob and skill behaviors. The engine turns raw skill lines into structured data
and provides:
- Parsing and canonical formatting
- Context-aware validation against a reference catalog
- Duplicate and similarity detection with consolidation advice
- Display grouping of ordered line lists
- Batch analysis of whole mob/skill documents
"""

__version__ = "0.1.0"
