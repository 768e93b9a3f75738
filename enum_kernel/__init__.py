"""
Enum Kernel

Materializes enum-typed fields of SQLAlchemy records on load:
- Closed, value-identified enum types with a total lookup
- Per-record-type enum field discovery, cached for the process lifetime
- Load/refresh hooks that coerce raw scalars without marking records dirty
"""

__version__ = "0.1.0"
