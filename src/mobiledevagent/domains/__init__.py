"""Domain bounded contexts for mobile-dev-agent.

- shared: element refs, roles and the error hierarchy
- snapshot: platform parsers, canonical elements, UISnapshot and its store
- selector: selector token grammar and tap target resolution
- retention: run directory scanning, GC planning and execution
"""
