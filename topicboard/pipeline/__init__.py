"""
Topic read pipeline.

Turns raw record-store payloads into immutable display models.

Modules:
    models - Domain types (Topic, Viewpoint, Stance, view models)
    formula - Filter formula construction
    normalize - Tolerant field normalization
    resolver - Linked viewpoint resolution
    aggregate - Stance grouping
    assembler - Topic view model and topic index assembly
"""
