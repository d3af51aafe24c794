"""
Tests Module: Unit Tests

Test Coverage:
    - Object key builder (partitions, random disambiguator, suffixes)
    - Gzip compression
    - Session factory (client kwargs, validation, role assumption)
    - Buffer writer (orchestration, error propagation, metrics)
    - Configuration, errors, logging, command line
"""
