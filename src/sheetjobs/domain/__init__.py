"""
Domain Layer - Core Business Logic

Job lifecycle rules, record values and per-record processing.
Framework-independent and highly testable.

Subdomains:
    - jobs: Job entity, states, transitions, progress arithmetic
    - records: Record values, multi-value normalization, RecordProcessor
    - shared: Exception hierarchy
"""
