"""
Static and demo data for the ERP console.

This package contains fixture payloads used by DemoErpService for
development, testing, and demonstrations without a running API.

Modules:
- demo_records: Raw API-shaped payloads for every record type
"""
