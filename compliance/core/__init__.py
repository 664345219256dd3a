"""
Core components for the compliance checker.

Contains:
- Data models (Credentials, CheckResult, EvidenceEntry, etc.)
- Remote call gateway (Management API + data-plane session)
- Base class for check evaluators
"""
