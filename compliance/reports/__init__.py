"""
Evidence reporting.

Contains:
- EvidenceLog - append-only журнал результатов с экспортом в JSON/CSV
"""
