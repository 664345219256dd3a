"""
Check evaluators.

Contains:
- MFAEvaluator - покрытие пользователей MFA
- RLSEvaluator - включение RLS на таблицах
- PITREvaluator - настройка Point in Time Recovery
"""

from .mfa import MFAEvaluator
from .rls import RLSEvaluator
from .pitr import PITREvaluator

__all__ = ["MFAEvaluator", "RLSEvaluator", "PITREvaluator"]
